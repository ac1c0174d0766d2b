import os

import pytest

from minishell.environment import ShellState
from minishell.errors import heredoc_eof_warning
from minishell.heredoc import (
    HeredocAborted,
    count_heredocs,
    create_heredoc_file,
    get_delimiter,
    process_heredocs,
    read_heredoc_body,
)


def scripted(*lines):
    """read_line stand-in: returns the given lines, then None."""
    remaining = list(lines)

    def read_line(prompt):
        if not remaining:
            return None
        item = remaining.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    return read_line


def test_get_delimiter_plain():
    assert get_delimiter("cat << EOF", 0) == "EOF"


def test_get_delimiter_without_space_and_followed_by_pipe():
    assert get_delimiter("cat <<END| wc", 0) == "END"


def test_get_delimiter_quoted():
    assert get_delimiter('cat << "EOF" > out', 0) == "EOF"


def test_get_delimiter_second_occurrence():
    assert get_delimiter("cat << A << B", 1) == "B"
    assert get_delimiter("cat << A << B", 2) is None


def test_get_delimiter_ignores_double_quoted_operator():
    assert get_delimiter('echo "<< X" << Y', 0) == "Y"


def test_count_heredocs():
    assert count_heredocs("cat << A << B") == 2
    assert count_heredocs("cat < A > B") == 0


def test_create_heredoc_file(tmp_path):
    first = create_heredoc_file(str(tmp_path))
    second = create_heredoc_file(str(tmp_path))
    assert first != second
    for path in (first, second):
        assert os.path.dirname(path) == str(tmp_path)
        assert os.path.isfile(path)
        assert os.path.getsize(path) == 0
        int(os.path.basename(path))


def test_read_body_expands_and_stops_at_delimiter(tmp_path):
    path = create_heredoc_file(str(tmp_path))
    count = read_heredoc_body(
        path, "EOF", scripted("hi $USER", "plain", "EOF", "after"), ["USER=alice"], 0
    )
    assert count == 2
    with open(path, encoding="utf-8") as body:
        assert body.read() == "hi alice\nplain\n"


def test_read_body_eof_after_lines_is_accepted(tmp_path):
    path = create_heredoc_file(str(tmp_path))
    assert read_heredoc_body(path, "EOF", scripted("one"), [], 0) == 1
    with open(path, encoding="utf-8") as body:
        assert body.read() == "one\n"


def test_read_body_eof_at_once_aborts(tmp_path):
    path = create_heredoc_file(str(tmp_path))
    with pytest.raises(HeredocAborted) as caught:
        read_heredoc_body(path, "EOF", scripted(), [], 0)
    assert caught.value.status == 0
    assert str(caught.value) == heredoc_eof_warning("EOF", 1)


def test_read_body_interrupted(tmp_path):
    path = create_heredoc_file(str(tmp_path))
    with pytest.raises(HeredocAborted) as caught:
        read_heredoc_body(path, "EOF", scripted("x", KeyboardInterrupt()), [], 0)
    assert caught.value.status == 130


def test_process_heredocs_rewrites_line(tmp_path):
    state = ShellState(envp=["NAME=bob"], heredoc_dir=str(tmp_path))
    line = process_heredocs("cat << EOF", state, scripted("hello $NAME", "EOF"))
    prefix = "cat << "
    assert line.startswith(prefix)
    path = line[len(prefix):]
    assert os.path.dirname(path) == str(tmp_path)
    with open(path, encoding="utf-8") as body:
        assert body.read() == "hello bob\n"


def test_process_heredocs_two_documents(tmp_path):
    state = ShellState(heredoc_dir=str(tmp_path))
    line = process_heredocs("cat << A << B", state, scripted("1", "A", "2", "B"))
    words = line.split()
    assert words[0] == "cat"
    assert words[1] == words[3] == "<<"
    contents = []
    for path in (words[2], words[4]):
        with open(path, encoding="utf-8") as body:
            contents.append(body.read())
    assert contents == ["1\n", "2\n"]


def test_process_heredocs_abort_removes_files(tmp_path):
    state = ShellState(heredoc_dir=str(tmp_path))
    with pytest.raises(HeredocAborted):
        process_heredocs("cat << A << B", state, scripted("1", "A", KeyboardInterrupt()))
    assert list(tmp_path.iterdir()) == []


def test_process_heredocs_without_heredoc(tmp_path):
    state = ShellState(heredoc_dir=str(tmp_path))
    assert process_heredocs("echo hi", state, scripted()) == "echo hi"
    assert list(tmp_path.iterdir()) == []