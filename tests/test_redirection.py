import errno
import os

import pytest

from minishell.commands import Command, Redirection, RedirType
from minishell.errors import CommandError, ErrorCode
from minishell.redirection import (
    check_parent_directories,
    count_directories,
    is_directory,
    open_redirections,
)


def _command(*redirections):
    command = Command(name="cat", args=["cat"])
    for name, kind in redirections:
        command.add_redirection(Redirection(str(name), kind))
    return command


def _read_fd(fd):
    os.lseek(fd, 0, os.SEEK_SET)
    return os.read(fd, 1024)


def test_count_directories_ignores_leading_slash():
    assert count_directories("file") == 0
    assert count_directories("/tmp/x") == count_directories("tmp/x")


def test_check_parent_directories_lists_each_parent(tmp_path):
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    target = str(nested / "f")
    parents = check_parent_directories(target, True)
    assert len(parents) == count_directories(target)
    assert parents[-1] == str(nested)
    assert all(is_directory(parent) for parent in parents)


def test_check_parent_directories_missing(tmp_path):
    target = str(tmp_path / "missing" / "f")
    with pytest.raises(CommandError) as info:
        check_parent_directories(target)
    assert info.value.code == errno.ENOENT


def test_check_parent_directories_through_file(tmp_path):
    plain = tmp_path / "plain"
    plain.write_text("x")
    with pytest.raises(CommandError) as info:
        check_parent_directories(str(plain / "f"))
    assert info.value.code == errno.ENOTDIR


def test_is_directory(tmp_path):
    plain = tmp_path / "plain"
    plain.write_text("x")
    assert is_directory(str(tmp_path)) is True
    assert is_directory(str(plain)) is False
    assert is_directory(str(tmp_path / "nothing")) is False


def test_output_creates_file(tmp_path):
    target = tmp_path / "out"
    with open_redirections(_command((target, RedirType.DST_REDIR))) as opened:
        assert opened.stdin is None
        os.write(opened.stdout, b"hello")
    assert target.read_bytes() == b"hello"


def test_output_truncates_existing(tmp_path):
    target = tmp_path / "out"
    target.write_text("old content")
    with open_redirections(_command((target, RedirType.DST_REDIR))) as opened:
        os.write(opened.stdout, b"new")
    assert target.read_bytes() == b"new"


def test_append_keeps_content(tmp_path):
    target = tmp_path / "out"
    target.write_text("old")
    with open_redirections(_command((target, RedirType.APPEND))) as opened:
        os.write(opened.stdout, b"+more")
    assert target.read_bytes() == b"old+more"


def test_only_last_output_stays_open(tmp_path):
    first, second = tmp_path / "one", tmp_path / "two"
    command = _command((first, RedirType.DST_REDIR), (second, RedirType.DST_REDIR))
    with open_redirections(command) as opened:
        os.write(opened.stdout, b"data")
    assert first.read_bytes() == b""
    assert second.read_bytes() == b"data"


def test_input_is_read(tmp_path):
    source = tmp_path / "in"
    source.write_bytes(b"content")
    with open_redirections(_command((source, RedirType.SRC_REDIR))) as opened:
        assert opened.stdout is None
        assert _read_fd(opened.stdin) == b"content"


def test_missing_input_raises(tmp_path):
    with pytest.raises(CommandError) as info:
        open_redirections(_command((tmp_path / "absent", RedirType.SRC_REDIR)))
    assert info.value.code is ErrorCode.NO_SUCH_FILE
    assert info.value.status == 1
    assert info.value.message.endswith(": No such file or directory")


def test_heredoc_file_removed_after_open(tmp_path):
    body = tmp_path / "12345"
    body.write_bytes(b"line\n")
    with open_redirections(_command((body, RedirType.HERE_DOC))) as opened:
        assert not body.exists()
        assert _read_fd(opened.stdin) == b"line\n"


def test_output_to_directory_raises(tmp_path):
    with pytest.raises(CommandError) as info:
        open_redirections(_command((tmp_path, RedirType.DST_REDIR)))
    assert info.value.code is ErrorCode.IS_A_DIRECTORY


def test_failure_removes_heredoc_files(tmp_path):
    body = tmp_path / "999"
    body.write_text("x")
    command = _command(
        (tmp_path / "absent", RedirType.SRC_REDIR), (body, RedirType.HERE_DOC)
    )
    with pytest.raises(CommandError):
        open_redirections(command)
    assert not body.exists()


def test_close_resets_descriptors(tmp_path):
    opened = open_redirections(_command((tmp_path / "out", RedirType.DST_REDIR)))
    fd = opened.stdout
    opened.close()
    assert opened.stdout is None
    with pytest.raises(OSError):
        os.fstat(fd)