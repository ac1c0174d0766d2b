import pytest

from minishell.errors import ParseError, ParseErrorKind
from minishell.tokenizer import scan_redirection, tokenize


def test_simple_pipeline():
    assert tokenize("ls -l | wc") == ["ls", "-l", "|", "wc"]


def test_quoted_words_keep_separators():
    assert tokenize('echo "a | b" c') == ["echo", '"a | b"', "c"]
    assert tokenize("echo 'x > y'") == ["echo", "'x > y'"]


def test_adjacent_redirections_are_split():
    assert tokenize("cat<in>>out") == ["cat", "<", "in", ">>", "out"]


def test_heredoc_operator():
    assert tokenize("cat <<EOF") == ["cat", "<<", "EOF"]


def test_blank_line_has_no_tokens():
    assert tokenize("   \t ") == []


def test_tabs_separate_words():
    assert tokenize("a\tb") == ["a", "b"]


def test_tokens_cover_unquoted_input():
    line = "grep -v foo < in | sort >> out"
    tokens = tokenize(line)
    assert "".join(tokens) == line.replace(" ", "")
    assert all(token for token in tokens)


def test_scan_redirection_positions():
    assert scan_redirection("a<b", 1) == 2
    assert scan_redirection(">>x", 0) == 2
    assert scan_redirection("abc", 0) is None
    assert scan_redirection("< file", 0) == 1


def test_double_pipe_is_error():
    with pytest.raises(ParseError) as info:
        tokenize("ls || wc")
    assert info.value.token == "|"
    assert info.value.status == 2


def test_opposite_signs_are_error():
    with pytest.raises(ParseError) as info:
        tokenize("cat <> file")
    assert info.value.token.startswith(">")
    assert info.value.kind is ParseErrorKind.SYNTAX_ERROR


def test_sign_then_end_of_line_is_error():
    with pytest.raises(ParseError) as info:
        tokenize("cat > ")
    assert "newline" in str(info.value)


def test_triple_sign_is_error():
    with pytest.raises(ParseError) as info:
        tokenize("cat <<< x")
    assert info.value.token.startswith("<")


def test_sign_then_pipe_is_error():
    with pytest.raises(ParseError) as info:
        tokenize("cat > | wc")
    assert info.value.token.startswith("|")