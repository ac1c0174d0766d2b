import pytest

from minishell.quoting import (
    QuoteState,
    has_unclosed_quote,
    is_blank,
    is_separator_char,
    is_separator_char_without_quote,
    trim_quotes,
)


def test_quote_state_toggles_single():
    state = QuoteState()
    assert state.update("'") is True
    assert state.single is True
    assert state.quoted is True
    assert state.update("'") is True
    assert state.single is False
    assert state.quoted is False


def test_quote_state_ignores_other_quote_inside():
    state = QuoteState()
    state.update('"')
    assert state.update("'") is False
    assert state.single is False
    assert state.double is True


def test_quote_state_plain_character():
    state = QuoteState()
    assert state.update("a") is False
    assert state.quoted is False


@pytest.mark.parametrize(
    "text, expected",
    [
        ("echo 'a'", False),
        ("echo 'a", True),
        ('"it\'s"', False),
        ("'\"'", False),
        ('"', True),
        ("", False),
        ("\"a\" 'b", True),
    ],
)
def test_has_unclosed_quote(text, expected):
    assert has_unclosed_quote(text) is expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ('"a b"', "a b"),
        ("'\"'", '"'),
        ('"\'"', "'"),
        ("abc", "abc"),
        ("''", ""),
        ('"x"\'y\'', "xy"),
        ('a"b"c', "abc"),
    ],
)
def test_trim_quotes(text, expected):
    assert trim_quotes(text) == expected


def test_trim_quotes_never_grows():
    for text in ['"a"', "'b'c", "d", '""""']:
        assert len(trim_quotes(text)) <= len(text)


@pytest.mark.parametrize("char", ["<", ">", "|", " ", "\t", "\n"])
def test_separators_without_quote(char):
    assert is_separator_char_without_quote(char) is True
    assert is_separator_char(char) is True


@pytest.mark.parametrize("char", ["'", '"'])
def test_quotes_are_separators_only_in_full_set(char):
    assert is_separator_char(char) is True
    assert is_separator_char_without_quote(char) is False


@pytest.mark.parametrize("char", ["a", "$", "=", "?", ""])
def test_non_separators(char):
    assert is_separator_char(char) is False
    assert is_separator_char_without_quote(char) is False


@pytest.mark.parametrize(
    "text, expected",
    [("", True), (" \t\n", True), (" a ", False), ("x", False)],
)
def test_is_blank(text, expected):
    assert is_blank(text) is expected