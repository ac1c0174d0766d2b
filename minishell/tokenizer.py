"""Splitting a command line into words, redirection signs and pipes."""

from __future__ import annotations

from minishell.errors import ParseError, ParseErrorKind
from minishell.quoting import SPACE_CHARS, QuoteState, is_separator_char_without_quote

_REDIRECTION_SIGNS = ("<", ">")


def _skip_blanks(line: str, index: int) -> int:
    while index < len(line) and line[index] in SPACE_CHARS:
        index += 1
    return index


def scan_redirection(line: str, index: int) -> int | None:
    """Return the end of the redirection sign at ``index``, or None if there is none.

    Raises ParseError when the sign is followed by something that cannot be
    its target: another sign, a pipe or the end of the line.
    """
    sign = line[index:index + 1]
    if sign not in _REDIRECTION_SIGNS:
        return None
    opposite = ">" if sign == "<" else "<"
    following = line[index + 1:index + 2]
    if following == sign:
        after = _skip_blanks(line, index + 2)
        if line[after:after + 1] in _REDIRECTION_SIGNS and after < len(line):
            raise ParseError(ParseErrorKind.SYNTAX_ERROR, line[after:])
        return index + 2
    if following and (following in SPACE_CHARS or following in (opposite, "|")):
        after = _skip_blanks(line, index + 1)
        if after >= len(line) or is_separator_char_without_quote(line[after]):
            raise ParseError(ParseErrorKind.SYNTAX_ERROR, line[after:])
    return index + 1


def _scan_pipe(line: str, index: int) -> int | None:
    if line[index] != "|":
        return None
    if line[index + 1:index + 2] == "|":
        raise ParseError(ParseErrorKind.SYNTAX_ERROR, "|")
    return index + 1


def _scan_word(line: str, index: int) -> int:
    state = QuoteState()
    while index < len(line) and (
        not is_separator_char_without_quote(line[index]) or state.quoted
    ):
        state.update(line[index])
        index += 1
    return index


def tokenize(line: str) -> list[str]:
    """Split ``line`` into tokens; quoted parts stay inside their word.

    Raises ParseError on a misplaced redirection sign or a doubled pipe.
    """
    tokens: list[str] = []
    index = _skip_blanks(line, 0)
    while index < len(line):
        end = scan_redirection(line, index)
        if end is None:
            end = _scan_pipe(line, index)
        if end is None:
            end = _scan_word(line, index)
        tokens.append(line[index:end])
        index = _skip_blanks(line, end)
    return tokens