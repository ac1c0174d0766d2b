"""Turning one command line into the commands of a pipeline."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from minishell.commands import Command, CommandPosition
from minishell.errors import ParseError, ParseErrorKind
from minishell.expansion import expand_tokens
from minishell.heredoc import process_heredocs
from minishell.parser import build_commands
from minishell.quoting import SPACE_CHARS, QuoteState, has_unclosed_quote
from minishell.tokenizer import tokenize

if TYPE_CHECKING:
    from minishell.environment import ShellState

ReadLine = Callable[[str], "str | None"]


def _read_line_from_stdin(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def has_heredoc(line: str) -> bool:
    """True when ``line`` holds an unquoted ``<<`` followed by a delimiter.

    Raises ParseError for a here-string (``<<<``) or for a redirection sign
    where the delimiter should be.
    """
    state = QuoteState()
    for index, char in enumerate(line):
        state.update(char)
        if not line.startswith("<<", index) or state.quoted:
            continue
        if line[index + 2:index + 3] == "<":
            raise ParseError(ParseErrorKind.HERE_STRING_ERROR)
        after = index + 2
        while after < len(line) and line[after] in SPACE_CHARS:
            after += 1
        if after >= len(line):
            return False
        if line[after] in "<>":
            raise ParseError(ParseErrorKind.SYNTAX_ERROR, line[after:])
        return True
    return False


def assign_positions(commands: list[Command]) -> list[Command]:
    """Set the position of each command in its pipeline; return the list."""
    count = len(commands)
    for index, command in enumerate(commands):
        has_prev = index > 0
        has_next = index + 1 < count
        if not has_prev and not has_next and command.name is not None:
            command.position = CommandPosition.ONLY_ONE_CMD
        elif not has_prev and has_next:
            command.position = CommandPosition.FIRST_CMD
        elif has_prev and has_next:
            command.position = CommandPosition.BETWEEN_CMD
        elif has_prev and not has_next:
            command.position = CommandPosition.LAST_CMD
        else:
            command.position = CommandPosition.NO_CMD
    return commands


def parse_line(
    line: str, state: ShellState, read_line: ReadLine | None = None
) -> list[Command]:
    """Parse ``line`` into commands, reading its here-documents first.

    Raises ParseError when the line is rejected, and HeredocAborted when a
    here-document is cut short.
    """
    if has_unclosed_quote(line):
        raise ParseError(ParseErrorKind.UNCLOSED_QUOTES, line)
    if has_heredoc(line):
        line = process_heredocs(line, state, read_line or _read_line_from_stdin)
    tokens = expand_tokens(tokenize(line), state.envp, state.exit_status)
    return assign_positions(build_commands(tokens))