"""Grouping expanded tokens into the commands of a pipeline."""

from __future__ import annotations

from collections.abc import Iterable

from minishell.commands import Command, Redirection, RedirType
from minishell.errors import ParseError, ParseErrorKind
from minishell.quoting import is_blank


def is_redirection_token(token: str) -> bool:
    """True for exactly ``<``, ``>``, ``<<`` or ``>>``."""
    return token in ("<", ">", "<<", ">>")


def _could_be_command_name(token: str) -> bool:
    return not token.startswith(("<", ">", "|"))


def _fill_command(tokens: list[str], index: int, command: Command) -> int:
    """Consume tokens into ``command`` up to and past the next pipe."""
    while index + 1 < len(tokens) and is_blank(tokens[index]):
        index += 1
    while index < len(tokens):
        token = tokens[index]
        if command.name is None and _could_be_command_name(token):
            command.name = token
            command.args = [token]
            index += 1
        elif is_redirection_token(token):
            target = tokens[index + 1] if index + 1 < len(tokens) else None
            if target is None or is_redirection_token(target):
                raise ParseError(ParseErrorKind.SYNTAX_ERROR, target)
            command.add_redirection(Redirection(target, RedirType(token)))
            index += 2
        elif token == "|":
            if index == 0 or index + 1 >= len(tokens):
                raise ParseError(ParseErrorKind.SYNTAX_ERROR, token)
            return index + 1
        else:
            command.add_argument(token)
            index += 1
    return index


def build_commands(tokens: Iterable[str]) -> list[Command]:
    """Build the pipeline described by ``tokens``.

    Raises ParseError on a pipe at either end or a redirection without a target.
    """
    tokens = list(tokens)
    commands: list[Command] = []
    index = 0
    while index < len(tokens):
        command = Command()
        index = _fill_command(tokens, index, command)
        commands.append(command)
    return commands