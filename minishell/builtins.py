"""Commands the shell runs itself: echo, pwd, env, export and unset."""

from __future__ import annotations

import os
import re
import sys
from typing import TYPE_CHECKING, TextIO

from minishell.errors import describe_error

if TYPE_CHECKING:
    from minishell.environment import ShellState

_N_OPTION = re.compile(r"-n+")
_PWD_ERROR = (
    "pwd: error retrieving current directory: getcwd"
    ": cannot access parent directories"
)


def is_n_option(argument: str) -> bool:
    """True for ``-n``, ``-nn`` and so on."""
    return _N_OPTION.fullmatch(argument) is not None


def echo(args: list[str], stdout: TextIO | None = None) -> int:
    """Write the arguments separated by spaces; ``-n`` drops the newline."""
    out = stdout or sys.stdout
    words = args[1:]
    if not words:
        out.write("\n")
        return 0
    skip = 0
    while skip < len(words) and is_n_option(words[skip]):
        skip += 1
    words = words[skip:]
    if not words:
        return 0
    out.write(" ".join(words))
    if skip == 0:
        out.write("\n")
    return 0


def pwd(stdout: TextIO | None = None, stderr: TextIO | None = None) -> int:
    """Write the current directory."""
    try:
        path = os.getcwd()
    except OSError as exc:
        suffix, _ = describe_error(exc.errno)
        (stderr or sys.stderr).write(f"{_PWD_ERROR}{suffix}\n")
        return 1
    (stdout or sys.stdout).write(path + "\n")
    return 0


def _inherits_partial_env(state: ShellState) -> bool:
    """True when the environment descends from a shell started without one."""
    if state.inception_from_partial:
        return True
    for entry in state.envp:
        if entry.startswith("PATH="):
            if entry[5:6] == '"':
                state.inception_from_partial = True
                return True
            return False
    return False


def env(
    state: ShellState, stdout: TextIO | None = None, stderr: TextIO | None = None
) -> int:
    """Write the environment, one ``NAME=value`` entry per line."""
    out = stdout or sys.stdout
    if state.partial_env or _inherits_partial_env(state):
        out.write("PWD=")
        if pwd(out, stderr) == 1:
            return 1
        for entry in state.envp:
            if not entry.startswith("PATH="):
                out.write(entry + "\n")
        out.write("_=/usr/bin/env\n")
    else:
        for entry in state.envp:
            out.write(entry + "\n")
    return 0


def _is_name_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


def is_valid_identifier(argument: str) -> bool:
    """True when the part before ``=`` is a valid variable name."""
    name = argument.partition("=")[0]
    if argument and not (argument[0].isascii() and (argument[0].isalpha() or argument[0] == "_")):
        return False
    return all(_is_name_char(char) for char in name)


def _export_value(state: ShellState, line: str) -> None:
    prefix = line[: line.index("=") + 1]
    for index, entry in enumerate(state.envp):
        if entry.startswith(prefix):
            state.envp[index] = line
            return
    state.envp.append(line)


def export(args: list[str], state: ShellState, stderr: TextIO | None = None) -> int:
    """Set each ``NAME=value`` argument; return 1 if one was not a valid name."""
    err = stderr or sys.stderr
    status = 0
    for argument in args[1:]:
        if not is_valid_identifier(argument):
            err.write(f"bash: export: `{argument}': not a valid identifier\n")
            status = 1
        elif "=" in argument:
            _export_value(state, argument)
    return status


def unset(args: list[str], state: ShellState) -> int:
    """Remove the named variables from the environment."""
    for name in args[1:]:
        index = next(
            (i for i, entry in enumerate(state.envp) if entry.startswith(name)), None
        )
        if index is None:
            continue
        state.env.pop(name, None)
        del state.envp[index]
    return 0