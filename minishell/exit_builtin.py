"""The ``exit`` builtin and the parsing of its numeric argument."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from minishell.errors import ShellExit

if TYPE_CHECKING:
    from minishell.environment import ShellState

LLONG_MAX = 9223372036854775807
LLONG_MIN_TEXT = "-9223372036854775808"
_NUMERIC_ERROR_STATUS = 2


def is_numeric(text: str) -> bool:
    """True when ``text`` is an optional sign followed only by digits."""
    digits = text[1:] if text[:1] in ("+", "-") else text
    return all("0" <= char <= "9" for char in digits)


def parse_exit_code(text: str) -> int:
    """Value of ``text`` as a signed 64-bit integer.

    Raises ValueError when ``text`` is not numeric or does not fit.
    """
    if not is_numeric(text):
        raise ValueError(f"{text!r} is not numeric")
    if text == LLONG_MIN_TEXT:
        return -LLONG_MAX - 1
    digits = text[1:] if text[:1] in ("+", "-") else text
    magnitude = int(digits) if digits else 0
    if magnitude > LLONG_MAX:
        raise ValueError(f"{text!r} does not fit in 64 bits")
    return -magnitude if text.startswith("-") else magnitude


def exit_builtin(
    args: list[str],
    state: ShellState,
    only_command: bool = True,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Leave the shell by raising ShellExit.

    Returns 1 without leaving when given more than one numeric argument.
    """
    out = stdout or sys.stdout
    err = stderr or sys.stderr
    if len(args) < 2:
        if only_command:
            out.write("exit\n")
        raise ShellExit(0)
    argument = args[1]
    try:
        value = parse_exit_code(argument)
    except ValueError:
        state.exit_status = _NUMERIC_ERROR_STATUS
        if only_command:
            out.write("exit\n")
        err.write(f"bash: exit: {argument}: numeric argument required\n")
        raise ShellExit(_NUMERIC_ERROR_STATUS) from None
    if len(args) > 2:
        err.write("bash: exit: too many arguments\n")
        return 1
    state.exit_status = value % 256
    if only_command:
        out.write("exit\n")
    raise ShellExit(state.exit_status)