"""The interactive loop: prompt, parse, run, repeat."""

from __future__ import annotations

import signal
import sys
from collections.abc import Callable
from contextlib import suppress

from minishell.commands import Command, CommandPosition
from minishell.environment import ShellState
from minishell.errors import ParseError, ShellExit
from minishell.executor import execute, run_builtin
from minishell.heredoc import HeredocAborted
from minishell.parsing import parse_line
from minishell.quoting import is_blank

ReadLine = Callable[[str], "str | None"]
PROMPT = "minishell$ "
USAGE_ERROR = "This shell does not handle arguments and cannot be redirected.\n"


def _read_line_from_stdin(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def _ignore_quit(signum: int, frame: object) -> None:
    """At the prompt, the quit key does nothing."""


def install_signal_handlers() -> dict[int, object]:
    """Make interrupt raise KeyboardInterrupt and quit do nothing in the shell.

    Returns the handlers that were replaced, by signal number.
    """
    previous: dict[int, object] = {
        signal.SIGINT: signal.signal(signal.SIGINT, signal.default_int_handler)
    }
    quit_signal = getattr(signal, "SIGQUIT", None)
    if quit_signal is not None:
        previous[quit_signal] = signal.signal(quit_signal, _ignore_quit)
    return previous


def _is_single_builtin(commands: list[Command]) -> bool:
    return (
        len(commands) == 1
        and commands[0].is_builtin
        and commands[0].position is CommandPosition.ONLY_ONE_CMD
    )


def handle_line(line: str, state: ShellState, read_line: ReadLine | None = None) -> int:
    """Parse and run one command line; return and record its status.

    Raises ShellExit when the line asks the shell to leave.
    """
    if is_blank(line):
        state.exit_status = 0
        return 0
    try:
        commands = parse_line(line, state, read_line)
    except (ParseError, HeredocAborted) as exc:
        if exc.message:
            sys.stderr.write(exc.message + "\n")
        state.exit_status = exc.status
        return exc.status
    if not commands:
        status = 0
    elif _is_single_builtin(commands):
        status = run_builtin(commands[0], state)
    else:
        status = execute(commands, state)
    sys.stdout.flush()
    state.exit_status = status
    return status


def run_shell(state: ShellState, read_line: ReadLine | None = None) -> int:
    """Read and run lines until end of input or ``exit``; return the exit status."""
    reader = read_line or _read_line_from_stdin
    while True:
        try:
            line = reader(PROMPT)
        except KeyboardInterrupt:
            sys.stdout.write("\n")
            state.exit_status = 130
            continue
        if line is None:
            sys.stdout.write("exit\n")
            sys.stdout.flush()
            return 0
        try:
            handle_line(line, state, reader)
        except ShellExit as exc:
            sys.stdout.flush()
            return exc.status
        except KeyboardInterrupt:
            sys.stdout.write("\n")
            state.exit_status = 130


def main(argv: list[str] | None = None) -> int:
    """Start the interactive shell; it takes no arguments and needs a terminal."""
    args = sys.argv[1:] if argv is None else list(argv)
    if args or not sys.stdout.isatty():
        sys.stderr.write(USAGE_ERROR)
        return 0
    try:
        state = ShellState.from_environ()
    except OSError as exc:
        sys.stderr.write(f"bash: {exc}\n")
        return 1
    with suppress(ImportError):
        import readline  # noqa: F401  (line editing and history for input())
    install_signal_handlers()
    return run_shell(state, _read_line_from_stdin)


if __name__ == "__main__":
    sys.exit(main())