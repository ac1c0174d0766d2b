"""Running the commands of a pipeline: builtins in the shell, programs in children."""

from __future__ import annotations

import copy
import dataclasses
import errno
import io
import os
import signal
import subprocess
import sys
import threading
from collections.abc import Iterable
from contextlib import suppress
from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO

from minishell.builtins import echo, env, export, pwd, unset
from minishell.commands import Command, CommandPosition, RedirType
from minishell.errors import CommandError, ErrorCode, ShellExit, describe_error
from minishell.exit_builtin import exit_builtin
from minishell.expansion import lookup_variable
from minishell.redirection import is_directory, open_redirections

if TYPE_CHECKING:
    from minishell.environment import ShellState

QUIT_MESSAGE = "Quit (core dumped)"


def build_path(directory: str, name: str) -> str:
    """Join a ``PATH`` entry and a command name with a slash."""
    return f"{directory}/{name}"


def _check_explicit_path(path: str, name: str) -> str:
    """Check a path given with a slash; return it when it can be executed."""
    if is_directory(path):
        raise CommandError(path, ErrorCode.IS_A_DIRECTORY_CMD)
    try:
        os.stat(path)
    except OSError as exc:
        raise CommandError(name, exc.errno) from None
    if not os.access(path, os.X_OK):
        raise CommandError(name, errno.EACCES)
    return path


def resolve_command(command: Command, state: ShellState) -> str:
    """Return the path of the program ``command`` runs.

    Raises CommandError when it is a directory, cannot be executed or is
    not found.
    """
    name = command.name or ""
    search_path = state.get_path()
    if "/" in name:
        return _check_explicit_path(name, name)
    if search_path is None:
        return _check_explicit_path("/" + name, name)
    if name:
        for directory in filter(None, search_path.split(":")):
            candidate = build_path(directory, name)
            if not os.path.exists(candidate):
                continue
            if not os.access(candidate, os.X_OK):
                raise CommandError(name, errno.EACCES)
            return candidate
    raise CommandError(name, ErrorCode.CMD_NOT_FOUND)


def _cd_error(code: ErrorCode | int, path: str | None, stderr: TextIO) -> int:
    suffix, _ = describe_error(code)
    where = f": {path}" if path is not None else ""
    stderr.write(f"bash: cd{where}{suffix}\n")
    return 1


def _cd(args: list[str], state: ShellState, stderr: TextIO) -> int:
    if len(args) > 2:
        return _cd_error(ErrorCode.TOO_MANY_ARGUMENTS, None, stderr)
    if len(args) == 2:
        target = args[1]
    else:
        home = lookup_variable("HOME", state.envp)
        if home is None:
            return _cd_error(ErrorCode.HOME_NOT_SET, None, stderr)
        target = home
    try:
        old_pwd: str | None = os.getcwd()
    except OSError:
        old_pwd = None
    try:
        os.chdir(target)
    except OSError as exc:
        return _cd_error(exc.errno, target, stderr)
    state.update_pwd(old_pwd)
    return 0


def _dispatch(
    command: Command, state: ShellState, out: TextIO, err: TextIO, only: bool
) -> int:
    args = command.args
    handlers = {
        "echo": lambda: echo(args, out),
        "cd": lambda: _cd(args, state, err),
        "pwd": lambda: pwd(out, err),
        "export": lambda: export(args, state, err),
        "unset": lambda: unset(args, state),
        "env": lambda: env(state, out, err),
        "exit": lambda: exit_builtin(args, state, only, out, err),
    }
    handler = handlers.get(command.name or "")
    return handler() if handler else 0


def _remove_heredoc_files(commands: Iterable[Command]) -> None:
    for command in commands:
        for redirection in command.redirections:
            if redirection.redir_type is RedirType.HERE_DOC:
                with suppress(OSError):
                    os.unlink(redirection.file_name)


def _report(error: CommandError) -> None:
    sys.stderr.write(error.message + "\n")


def run_builtin(
    command: Command,
    state: ShellState,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Run a builtin in the shell itself and return its status.

    When the builtin is the only command, its redirections are applied first.
    ``exit`` raises ShellExit.
    """
    out = stdout or sys.stdout
    err = stderr or sys.stderr
    only = command.position is CommandPosition.ONLY_ONE_CMD
    if not (only and command.redirections):
        return _dispatch(command, state, out, err, only)
    try:
        try:
            opened = open_redirections(command)
        except CommandError as exc:
            err.write(exc.message + "\n")
            state.exit_status = exc.status
            if exc.fatal:
                raise ShellExit(exc.status) from None
            return exc.status
        with opened:
            if opened.stdout is None:
                return _dispatch(command, state, out, err, only)
            with os.fdopen(os.dup(opened.stdout), "w", encoding="utf-8") as target:
                return _dispatch(command, state, target, err, only)
    finally:
        _remove_heredoc_files([command])


@dataclass
class _Stage:
    status: int = 0
    process: subprocess.Popen | None = None
    writer: threading.Thread | None = None


def _write_all(fd: int, data: bytes) -> None:
    try:
        view = memoryview(data)
        while view:
            written = os.write(fd, view)
            view = view[written:]
    except OSError:
        pass
    finally:
        os.close(fd)


def _builtin_stage(command: Command, state: ShellState, stdout_fd: int | None) -> _Stage:
    """Run a builtin as a pipeline member; its changes do not reach the shell."""
    buffer = io.StringIO()
    child_state = copy.deepcopy(state)
    stage_command = dataclasses.replace(command, redirections=[])
    try:
        status = run_builtin(stage_command, child_state, buffer, sys.stderr)
    except ShellExit as exc:
        status = exc.status
    data = buffer.getvalue()
    if stdout_fd is None:
        sys.stdout.write(data)
        sys.stdout.flush()
        return _Stage(status)
    writer = threading.Thread(
        target=_write_all, args=(os.dup(stdout_fd), data.encode()), daemon=True
    )
    writer.start()
    return _Stage(status, writer=writer)


def _child_environment(envp: Iterable[str]) -> dict[str, str]:
    environment: dict[str, str] = {}
    for entry in envp:
        name, found, value = entry.partition("=")
        if found and name:
            environment.setdefault(name, value)
    return environment


def _spawn(
    command: Command, state: ShellState, stdin_fd: int | None, stdout_fd: int | None
) -> _Stage:
    try:
        path = resolve_command(command, state)
    except CommandError as exc:
        _report(exc)
        return _Stage(exc.status)
    sys.stdout.flush()
    try:
        process = subprocess.Popen(
            command.args,
            executable=path,
            stdin=stdin_fd,
            stdout=stdout_fd,
            env=_child_environment(state.envp),
        )
    except OSError as exc:
        error = CommandError(command.name or "", exc.errno or errno.ENOEXEC)
        _report(error)
        return _Stage(error.status)
    return _Stage(process=process)


def _run_stage(
    command: Command, state: ShellState, stdin_fd: int | None, stdout_fd: int | None
) -> _Stage:
    try:
        opened = open_redirections(command)
    except CommandError as exc:
        _report(exc)
        return _Stage(exc.status)
    with opened:
        if opened.stdin is not None:
            stdin_fd = opened.stdin
        if opened.stdout is not None:
            stdout_fd = opened.stdout
        if command.name is None:
            return _Stage(0)
        if command.is_builtin:
            return _builtin_stage(command, state, stdout_fd)
        return _spawn(command, state, stdin_fd, stdout_fd)


def _wait(process: subprocess.Popen) -> int:
    while True:
        try:
            return process.wait()
        except KeyboardInterrupt:
            sys.stdout.write("\n")
            sys.stdout.flush()


def execute(commands: list[Command], state: ShellState) -> int:
    """Run ``commands`` as a pipeline and return the status of the last one."""
    stages: list[_Stage] = []
    previous_read: int | None = None
    try:
        for index, command in enumerate(commands):
            read_end = write_end = None
            if index + 1 < len(commands):
                read_end, write_end = os.pipe()
            try:
                stages.append(_run_stage(command, state, previous_read, write_end))
            finally:
                for fd in (previous_read, write_end):
                    if fd is not None:
                        os.close(fd)
                previous_read = read_end
    finally:
        if previous_read is not None:
            os.close(previous_read)
    returncodes = [_wait(stage.process) for stage in stages if stage.process]
    for stage in stages:
        if stage.writer is not None:
            stage.writer.join()
    _remove_heredoc_files(commands)
    if -signal.SIGINT in returncodes:
        return 130
    quit_signal = getattr(signal, "SIGQUIT", None)
    if quit_signal is not None and -quit_signal in returncodes:
        sys.stdout.write(QUIT_MESSAGE + "\n")
        return 131
    if not stages:
        return 0
    last = stages[-1]
    if last.process is not None:
        return max(last.process.returncode, 0)
    return last.status