"""Checking and opening the files a command is redirected to or from."""

from __future__ import annotations

import errno
import os
from contextlib import suppress
from dataclasses import dataclass

from minishell.commands import Command, Redirection, RedirType
from minishell.errors import CommandError, ErrorCode, FailureKind


def is_directory(path: str) -> bool:
    """True when ``path`` names an existing directory."""
    return os.path.isdir(path)


def count_directories(path: str) -> int:
    """Number of ``/`` in ``path``, a leading one not counted."""
    return path[1:].count("/") if path.startswith("/") else path.count("/")


def _parent_prefixes(path: str) -> list[str]:
    count = count_directories(path)
    lead = "/" if path.startswith("/") else ""
    parts = path[len(lead):].split("/")
    return [lead + "/".join(parts[: depth + 1]) for depth in range(count)]


def check_parent_directories(path: str, for_output: bool = False) -> list[str]:
    """Check that every directory leading to ``path`` can be traversed.

    The innermost one must also be writable when ``for_output`` is set.
    Returns the directories checked; raises CommandError on the first failure.
    """
    parents = _parent_prefixes(path)
    for depth, parent in enumerate(parents):
        try:
            os.stat(parent)
        except OSError as exc:
            raise CommandError(path, exc.errno) from None
        if not os.path.isdir(parent):
            raise CommandError(path, errno.ENOTDIR)
        mode = os.X_OK
        if for_output and depth == len(parents) - 1:
            mode |= os.W_OK
        if not os.access(parent, mode):
            raise CommandError(path, errno.EACCES)
    return parents


@dataclass
class OpenedRedirections:
    """Descriptors a command reads from and writes to, when redirected."""

    stdin: int | None = None
    stdout: int | None = None

    def close(self) -> None:
        for fd in (self.stdin, self.stdout):
            if fd is not None:
                with suppress(OSError):
                    os.close(fd)
        self.stdin = self.stdout = None

    def __enter__(self) -> OpenedRedirections:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _open_or_fail(name: str, flags: int, mode: int = 0o644) -> int:
    try:
        return os.open(name, flags, mode)
    except OSError:
        raise CommandError(name, FailureKind.OPEN_FAIL) from None


def _open_input(redirection: Redirection) -> int | None:
    name = redirection.file_name
    check_parent_directories(name, False)
    if os.access(name, os.F_OK | os.R_OK):
        fd = _open_or_fail(name, os.O_RDONLY) if redirection.last else None
        if redirection.redir_type is RedirType.HERE_DOC:
            with suppress(OSError):
                os.unlink(name)
        return fd
    if not os.path.lexists(name):
        raise CommandError(name, ErrorCode.NO_SUCH_FILE)
    raise CommandError(name, ErrorCode.PERMISSION_DENIED)


def _open_output(redirection: Redirection) -> int:
    name = redirection.file_name
    check_parent_directories(name, True)
    if is_directory(name):
        raise CommandError(name, ErrorCode.IS_A_DIRECTORY)
    append = redirection.redir_type is RedirType.APPEND
    if os.access(name, os.F_OK | os.W_OK):
        flags = os.O_WRONLY | (os.O_APPEND if append else os.O_TRUNC)
        return _open_or_fail(name, flags)
    if os.path.exists(name):
        raise CommandError(name, ErrorCode.PERMISSION_DENIED)
    flags = os.O_RDWR | os.O_CREAT | (os.O_APPEND if append else 0)
    return _open_or_fail(name, flags)


def _remove_heredocs(command: Command) -> None:
    for redirection in command.redirections:
        if redirection.redir_type is RedirType.HERE_DOC:
            with suppress(OSError):
                os.unlink(redirection.file_name)


def open_redirections(command: Command) -> OpenedRedirections:
    """Check and open the redirections of ``command`` in order.

    Only the last input and the last output stay open. On failure every
    descriptor is closed, the command's here-document files are removed and
    CommandError is raised.
    """
    opened = OpenedRedirections()
    try:
        for redirection in command.redirections:
            if redirection.is_input:
                fd = _open_input(redirection)
                if fd is not None:
                    opened.stdin = fd
            else:
                fd = _open_output(redirection)
                if redirection.last:
                    opened.stdout = fd
                else:
                    os.close(fd)
    except CommandError:
        opened.close()
        _remove_heredocs(command)
        raise
    return opened