"""Error codes, their messages and the exceptions the shell raises."""

from __future__ import annotations

import errno
from enum import Enum, auto

UNKNOWN_ERROR = "Unknown error"


class ErrorCode(Enum):
    """Shell-specific error codes, used beside plain ``errno`` values."""

    PERMISSION_DENIED = auto()
    NO_SUCH_FILE = auto()
    HOME_NOT_SET = auto()
    TOO_MANY_ARGUMENTS = auto()
    CMD_NOT_FOUND = auto()
    IS_A_DIRECTORY = auto()
    IS_A_DIRECTORY_CMD = auto()


class FailureKind(Enum):
    """System call failures the shell reports."""

    DUP2_FAIL = auto()
    DUP_FAIL = auto()
    OPEN_FAIL = auto()
    PIPE_FAIL = auto()
    FORK_FAIL = auto()
    MALLOC_ERROR = auto()
    NO_SPC = auto()


class ParseErrorKind(Enum):
    """Reasons a command line is rejected."""

    SYNTAX_ERROR = auto()
    HERE_STRING_ERROR = auto()
    UNCLOSED_QUOTES = auto()


_ERROR_MESSAGES: dict[object, tuple[str, int]] = {
    errno.EACCES: (": Permission denied", 126),
    ErrorCode.PERMISSION_DENIED: (": Permission denied", 1),
    errno.ENOENT: (": No such file or directory", 127),
    ErrorCode.NO_SUCH_FILE: (": No such file or directory", 1),
    errno.ENOTDIR: (": Not a directory", 126),
    errno.EIO: (": Input/output error", 1),
    ErrorCode.HOME_NOT_SET: (": HOME not set", 1),
    ErrorCode.TOO_MANY_ARGUMENTS: (": too many arguments", 1),
    ErrorCode.CMD_NOT_FOUND: (": command not found", 127),
    errno.ENOMEM: (": Out of memory", 1),
    errno.EROFS: (": Read-only file system", 1),
    errno.EFAULT: (": Bad address", 1),
    errno.ELOOP: (": Too many levels of symbolic links", 1),
    errno.ENAMETOOLONG: (": File name too long", 1),
    ErrorCode.IS_A_DIRECTORY: (": Is a directory", 1),
    ErrorCode.IS_A_DIRECTORY_CMD: (": Is a directory", 126),
}

_FAILURE_MESSAGES = {
    FailureKind.DUP2_FAIL: ": DUP2 FAIL",
    FailureKind.DUP_FAIL: ": DUP FAIL",
    FailureKind.OPEN_FAIL: ": OPEN FAIL",
    FailureKind.PIPE_FAIL: ": PIPE_FAIL",
    FailureKind.FORK_FAIL: ": FORK_FAIL",
    FailureKind.MALLOC_ERROR: ": MALLOC_ERROR",
    FailureKind.NO_SPC: ": write error: No space left on device",
}

_FATAL_FAILURES = {FailureKind.DUP_FAIL, FailureKind.DUP2_FAIL, FailureKind.MALLOC_ERROR}


def describe_error(code: ErrorCode | int) -> tuple[str, int]:
    """Return the message suffix and exit status for an error code or errno."""
    return _ERROR_MESSAGES.get(code, (UNKNOWN_ERROR, 1))


def describe_failure(kind: FailureKind) -> tuple[str, int]:
    """Return the message suffix and exit status for a failed system call."""
    return _FAILURE_MESSAGES[kind], 1


def parse_error_message(kind: ParseErrorKind, token: str | None = None) -> str:
    """Build the message shown when a command line cannot be parsed."""
    if kind is ParseErrorKind.SYNTAX_ERROR:
        if token:
            shown = token[0]
            if len(token) > 1 and token[1] in "<>":
                shown += token[1]
        else:
            shown = "newline"
        return f"error bash: syntax error near unexpected token `{shown}'"
    if kind is ParseErrorKind.HERE_STRING_ERROR:
        return "error: This shell does not handle here_string"
    return "error: This shell does not interpret input with unclosed quotes"


def heredoc_eof_warning(delimiter: str, line_number: int) -> str:
    """Warning for a here-document ended by end of file at ``line_number``."""
    return (
        f"bash: warning: here-document at line {line_number} "
        f"delimited by end-of-file (wanted `{delimiter}')"
    )


class ShellError(Exception):
    """An error reported to the user, carrying the exit status it sets."""

    def __init__(self, message: str, status: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        return self.message


class ParseError(ShellError):
    """The command line was rejected; the exit status becomes 2."""

    def __init__(self, kind: ParseErrorKind, token: str | None = None) -> None:
        super().__init__(parse_error_message(kind, token), 2)
        self.kind = kind
        self.token = token


class CommandError(ShellError):
    """A command, file or system call failed for ``element``."""

    def __init__(self, element: str, code: ErrorCode | FailureKind | int) -> None:
        if isinstance(code, FailureKind):
            suffix, status = describe_failure(code)
        else:
            suffix, status = describe_error(code)
        super().__init__(f"bash: {element}{suffix}", status)
        self.element = element
        self.code = code

    @property
    def fatal(self) -> bool:
        """True when the failure must end the shell itself."""
        return self.code in _FATAL_FAILURES


class ShellExit(Exception):
    """Raised to leave the shell with ``status``."""

    def __init__(self, status: int = 0) -> None:
        super().__init__(status)
        self.status = status