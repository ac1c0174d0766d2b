"""Commands of a pipeline and the redirections attached to them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

BUILTIN_NAMES = frozenset({"exit", "env", "echo", "pwd", "export", "unset", "cd"})


class RedirType(Enum):
    """Redirection kinds, valued by their operator."""

    SRC_REDIR = "<"
    DST_REDIR = ">"
    APPEND = ">>"
    HERE_DOC = "<<"

    @property
    def is_input(self) -> bool:
        return self in (RedirType.SRC_REDIR, RedirType.HERE_DOC)


class CommandType(Enum):
    BUILT_IN = auto()
    CMD = auto()


class CommandPosition(Enum):
    ONLY_ONE_CMD = auto()
    FIRST_CMD = auto()
    BETWEEN_CMD = auto()
    LAST_CMD = auto()
    NO_CMD = auto()


@dataclass
class Redirection:
    """A file a command reads from or writes to."""

    file_name: str
    redir_type: RedirType
    last: bool = False

    @property
    def is_input(self) -> bool:
        return self.redir_type.is_input

    @property
    def is_output(self) -> bool:
        return not self.redir_type.is_input


def is_builtin_name(name: str) -> bool:
    """True when ``name`` is handled by the shell itself."""
    return name in BUILTIN_NAMES


@dataclass
class Command:
    """One command of a pipeline."""

    name: str | None = None
    args: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)
    position: CommandPosition | None = None

    @property
    def command_type(self) -> CommandType | None:
        if self.name is None:
            return None
        return CommandType.BUILT_IN if is_builtin_name(self.name) else CommandType.CMD

    @property
    def is_builtin(self) -> bool:
        return self.command_type is CommandType.BUILT_IN

    def add_argument(self, argument: str) -> None:
        self.args.append(argument)

    def add_redirection(self, redirection: Redirection) -> None:
        self.redirections.append(redirection)
        mark_last_redirections(self)


def mark_last_redirections(command: Command) -> None:
    """Flag the last input and the last output redirection of ``command``."""
    last_input = last_output = None
    for redirection in command.redirections:
        redirection.last = False
        if redirection.is_input:
            last_input = redirection
        else:
            last_output = redirection
    for redirection in (last_input, last_output):
        if redirection is not None:
            redirection.last = True