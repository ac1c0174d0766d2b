"""Here-documents: reading their bodies into files named in the command line."""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from contextlib import suppress
from typing import TYPE_CHECKING

from minishell.errors import ShellError, heredoc_eof_warning
from minishell.expansion import expand_once
from minishell.quoting import SPACE_CHARS, is_separator_char

if TYPE_CHECKING:
    from minishell.environment import ShellState

ReadLine = Callable[[str], "str | None"]
PROMPT = "> "


class HeredocAborted(ShellError):
    """The here-document was cut short; the command line is abandoned."""

    def __init__(self, message: str = "", status: int = 130) -> None:
        super().__init__(message, status)


def _delimiter_span(text: str, start: int) -> tuple[int, int]:
    """Start and end of the delimiter word beginning at ``start``."""
    if text[start:start + 1] == '"':
        end = text.find('"', start + 1)
        return start + 1, len(text) if end == -1 else end
    end = start
    while end < len(text) and not is_separator_char(text[end]):
        end += 1
    return start, end


def _locate_delimiter(text: str, occurrence: int) -> tuple[int, int] | None:
    """Span of the delimiter of the ``occurrence``-th ``<<`` outside double quotes."""
    in_double = False
    found = 0
    index = 0
    while index < len(text):
        if text[index] == '"':
            in_double = not in_double
            index += 1
        elif text.startswith("<<", index) and not in_double:
            index += 2
            while index < len(text) and text[index] in SPACE_CHARS:
                index += 1
            if found == occurrence:
                return _delimiter_span(text, index)
            found += 1
        else:
            index += 1
    return None


def get_delimiter(text: str, occurrence: int) -> str | None:
    """Delimiter of the ``occurrence``-th here-document in ``text``, or None."""
    span = _locate_delimiter(text, occurrence)
    if span is None:
        return None
    start, end = span
    return text[start:end]


def count_heredocs(text: str) -> int:
    """Number of positions in ``text`` where ``<<`` starts."""
    return sum(text.startswith("<<", index) for index in range(len(text)))


def create_heredoc_file(directory: str | None = None) -> str:
    """Create an empty file with an unused random numeric name; return its path."""
    while True:
        name = str(int.from_bytes(os.urandom(4), "little", signed=True))
        path = os.path.join(directory, name) if directory else name
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        except FileExistsError:
            continue
        os.close(fd)
        return path


def read_heredoc_body(
    path: str,
    delimiter: str,
    read_line: ReadLine,
    envp: Sequence[str],
    exit_status: int,
) -> int:
    """Append lines read until ``delimiter`` to ``path``; return how many.

    ``read_line`` returns None at end of input and raises KeyboardInterrupt
    on interruption. Raises HeredocAborted when interrupted, or when input
    ends before the first line.
    """
    written = 0
    with open(path, "a", encoding="utf-8") as body:
        while True:
            try:
                line = read_line(PROMPT)
            except KeyboardInterrupt:
                raise HeredocAborted() from None
            if line is None:
                if written == 0:
                    raise HeredocAborted(heredoc_eof_warning(delimiter, 1), 0)
                return written
            if line == delimiter:
                return written
            body.write(expand_once(line, envp, exit_status) + "\n")
            written += 1


def process_heredocs(line: str, state: ShellState, read_line: ReadLine) -> str:
    """Read every here-document of ``line``; return it with files for delimiters.

    On HeredocAborted the files created so far are removed and the error raised.
    """
    created: list[str] = []
    try:
        for occurrence in range(count_heredocs(line)):
            span = _locate_delimiter(line, occurrence)
            if span is None:
                break
            start, end = span
            delimiter = line[start:end]
            path = create_heredoc_file(state.heredoc_dir)
            created.append(path)
            line = line[:start] + path + line[end:]
            read_heredoc_body(path, delimiter, read_line, state.envp, state.exit_status)
    except HeredocAborted:
        for path in created:
            with suppress(FileNotFoundError):
                os.remove(path)
        raise
    return line