"""Quote tracking and character classes used while reading a command line."""

from __future__ import annotations

from dataclasses import dataclass

SPACE_CHARS = " \t\n\v\f\r"
_REDIRECTION_AND_PIPE = "<>|"


@dataclass
class QuoteState:
    """Tracks whether the scan position is inside single or double quotes."""

    single: bool = False
    double: bool = False

    def update(self, char: str) -> bool:
        """Feed one character; return True when it opened or closed a quote."""
        if char == "'" and not self.double:
            self.single = not self.single
            return True
        if char == '"' and not self.single:
            self.double = not self.double
            return True
        return False

    @property
    def quoted(self) -> bool:
        """True while inside either kind of quote."""
        return self.single or self.double


def has_unclosed_quote(text: str) -> bool:
    """Return True when a quote in ``text`` is opened and never closed."""
    state = QuoteState()
    toggles = sum(1 for char in text if state.update(char))
    return toggles % 2 == 1


def is_separator_char_without_quote(char: str) -> bool:
    """Redirection signs, pipe and blanks end a word."""
    return char != "" and (char in _REDIRECTION_AND_PIPE or char in SPACE_CHARS)


def is_separator_char(char: str) -> bool:
    """Like :func:`is_separator_char_without_quote`, quotes included."""
    return is_separator_char_without_quote(char) or (char != "" and char in "'\"")


def trim_quotes(text: str) -> str:
    """Remove the quote characters that delimit quoted parts of ``text``."""
    if '"' not in text and "'" not in text:
        return text
    state = QuoteState()
    return "".join(char for char in text if not state.update(char))


def is_blank(text: str) -> bool:
    """Return True when ``text`` holds nothing but blanks."""
    return all(char in SPACE_CHARS for char in text)