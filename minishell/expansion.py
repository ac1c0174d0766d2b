"""Expansion of ``$NAME`` and ``$?`` in command-line tokens."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from minishell.quoting import (
    QuoteState,
    is_separator_char,
    is_separator_char_without_quote,
    trim_quotes,
)


def _find_dollar(token: str) -> int | None:
    """Index of the first ``$`` outside single quotes, or None."""
    state = QuoteState()
    for index, char in enumerate(token):
        state.update(char)
        if char == "$" and not state.single:
            return index
    return None


def has_expansion(token: str) -> bool:
    """Return True when ``token`` holds a ``$`` that is to be expanded."""
    index = _find_dollar(token)
    if index is None:
        return False
    rest = token[index + 1:]
    if not rest or is_separator_char_without_quote(rest[0]):
        return False
    return rest not in ("'", '"')


def _expansion_text(token: str) -> str:
    """The ``$`` and the name that follows it at the first expansion."""
    index = _find_dollar(token)
    name = []
    for char in token[index + 1:]:
        if is_separator_char(char) or char in "=$":
            break
        name.append(char)
        if char == "?":
            break
    return "$" + "".join(name)


def lookup_variable(name: str, envp: Iterable[str]) -> str | None:
    """Value of ``name`` in a list of ``NAME=value`` entries, first match wins."""
    prefix = name + "="
    for entry in envp:
        if entry.startswith(prefix):
            return entry[len(prefix):]
    return None


def replace_first(text: str, old: str, new: str | None) -> str:
    """Replace the first occurrence of ``old`` in ``text`` with ``new``.

    ``None`` for ``new`` removes ``old``. Raises ValueError when ``old`` is absent.
    """
    before, found, after = text.partition(old)
    if not found and old:
        raise ValueError(f"{old!r} not found in {text!r}")
    if not old:
        return (new or "") + text
    return before + (new or "") + after


def expand_once(token: str, envp: Sequence[str], exit_status: int) -> str:
    """Expand the first ``$`` reference of ``token``, if any."""
    if not has_expansion(token):
        return token
    reference = _expansion_text(token)
    if reference[1:2] == "?":
        value: str | None = str(exit_status)
    else:
        value = lookup_variable(reference[1:], envp)
    return replace_first(token, reference, value)


def expand_token(token: str, envp: Sequence[str], exit_status: int) -> str:
    """Expand every reference in ``token``, then remove its quotes."""
    while has_expansion(token):
        token = expand_once(token, envp, exit_status)
    return trim_quotes(token)


def expand_tokens(
    tokens: Iterable[str], envp: Sequence[str], exit_status: int
) -> list[str]:
    """Apply :func:`expand_token` to each token."""
    return [expand_token(token, envp, exit_status) for token in tokens]