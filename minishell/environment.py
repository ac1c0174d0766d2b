"""Environment of the shell: the ``NAME=value`` list and its lookup table."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

ETC_ENVIRONMENT = "/etc/environment"
DEFAULT_SHLVL = "SHLVL=1"

_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")


def _atoi(text: str) -> int:
    """Leading integer of ``text`` after blanks, or 0 when there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_env_line(line: str) -> tuple[str, str]:
    """Split ``NAME=value`` into name and value, dropping quotes around the value."""
    name, _, value = line.partition("=")
    if value.startswith('"'):
        value = value[1:-1] if len(value) > 1 and value.endswith('"') else value[1:]
    return name, value


def increment_shlvl(line: str) -> str:
    """Return the ``SHLVL=`` entry with its level raised by one."""
    return f"SHLVL={_atoi(line[len('SHLVL='):]) + 1}"


def read_etc_environment(path: str = ETC_ENVIRONMENT) -> list[str]:
    """Read the system environment file as entries, ending with a ``SHLVL=`` entry.

    Reading stops after a ``SHLVL=`` line; when the file has none, ``SHLVL=1``
    is appended. Raises OSError when the file cannot be read.
    """
    entries: list[str] = []
    with open(path, encoding="utf-8") as source:
        for raw in source:
            line = raw.rstrip("\n")
            if not line.strip():
                continue
            entries.append(line)
            if line.startswith("SHLVL="):
                return entries
    entries.append(DEFAULT_SHLVL)
    return entries


def _build_table(entries: Iterable[str]) -> dict[str, str]:
    """Name to value table; the first entry for a name wins."""
    table: dict[str, str] = {}
    for entry in entries:
        name, value = parse_env_line(entry)
        table.setdefault(name, value)
    return table


@dataclass
class ShellState:
    """Everything the shell keeps between two command lines."""

    envp: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    exit_status: int = 0
    partial_env: bool = False
    inception_from_partial: bool = False
    heredoc_dir: str | None = None

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | Iterable[str] | None = None,
        etc_path: str = ETC_ENVIRONMENT,
    ) -> ShellState:
        """Build the state from the inherited environment.

        An empty environment falls back on the system environment file.
        """
        if environ is None:
            environ = os.environ
        if isinstance(environ, Mapping):
            entries = [f"{name}={value}" for name, value in environ.items()]
        else:
            entries = list(environ)
        if not entries:
            etc_entries = read_etc_environment(etc_path)
            return cls(envp=etc_entries, env=_build_table(etc_entries), partial_env=True)
        envp = [
            increment_shlvl(entry) if entry.startswith("SHLVL=") else entry
            for entry in entries
        ]
        return cls(envp=envp, env=_build_table(entries))

    def get_path(self) -> str | None:
        """Value of ``PATH``, or None when it is not set."""
        return self.env.get("PATH")

    def update_pwd(self, old_pwd: str | None) -> None:
        """Rewrite the existing ``OLDPWD=`` and ``PWD=`` entries."""
        try:
            cwd = os.getcwd()
        except OSError:
            cwd = ""

        def rewrite(entry: str) -> str:
            if entry.startswith("OLDPWD="):
                return "OLDPWD=" + (old_pwd or "")
            if entry.startswith("PWD="):
                return "PWD=" + cwd
            return entry

        self.envp = [rewrite(entry) for entry in self.envp]