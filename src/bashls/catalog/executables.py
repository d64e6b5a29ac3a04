from __future__ import annotations

import logging
import os
import shlex
from collections.abc import Iterable
from pathlib import Path

from bashls.catalog.shell import exec_shell_script

logger = logging.getLogger(__name__)


def _is_executable_file(path: Path) -> bool:
    try:
        return path.is_file() and os.access(path, os.X_OK)
    except OSError:
        return False


def _executables_in(directory: Path) -> list[str]:
    try:
        entries = list(directory.iterdir())
    except OSError:
        return []
    return [entry.name for entry in entries if _is_executable_file(entry)]


class Executables:
    """Names of the executables found on a search path."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names = frozenset(names)

    @classmethod
    def from_path(cls, search_path: str | None = None) -> Executables:
        """Scan every directory of ``search_path`` (``$PATH`` by default) once."""
        if search_path is None:
            search_path = os.environ.get("PATH", "")
        names: set[str] = set()
        for entry in search_path.split(os.pathsep):
            if entry:
                names.update(_executables_in(Path(entry)))
        logger.info("Found %d executables on PATH", len(names))
        return cls(names)

    def list(self) -> list[str]:
        return sorted(self._names)

    def contains(self, name: str) -> bool:
        return name in self._names

    async def documentation(self, name: str) -> str:
        return await exec_shell_script(f"man {shlex.quote(name)} | col -b")
