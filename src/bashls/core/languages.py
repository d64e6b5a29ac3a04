import fnmatch
from pathlib import Path, PurePath

_SHELL_EXTENSIONS = frozenset(
    {
        ".sh",
        ".bash",
        ".command",
        ".inc",
        ".ksh",
        ".zsh",
    }
)

_SHELL_INTERPRETERS = frozenset({"sh", "bash", "dash", "ksh", "zsh"})


def _interpreter_from_shebang(first_line: str) -> str | None:
    if not first_line.startswith("#!"):
        return None
    parts = first_line[2:].strip().split()
    if not parts:
        return None
    interpreter = Path(parts[0]).name
    # "#!/usr/bin/env bash" and "#!/usr/bin/env -S bash -e"
    if interpreter == "env":
        args = [p for p in parts[1:] if not p.startswith("-")]
        return args[0] if args else None
    return interpreter


def has_shell_shebang(first_line: str) -> bool:
    return _interpreter_from_shebang(first_line) in _SHELL_INTERPRETERS


def is_shell_script(file_path: Path) -> bool:
    if file_path.suffix.lower() in _SHELL_EXTENSIONS:
        return True
    if file_path.suffix:
        return False
    try:
        with file_path.open("r", encoding="utf-8", errors="replace") as handle:
            first_line = handle.readline()
    except OSError:
        return False
    return has_shell_shebang(first_line)


def path_to_uri(file_path: Path) -> str:
    return file_path.resolve().as_uri()


def _with_empty_globstars(positions: set[int], pattern_parts: tuple[str, ...]) -> set[int]:
    # "**" also matches zero directories
    expanded = set(positions)
    pending = list(positions)
    while pending:
        i = pending.pop()
        if i < len(pattern_parts) and pattern_parts[i] == "**" and i + 1 not in expanded:
            expanded.add(i + 1)
            pending.append(i + 1)
    return expanded


def matches_glob(relative: PurePath, pattern: str) -> bool:
    """Whether ``Path.glob(pattern)`` on a root would select ``relative`` under it."""
    pattern_parts = PurePath(pattern).parts
    positions = _with_empty_globstars({0}, pattern_parts)
    for part in relative.parts:
        advanced: set[int] = set()
        for i in positions:
            if i == len(pattern_parts):
                continue
            if pattern_parts[i] == "**":
                advanced.add(i)
            elif fnmatch.fnmatchcase(part, pattern_parts[i]):
                advanced.add(i + 1)
        if not advanced:
            return False
        positions = _with_empty_globstars(advanced, pattern_parts)
    return len(pattern_parts) in positions
