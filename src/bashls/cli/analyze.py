from collections.abc import Sequence
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from bashls.core.analyzer import Analyzer
from bashls.core.languages import is_shell_script, path_to_uri
from bashls.models import Location

console = Console()


def _render_table(headers: Sequence[str], rows: Sequence[tuple[Any, ...]]) -> None:
    table = Table(show_lines=False)
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*(str(v) for v in row))
    console.print(table)
    console.print(f"({len(rows)} rows)")


def _read(path: Path) -> str:
    try:
        return path.read_bytes().decode("utf-8", errors="replace")
    except FileNotFoundError:
        console.print(f"[red]File not found:[/red] {path}")
        raise typer.Exit(code=2) from None


def _script_files(paths: Sequence[Path]) -> list[Path]:
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(p for p in sorted(path.rglob("*")) if p.is_file() and is_shell_script(p))
        else:
            files.append(path)
    return files


def _location_row(location: Location) -> tuple[str, int, int, int, int]:
    rng = location.range
    return (location.uri, rng.start.line, rng.start.character, rng.end.line, rng.end.character)


def analyze(
    paths: Annotated[list[Path], typer.Argument(help="Shell scripts, or directories to search for them.")],
) -> None:
    """Report syntax errors and missing tokens; exits with 1 if there are any."""
    analyzer = Analyzer()
    rows: list[tuple[Any, ...]] = []
    for path in _script_files(paths):
        for diagnostic in analyzer.analyze(path_to_uri(path), _read(path)):
            start = diagnostic.range.start
            rows.append((str(path), start.line + 1, start.character + 1, diagnostic.severity.value, diagnostic.message))
    _render_table(["file", "line", "column", "severity", "message"], rows)
    if rows:
        raise typer.Exit(code=1)


def symbols(
    path: Annotated[Path, typer.Argument(help="Shell script to list declarations of.")],
) -> None:
    """List the functions and variables declared in a script."""
    analyzer = Analyzer()
    uri = path_to_uri(path)
    analyzer.analyze(uri, _read(path))
    rows = [
        (d.name, d.kind.value, d.container_name or "", d.location.range.start.line + 1)
        for d in analyzer.find_symbols(uri)
    ]
    _render_table(["name", "kind", "container", "line"], rows)


def references(
    name: Annotated[str, typer.Argument(help="Function or variable name.")],
    root: Annotated[Path, typer.Option(help="Directory to scan.")] = Path("."),
    glob: Annotated[str, typer.Option(help="Glob pattern for shell scripts.")] = "**/*.sh",
) -> None:
    """Find every occurrence of a name across a directory of scripts."""
    analyzer = Analyzer()
    count = analyzer.analyze_root(root, glob)
    console.print(f"[green]Analyzed[/green] {count} file(s)")
    rows = [_location_row(loc) for loc in analyzer.find_references(name)]
    _render_table(["uri", "start_line", "start_column", "end_line", "end_column"], rows)
