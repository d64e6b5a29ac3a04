"""Unit tests for occurrence, reference and definition lookup."""

from bashls.core.analyzer import Analyzer
from bashls.models import Location

URI_A = "file:///tmp/a.sh"
URI_B = "file:///tmp/b.sh"


def _spans(locations: list[Location]) -> list[tuple[str, int, int, int, int]]:
    return [
        (loc.uri, loc.range.start.line, loc.range.start.character, loc.range.end.line, loc.range.end.character)
        for loc in locations
    ]


def test_references_include_definition_and_use(analyzer: Analyzer, example_source: str) -> None:
    analyzer.analyze(URI_A, example_source)

    assert _spans(analyzer.find_references("x")) == [
        (URI_A, 0, 8, 0, 11),
        (URI_A, 1, 6, 1, 7),
    ]


def test_occurrences_contain_every_definition(analyzer: Analyzer) -> None:
    source = "x=1\nf() { x=2; echo $x; }\nf\n"
    analyzer.analyze(URI_A, source)

    for name in ("x", "f"):
        occurrences = _spans(analyzer.find_occurrences(URI_A, name))
        for definition in _spans(analyzer.find_definition(name)):
            assert definition in occurrences


def test_command_names_are_references(analyzer: Analyzer) -> None:
    analyzer.analyze(URI_A, "greet() { echo hi; }\ngreet\ngreet\n")

    spans = _spans(analyzer.find_occurrences(URI_A, "greet"))
    assert len(spans) == 3
    assert spans[1] == (URI_A, 1, 0, 1, 5)
    assert spans[2] == (URI_A, 2, 0, 2, 5)


def test_definitions_only_count_declarations(analyzer: Analyzer) -> None:
    analyzer.analyze(URI_A, "greet() { :; }\ngreet\ngreet\n")

    assert len(analyzer.find_definition("greet")) == 1
    assert len(analyzer.find_occurrences(URI_A, "greet")) == 3


def test_references_span_files_in_registration_order(analyzer: Analyzer) -> None:
    analyzer.analyze(URI_B, "echo $shared\n")
    analyzer.analyze(URI_A, "shared=1\necho $shared\n")

    uris = [loc.uri for loc in analyzer.find_references("shared")]
    assert uris == [URI_B, URI_A, URI_A]


def test_definitions_span_files(analyzer: Analyzer) -> None:
    analyzer.analyze(URI_A, "util() { :; }\n")
    analyzer.analyze(URI_B, "util() { :; }\n")

    assert {loc.uri for loc in analyzer.find_definition("util")} == {URI_A, URI_B}


def test_missing_name_and_unknown_file_find_nothing(analyzer: Analyzer) -> None:
    analyzer.analyze(URI_A, "x=1\n")

    assert analyzer.find_occurrences(URI_A, "nope") == []
    assert analyzer.find_occurrences("file:///unknown.sh", "x") == []
    assert analyzer.find_references("nope") == []
    assert analyzer.find_definition("nope") == []


def test_occurrence_scan_is_not_scope_aware(analyzer: Analyzer) -> None:
    analyzer.analyze(URI_A, "a() { local v=1; }\nb() { echo $v; }\n")

    assert len(analyzer.find_occurrences(URI_A, "v")) == 2
