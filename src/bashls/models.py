from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    line: int
    character: int


class Range(BaseModel):
    start: Position
    end: Position


class Location(BaseModel):
    uri: str
    range: Range


class DeclarationKind(str, Enum):
    FUNCTION = "function"
    VARIABLE = "variable"
    ENVIRONMENT_VARIABLE = "environment_variable"


class Declaration(BaseModel):
    name: str
    kind: DeclarationKind
    location: Location
    container_name: str | None = None


class DiagnosticSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    range: Range
    message: str
    severity: DiagnosticSeverity
    source: str = "bashls"


class CompletionKind(str, Enum):
    FUNCTION = "function"
    VARIABLE = "variable"
    METHOD = "method"


class SourceKind(str, Enum):
    SYMBOL = "symbol"
    EXECUTABLE = "executable"
    BUILTIN = "builtin"


class CompletionData(BaseModel):
    name: str
    source_kind: SourceKind


class CompletionItem(BaseModel):
    label: str
    kind: CompletionKind
    data: CompletionData
    documentation: str | None = None


class ExplainMatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start: int
    end: int
    help_html: str | None = Field(default=None, alias="helpHTML")


class ExplainResponse(BaseModel):
    """Body of the explainshell ``/api/explain`` endpoint."""

    status: str | None = None
    matches: list[ExplainMatch] | None = None


class ExplainResult(BaseModel):
    status: str = "ok"
    cmd: str = ""
    cmd_type: str = ""
    help_html: str | None = None
    reason: str | None = None

    @property
    def is_error(self) -> bool:
        return self.status == "error"
