from typing import Protocol

from bashls.models import ExplainResponse


class DocumentationLookupError(Exception):
    """The documentation service could not be reached or answered garbage."""


class DocumentationClient(Protocol):
    async def explain(self, cmd: str) -> ExplainResponse: ...

    async def aclose(self) -> None: ...
