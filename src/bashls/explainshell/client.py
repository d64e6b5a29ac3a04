"""
explainshell HTTP client.

API Format:
    GET /api/explain?cmd={command}

Response:
    {
        "status": "ok",
        "matches": [
            {"start": 0, "end": 4, "helpHTML": "<b>echo</b> - display a line of text"}
        ]
    }

An ``"error"`` status or a missing ``matches`` list means explainshell could not
explain the command.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from bashls.core.ports.documentation import DocumentationLookupError
from bashls.models import ExplainResponse

logger = logging.getLogger(__name__)


class ExplainshellClient:
    def __init__(self, endpoint: str, timeout: float = 10.0, client: httpx.AsyncClient | None = None) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.client = client if client is not None else httpx.AsyncClient(timeout=timeout)

    async def explain(self, cmd: str) -> ExplainResponse:
        url = f"{self.endpoint}/api/explain"
        logger.debug("Querying %s for %r", url, cmd)
        try:
            response = await self.client.get(url, params={"cmd": cmd})
            response.raise_for_status()
            return ExplainResponse.model_validate(response.json())
        except httpx.HTTPError as exc:
            raise DocumentationLookupError(f"explainshell request failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise DocumentationLookupError(f"invalid explainshell response: {exc}") from exc

    async def aclose(self) -> None:
        await self.client.aclose()
