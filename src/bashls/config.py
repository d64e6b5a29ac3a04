import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})

_ENV_VARIABLES = {
    "explainshell_endpoint": "EXPLAINSHELL_ENDPOINT",
    "explainshell_timeout": "EXPLAINSHELL_TIMEOUT",
    "highlight_parsing_errors": "HIGHLIGHT_PARSING_ERRORS",
    "glob_pattern": "GLOB_PATTERN",
    "watch_workspace": "BASHLS_WATCH_WORKSPACE",
    "log_level": "BASHLS_LOG_LEVEL",
}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _snake_case(key: str) -> str:
    return "".join(f"_{ch.lower()}" if ch.isupper() else ch for ch in key)


class ServerConfig(BaseModel):
    explainshell_endpoint: str | None = None
    explainshell_timeout: float = 10.0
    highlight_parsing_errors: bool = True
    glob_pattern: str = "**/*.sh"
    watch_workspace: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerConfig":
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for field_name, variable in _ENV_VARIABLES.items():
            raw = env.get(variable)
            if raw is None or raw == "":
                continue
            values[field_name] = raw
        return cls.model_validate(_coerce(values))

    def merged_with(self, options: Mapping[str, Any] | None) -> "ServerConfig":
        """Apply LSP ``initializationOptions`` on top of this configuration."""
        if not options:
            return self
        updates = {_snake_case(k): v for k, v in options.items()}
        updates = {k: v for k, v in updates.items() if k in ServerConfig.model_fields and v is not None}
        return ServerConfig.model_validate(_coerce({**self.model_dump(), **updates}))


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    for key in ("highlight_parsing_errors", "watch_workspace"):
        if key in values:
            values[key] = _parse_bool(values[key])
    return values
