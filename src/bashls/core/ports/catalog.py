from typing import Protocol


class CommandCatalog(Protocol):
    def list(self) -> list[str]: ...

    def contains(self, name: str) -> bool: ...

    async def documentation(self, name: str) -> str: ...
