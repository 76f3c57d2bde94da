from typing import Optional, Protocol
from uuid import UUID


class TrainingStorePort(Protocol):
    async def save(self, persona_id: UUID, content: str) -> str:
        """Store the persona's training text and return its URL ('' if nothing was stored)."""
        pass

    async def load(self, url: Optional[str]) -> str:
        """Return the text behind `url`, or '' when there is none."""
        pass

    async def delete(self, url: Optional[str]) -> None:
        pass
