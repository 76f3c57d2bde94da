from typing import Protocol

from persona_chat.domain.models import ImageUpload, StoredImage


class ImageStorePort(Protocol):
    async def save(self, upload: ImageUpload) -> StoredImage:
        """Store an already validated upload under a new unique name."""
        pass

    async def delete(self, file_name: str) -> None:
        pass
