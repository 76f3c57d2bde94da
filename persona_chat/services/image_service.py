from typing import Sequence

from persona_chat.domain.models import ImageUpload, StoredImage
from persona_chat.domain.ports.image_store import ImageStorePort
from persona_chat.domain.validators import (IMAGE_CONTENT_TYPES,
                                            IMAGE_EXTENSIONS,
                                            IMAGE_MAX_FILE_SIZE_BYTES,
                                            validate_image_file_name,
                                            validate_image_upload)


class ImageService(object):
    def __init__(
        self,
        store: ImageStorePort,
        *,
        max_file_size: int = IMAGE_MAX_FILE_SIZE_BYTES,
        allowed_extensions: Sequence[str] = IMAGE_EXTENSIONS,
        allowed_content_types: Sequence[str] = IMAGE_CONTENT_TYPES,
    ):
        self.store = store
        self.max_file_size = max_file_size
        self.allowed_extensions = tuple(e.lower() for e in allowed_extensions)
        self.allowed_content_types = tuple(c.lower() for c in allowed_content_types)

    async def upload_image(self, upload: ImageUpload) -> StoredImage:
        validate_image_upload(
            upload,
            max_file_size=self.max_file_size,
            allowed_extensions=self.allowed_extensions,
            allowed_content_types=self.allowed_content_types,
        )
        return await self.store.save(upload)

    async def delete_image(self, file_name: str) -> None:
        validate_image_file_name(file_name)
        await self.store.delete(file_name)
