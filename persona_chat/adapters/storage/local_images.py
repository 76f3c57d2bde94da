import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path, PurePath
from typing import Union
from uuid import uuid4

from persona_chat.domain.errors import ImageUploadError
from persona_chat.domain.models import ImageUpload, StoredImage
from persona_chat.domain.ports.image_store import ImageStorePort

logger = logging.getLogger(__name__)


class LocalImageStore(ImageStorePort):
    """
    Writes uploaded images to `base_dir` as `<uuid><ext>` and hands back
    `<base_url>/<name>`. Serving that URL is left to the web server.
    """

    def __init__(self, base_dir: Union[str, Path], base_url: str = '/uploads/personas'):
        self.base_dir = Path(base_dir).resolve()
        self.base_url = base_url.rstrip('/')

    async def save(self, upload: ImageUpload) -> StoredImage:
        extension = PurePath(upload.file_name).suffix.lower()
        stored_name = f'{uuid4()}{extension}'
        path = self.base_dir / stored_name
        try:
            await asyncio.to_thread(_write_bytes, path, upload.content or b'')
        except OSError as e:
            raise ImageUploadError(f'Failed to save image file: {e}', cause=e)

        logger.info('[image] saved %s bytes=%d', stored_name, upload.size)
        return StoredImage(
            url=f'{self.base_url}/{stored_name}',
            stored_file_name=stored_name,
            uploaded_at=datetime.now(timezone.utc),
        )

    async def delete(self, file_name: str) -> None:
        path = self.base_dir / file_name
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            raise ImageUploadError(f'Failed to delete image file: {e}', cause=e)
        logger.info('[image] deleted %s', file_name)


def _write_bytes(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
