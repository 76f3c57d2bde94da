import asyncio
import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlparse
from uuid import UUID

from persona_chat.domain.errors import TrainingStorageError
from persona_chat.domain.ports.training_store import TrainingStorePort

logger = logging.getLogger(__name__)

TRAINING_CONTENT_MAX_LENGTH = 5_000
TRAINING_FILE_SUFFIX = '-general.txt'


class LocalTrainingStore(TrainingStorePort):
    """
    Keeps one plain-text training file per persona under `base_dir`,
    addressed by `file:///` URLs. File I/O runs in a worker thread.
    """

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir).resolve()

    def path_for(self, persona_id: UUID) -> Path:
        return self.base_dir / f'{persona_id}{TRAINING_FILE_SUFFIX}'

    async def save(self, persona_id: UUID, content: str) -> str:
        if not content or not content.strip():
            return ''
        if len(content) > TRAINING_CONTENT_MAX_LENGTH:
            raise TrainingStorageError(
                f'Training content must not exceed {TRAINING_CONTENT_MAX_LENGTH} characters '
                f'(got {len(content)}).'
            )

        path = self.path_for(persona_id)
        try:
            await asyncio.to_thread(_write_text, path, content)
        except OSError as e:
            raise TrainingStorageError(f'Failed to write training file {path}: {e}', cause=e)

        logger.info('[training] saved persona_id=%s chars=%d', persona_id, len(content))
        return path.as_uri()

    async def load(self, url: Optional[str]) -> str:
        if not url or not url.strip():
            return ''

        path = self._path_from_url(url)
        try:
            return await asyncio.to_thread(path.read_text, encoding='utf-8')
        except FileNotFoundError:
            logger.warning('[training] file missing: %s', path)
            return ''
        except OSError as e:
            raise TrainingStorageError(f'Failed to read training file {path}: {e}', cause=e)

    async def delete(self, url: Optional[str]) -> None:
        if not url or not url.strip():
            return

        path = self._path_from_url(url)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            raise TrainingStorageError(f'Failed to delete training file {path}: {e}', cause=e)

    @staticmethod
    def _path_from_url(url: str) -> Path:
        parsed = urlparse(url)
        if parsed.scheme != 'file':
            raise TrainingStorageError(f'Unsupported training file URL: {url}')
        return Path(unquote(parsed.path))


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')
