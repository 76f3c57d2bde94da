import logging
from typing import Optional
from uuid import UUID

from persona_chat.domain.errors import (PersonaDuplicateDisplayNameError,
                                        PersonaNotFoundError,
                                        TrainingStorageError)
from persona_chat.domain.models import PaginatedResult, Persona
from persona_chat.domain.ports.repository import RepositoryPort
from persona_chat.domain.ports.training_store import TrainingStorePort
from persona_chat.domain.validators import validate_persona

logger = logging.getLogger(__name__)


class PersonaService(object):
    """
    Persona CRUD plus the persona's training text, which lives in the
    training store and is referenced by `Persona.training_file_path`.
    """

    def __init__(self, repo: RepositoryPort, training_store: Optional[TrainingStorePort] = None):
        self.repo = repo
        self.training_store = training_store

    async def create_persona(self, persona: Persona) -> Persona:
        validate_persona(persona)
        await self._ensure_unique(persona)

        created = await self.repo.add_persona(persona)
        logger.info('[persona] created id=%s display_name=%s', created.id, created.display_name)
        return created

    async def get_persona(self, persona_id: UUID) -> Persona:
        persona = await self.repo.get_persona(persona_id)
        if persona is None:
            raise PersonaNotFoundError(f'Persona with ID {persona_id} not found.')
        return persona

    async def search_personas(
        self,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        display_name: Optional[str] = None,
        created_by: Optional[str] = None,
        sort_by: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PaginatedResult[Persona]:
        return await self.repo.search_personas(
            first_name=first_name,
            last_name=last_name,
            display_name=display_name,
            created_by=created_by,
            sort_by=sort_by,
            page_number=page_number,
            page_size=page_size,
        )

    async def update_persona(self, persona: Persona) -> Persona:
        validate_persona(persona)
        await self._ensure_unique(persona)

        updated = await self.repo.update_persona(persona)
        if updated is None:
            raise PersonaNotFoundError(f'Persona with ID {persona.id} not found.')
        return updated

    async def delete_persona(self, persona_id: UUID) -> None:
        if not await self.repo.delete_persona(persona_id):
            raise PersonaNotFoundError(f'Persona with ID {persona_id} not found.')
        logger.info('[persona] deleted id=%s', persona_id)

    async def update_training(self, persona_id: UUID, content: str) -> Persona:
        """Replace the persona's training text; blank content clears it."""
        if self.training_store is None:
            raise TrainingStorageError('Training storage is not configured.')

        persona = await self.get_persona(persona_id)

        url = await self.training_store.save(persona_id, content)
        if persona.training_file_path and persona.training_file_path != url:
            await self.training_store.delete(persona.training_file_path)
        persona.training_file_path = url or None

        updated = await self.repo.update_persona(persona)
        if updated is None:
            raise PersonaNotFoundError(f'Persona with ID {persona_id} not found.')
        return updated

    async def get_training(self, persona_id: UUID) -> str:
        persona = await self.repo.get_persona(persona_id)
        if persona is None:
            return ''
        return await self.load_training(persona)

    async def load_training(self, persona: Persona) -> str:
        if self.training_store is None or not persona.training_file_path:
            return ''
        return await self.training_store.load(persona.training_file_path)

    async def _ensure_unique(self, persona: Persona) -> None:
        existing = await self.repo.get_persona_by_display_name(persona.display_name)
        if existing is not None and existing.id != persona.id:
            raise PersonaDuplicateDisplayNameError(
                f"A persona with display name '{persona.display_name}' already exists."
            )
