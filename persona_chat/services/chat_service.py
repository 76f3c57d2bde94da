from datetime import datetime
from typing import Optional
from uuid import UUID

from persona_chat.domain.errors import ChatNotFoundError
from persona_chat.domain.models import Chat, PaginatedResult, as_utc
from persona_chat.domain.ports.repository import RepositoryPort
from persona_chat.domain.validators import validate_chat


def later_of(previous: Optional[datetime], candidate: Optional[datetime]) -> Optional[datetime]:
    """`last_message_at` only ever moves forward."""
    previous, candidate = as_utc(previous), as_utc(candidate)
    if previous is None:
        return candidate
    if candidate is None:
        return previous
    return max(previous, candidate)


class ChatService(object):
    def __init__(self, repo: RepositoryPort):
        self.repo = repo

    async def create_chat(self, chat: Chat) -> Chat:
        validate_chat(chat)
        return await self.repo.add_chat(chat)

    async def get_chat(self, chat_id: UUID) -> Chat:
        chat = await self.repo.get_chat(chat_id)
        if chat is None:
            raise ChatNotFoundError(f'Chat with ID {chat_id} not found.')
        return chat

    async def search_chats(
        self,
        *,
        persona_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        title: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PaginatedResult[Chat]:
        return await self.repo.search_chats(
            persona_id=persona_id,
            user_id=user_id,
            title=title,
            page_number=page_number,
            page_size=page_size,
        )

    async def update_chat(self, chat: Chat) -> Chat:
        current = await self.get_chat(chat.id)
        chat = chat.model_copy(
            update={
                'last_message_at': later_of(current.last_message_at, chat.last_message_at)
            }
        )
        validate_chat(chat)

        updated = await self.repo.update_chat(chat)
        if updated is None:
            raise ChatNotFoundError(f'Chat with ID {chat.id} not found.')
        return updated

    async def delete_chat(self, chat_id: UUID) -> None:
        if not await self.repo.delete_chat(chat_id):
            raise ChatNotFoundError(f'Chat with ID {chat_id} not found.')
