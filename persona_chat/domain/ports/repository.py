from typing import List, Optional, Protocol
from uuid import UUID

from persona_chat.domain.models import (Chat, Message, PaginatedResult,
                                        Persona, User)


class RepositoryPort(Protocol):
    """
    Storage for every entity. `get_*` returns None when the row is absent
    or soft-deleted; the caller decides whether that is an error.
    """

    # users
    async def add_user(self, user: User) -> User:
        raise NotImplementedError

    async def get_user(self, user_id: UUID) -> Optional[User]:
        raise NotImplementedError

    async def get_user_by_auth_sub(self, auth_sub: str) -> Optional[User]:
        raise NotImplementedError

    async def get_user_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    async def update_user(self, user: User) -> Optional[User]:
        raise NotImplementedError

    async def delete_user(self, user_id: UUID) -> bool:
        raise NotImplementedError

    async def search_users(
        self,
        *,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        last_name: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PaginatedResult[User]:
        raise NotImplementedError

    # personas
    async def add_persona(self, persona: Persona) -> Persona:
        raise NotImplementedError

    async def get_persona(self, persona_id: UUID) -> Optional[Persona]:
        raise NotImplementedError

    async def get_persona_by_display_name(self, display_name: str) -> Optional[Persona]:
        raise NotImplementedError

    async def update_persona(self, persona: Persona) -> Optional[Persona]:
        raise NotImplementedError

    async def delete_persona(self, persona_id: UUID) -> bool:
        raise NotImplementedError

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
        raise NotImplementedError

    # chats
    async def add_chat(self, chat: Chat) -> Chat:
        raise NotImplementedError

    async def get_chat(self, chat_id: UUID) -> Optional[Chat]:
        raise NotImplementedError

    async def update_chat(self, chat: Chat) -> Optional[Chat]:
        raise NotImplementedError

    async def delete_chat(self, chat_id: UUID) -> bool:
        raise NotImplementedError

    async def search_chats(
        self,
        *,
        persona_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        title: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PaginatedResult[Chat]:
        raise NotImplementedError

    # messages
    async def add_message(self, message: Message) -> Message:
        raise NotImplementedError

    async def get_message(self, message_id: UUID) -> Optional[Message]:
        raise NotImplementedError

    async def delete_message(self, message_id: UUID) -> bool:
        raise NotImplementedError

    async def search_messages(
        self,
        *,
        chat_id: Optional[UUID] = None,
        role: Optional[str] = None,
        content: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PaginatedResult[Message]:
        """Oldest-first pages of the chat log."""
        raise NotImplementedError

    async def last_messages(self, chat_id: UUID, *, limit: int) -> List[Message]:
        """The `limit` most recent messages of a chat, returned oldest-first."""
        raise NotImplementedError
