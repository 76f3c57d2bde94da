from __future__ import annotations

import itertools
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, TypeVar
from uuid import UUID, uuid4

from persona_chat.domain.enums import PersonaSort
from persona_chat.domain.models import (Chat, Entity, Message,
                                        PaginatedResult, Persona, User)
from persona_chat.domain.ports.repository import RepositoryPort

E = TypeVar('E', bound=Entity)


def _now_utc() -> datetime:
    # Always timezone-aware (UTC)
    return datetime.now(timezone.utc)


def _contains(haystack: Optional[str], needle: Optional[str]) -> bool:
    # ILIKE '%needle%'
    if not needle or not needle.strip():
        return True
    return needle.lower() in (haystack or '').lower()


def _page(rows: List[E], page_number: int, page_size: int) -> PaginatedResult[E]:
    offset = (page_number - 1) * page_size
    return PaginatedResult(
        items=rows[offset:offset + page_size],
        total_count=len(rows),
        page_number=page_number,
        page_size=page_size,
    )


class InMemoryRepository(RepositoryPort):
    """
    Dict-backed storage with the same contract as the Postgres adapter.
    Returns copies so callers never mutate stored rows. Not thread-safe.
    """

    def __init__(self) -> None:
        self._users: Dict[UUID, User] = {}
        self._personas: Dict[UUID, Persona] = {}
        self._chats: Dict[UUID, Chat] = {}
        self._messages: Dict[UUID, Message] = {}
        # insertion sequence, tiebreaker for equal created_at
        self._seq: Dict[UUID, int] = {}
        self._counter = itertools.count(1)

    # ---------- generic helpers ----------

    def _insert(self, table: Dict[UUID, E], entity: E) -> E:
        row = entity.model_copy(deep=True)
        row.id = row.id or uuid4()
        row.created_at = row.created_at or _now_utc()
        row.is_deleted = False
        table[row.id] = row
        self._seq[row.id] = next(self._counter)
        return row.model_copy(deep=True)

    @staticmethod
    def _get(table: Dict[UUID, E], entity_id: UUID) -> Optional[E]:
        row = table.get(entity_id)
        if row is None or row.is_deleted:
            return None
        return row.model_copy(deep=True)

    @staticmethod
    def _update(table: Dict[UUID, E], entity: E) -> Optional[E]:
        current = table.get(entity.id) if entity.id else None
        if current is None or current.is_deleted:
            return None
        row = entity.model_copy(deep=True)
        row.created_at = current.created_at
        row.is_deleted = False
        row.updated_at = _now_utc()
        table[row.id] = row
        return row.model_copy(deep=True)

    @staticmethod
    def _soft_delete(table: Dict[UUID, E], entity_id: UUID) -> bool:
        row = table.get(entity_id)
        if row is None or row.is_deleted:
            return False
        now = _now_utc()
        row.is_deleted = True
        row.deleted_at = now
        row.updated_at = now
        return True

    def _live(self, table: Dict[UUID, E], predicate: Callable[[E], bool]) -> List[E]:
        return [r.model_copy(deep=True) for r in table.values() if not r.is_deleted and predicate(r)]

    def _by_created(self, row: Entity):
        return (row.created_at, self._seq[row.id])

    # ---------- users ----------

    async def add_user(self, user: User) -> User:
        return self._insert(self._users, user)

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return self._get(self._users, user_id)

    async def get_user_by_auth_sub(self, auth_sub: str) -> Optional[User]:
        rows = self._live(self._users, lambda u: u.auth_sub == auth_sub)
        return rows[0] if rows else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = (email or '').strip().lower()
        rows = self._live(self._users, lambda u: u.email.strip().lower() == wanted)
        return rows[0] if rows else None

    async def update_user(self, user: User) -> Optional[User]:
        return self._update(self._users, user)

    async def delete_user(self, user_id: UUID) -> bool:
        return self._soft_delete(self._users, user_id)

    async def search_users(
        self,
        *,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        last_name: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PaginatedResult[User]:
        rows = self._live(
            self._users,
            lambda u: _contains(u.phone, phone)
            and _contains(u.email, email)
            and _contains(u.last_name, last_name),
        )
        rows.sort(key=self._by_created, reverse=True)
        return _page(rows, page_number, page_size)

    # ---------- personas ----------

    async def add_persona(self, persona: Persona) -> Persona:
        return self._insert(self._personas, persona)

    async def get_persona(self, persona_id: UUID) -> Optional[Persona]:
        return self._get(self._personas, persona_id)

    async def get_persona_by_display_name(self, display_name: str) -> Optional[Persona]:
        wanted = (display_name or '').strip().lower()
        rows = self._live(self._personas, lambda p: p.display_name.strip().lower() == wanted)
        return rows[0] if rows else None

    async def update_persona(self, persona: Persona) -> Optional[Persona]:
        return self._update(self._personas, persona)

    async def delete_persona(self, persona_id: UUID) -> bool:
        return self._soft_delete(self._personas, persona_id)

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
        rows = self._live(
            self._personas,
            lambda p: _contains(p.first_name, first_name)
            and _contains(p.last_name, last_name)
            and _contains(p.display_name, display_name)
            and (not created_by or p.created_by == created_by),
        )

        # newest first is the default and the tiebreaker
        rows.sort(key=self._by_created, reverse=True)
        sort = (sort_by or '').lower()
        if sort == PersonaSort.ALPHABETICAL.value:
            rows.sort(key=lambda p: p.display_name.lower())
        elif sort == PersonaSort.POPULARITY.value:
            counts: Dict[UUID, int] = {}
            for chat in self._chats.values():
                if not chat.is_deleted:
                    counts[chat.persona_id] = counts.get(chat.persona_id, 0) + 1
            rows.sort(key=lambda p: counts.get(p.id, 0), reverse=True)

        return _page(rows, page_number, page_size)

    # ---------- chats ----------

    async def add_chat(self, chat: Chat) -> Chat:
        return self._insert(self._chats, chat)

    async def get_chat(self, chat_id: UUID) -> Optional[Chat]:
        return self._get(self._chats, chat_id)

    async def update_chat(self, chat: Chat) -> Optional[Chat]:
        return self._update(self._chats, chat)

    async def delete_chat(self, chat_id: UUID) -> bool:
        return self._soft_delete(self._chats, chat_id)

    async def search_chats(
        self,
        *,
        persona_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        title: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PaginatedResult[Chat]:
        rows = self._live(
            self._chats,
            lambda c: (persona_id is None or c.persona_id == persona_id)
            and (user_id is None or c.user_id == user_id)
            and _contains(c.title, title),
        )
        rows.sort(key=self._by_created, reverse=True)
        return _page(rows, page_number, page_size)

    # ---------- messages ----------

    async def add_message(self, message: Message) -> Message:
        return self._insert(self._messages, message)

    async def get_message(self, message_id: UUID) -> Optional[Message]:
        return self._get(self._messages, message_id)

    async def delete_message(self, message_id: UUID) -> bool:
        return self._soft_delete(self._messages, message_id)

    async def search_messages(
        self,
        *,
        chat_id: Optional[UUID] = None,
        role: Optional[str] = None,
        content: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PaginatedResult[Message]:
        rows = self._live(
            self._messages,
            lambda m: (chat_id is None or m.chat_id == chat_id)
            and (not role or m.role == role)
            and _contains(m.content, content),
        )
        rows.sort(key=self._by_created)
        return _page(rows, page_number, page_size)

    async def last_messages(self, chat_id: UUID, *, limit: int) -> List[Message]:
        if limit <= 0:
            return []
        rows = self._live(self._messages, lambda m: m.chat_id == chat_id)
        # oldest→newest, keep the newest `limit`
        rows.sort(key=self._by_created)
        return rows[-limit:]
