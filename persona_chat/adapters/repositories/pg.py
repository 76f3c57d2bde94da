from typing import Any, List, Optional, Sequence, Tuple, Type, TypeVar
from uuid import UUID

from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from persona_chat.domain.enums import PersonaSort
from persona_chat.domain.models import (Chat, Entity, Message,
                                        PaginatedResult, Persona, User)
from persona_chat.domain.ports.repository import RepositoryPort

E = TypeVar('E', bound=Entity)

_ENTITY_COLUMNS = 'id, created_at, updated_at, is_deleted, deleted_at'

USER_COLUMNS = f'{_ENTITY_COLUMNS}, first_name, last_name, email, phone, auth_sub, profile_image_url'
PERSONA_COLUMNS = (
    f'{_ENTITY_COLUMNS}, display_name, first_name, last_name, '
    'profile_image_url, training_file_path, created_by'
)
CHAT_COLUMNS = f'{_ENTITY_COLUMNS}, persona_id, user_id, title, last_message_at'
MESSAGE_COLUMNS = f'{_ENTITY_COLUMNS}, chat_id, role, content'

PERSONA_ORDER_BY = {
    PersonaSort.POPULARITY.value: 'chat_count DESC, p.created_at DESC',
    PersonaSort.ALPHABETICAL.value: 'lower(p.display_name) ASC',
    PersonaSort.RECENT.value: 'p.created_at DESC',
}


def _ilike(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    escaped = value.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f'%{escaped}%'


class _Where:
    """Accumulates `AND`-ed predicates with their parameters."""

    def __init__(self, prefix: str = '') -> None:
        self.prefix = prefix
        self.clauses: List[str] = [f'NOT {prefix}is_deleted']
        self.params: List[Any] = []

    def eq(self, column: str, value: Any) -> '_Where':
        if value is not None and value != '':
            self.clauses.append(f'{self.prefix}{column} = %s')
            self.params.append(value)
        return self

    def like(self, column: str, value: Optional[str]) -> '_Where':
        pattern = _ilike(value)
        if pattern is not None:
            self.clauses.append(f'{self.prefix}{column} ILIKE %s')
            self.params.append(pattern)
        return self

    @property
    def sql(self) -> str:
        return ' AND '.join(self.clauses)


class PgRepository(RepositoryPort):
    def __init__(self, pool: AsyncConnectionPool):
        self.pool = pool

    # ---------- plumbing ----------

    async def _fetch_one(self, model: Type[E], q: str, params: Sequence[Any]) -> Optional[E]:
        async with (
            self.pool.connection() as conn,
            conn.cursor(row_factory=dict_row) as cur,
        ):
            await cur.execute(q, params)
            row = await cur.fetchone()
            return model(**row) if row else None

    async def _fetch_all(self, model: Type[E], q: str, params: Sequence[Any]) -> List[E]:
        async with (
            self.pool.connection() as conn,
            conn.cursor(row_factory=dict_row) as cur,
        ):
            await cur.execute(q, params)
            rows = await cur.fetchall()
            return [model(**r) for r in rows]

    async def _count(self, q: str, params: Sequence[Any]) -> int:
        async with self.pool.connection() as conn, conn.cursor() as cur:
            await cur.execute(q, params)
            (n,) = await cur.fetchone()
            return int(n)

    async def _soft_delete(self, table: str, entity_id: UUID) -> bool:
        q = f"""UPDATE {table}
                SET is_deleted = TRUE, deleted_at = NOW(), updated_at = NOW()
                WHERE id = %s AND NOT is_deleted"""
        async with self.pool.connection() as conn, conn.cursor() as cur:
            await cur.execute(q, (entity_id,))
            return cur.rowcount > 0

    async def _page(
        self,
        model: Type[E],
        *,
        select: str,
        count: str,
        where: _Where,
        order_by: str,
        page_number: int,
        page_size: int,
    ) -> PaginatedResult[E]:
        total = await self._count(f'{count} WHERE {where.sql}', where.params)
        offset = (page_number - 1) * page_size
        items = await self._fetch_all(
            model,
            f'{select} WHERE {where.sql} ORDER BY {order_by} LIMIT %s OFFSET %s',
            [*where.params, page_size, offset],
        )
        return PaginatedResult(
            items=items, total_count=total, page_number=page_number, page_size=page_size
        )

    @staticmethod
    def _values(entity: Entity, fields: Tuple[str, ...]) -> List[Any]:
        return [getattr(entity, f) for f in fields]

    # ---------- users ----------

    _USER_FIELDS = ('first_name', 'last_name', 'email', 'phone', 'auth_sub', 'profile_image_url')

    async def add_user(self, user: User) -> User:
        q = f"""INSERT INTO users ({', '.join(self._USER_FIELDS)})
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING {USER_COLUMNS}"""
        return await self._fetch_one(User, q, self._values(user, self._USER_FIELDS))

    async def get_user(self, user_id: UUID) -> Optional[User]:
        q = f'SELECT {USER_COLUMNS} FROM users WHERE id = %s AND NOT is_deleted'
        return await self._fetch_one(User, q, (user_id,))

    async def get_user_by_auth_sub(self, auth_sub: str) -> Optional[User]:
        q = f'SELECT {USER_COLUMNS} FROM users WHERE auth_sub = %s AND NOT is_deleted LIMIT 1'
        return await self._fetch_one(User, q, (auth_sub,))

    async def get_user_by_email(self, email: str) -> Optional[User]:
        q = f'SELECT {USER_COLUMNS} FROM users WHERE lower(email) = lower(%s) AND NOT is_deleted LIMIT 1'
        return await self._fetch_one(User, q, ((email or '').strip(),))

    async def update_user(self, user: User) -> Optional[User]:
        assignments = ', '.join(f'{f} = %s' for f in self._USER_FIELDS)
        q = f"""UPDATE users SET {assignments}, updated_at = NOW()
                WHERE id = %s AND NOT is_deleted
                RETURNING {USER_COLUMNS}"""
        return await self._fetch_one(User, q, [*self._values(user, self._USER_FIELDS), user.id])

    async def delete_user(self, user_id: UUID) -> bool:
        return await self._soft_delete('users', user_id)

    async def search_users(
        self,
        *,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        last_name: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PaginatedResult[User]:
        where = _Where().like('phone', phone).like('email', email).like('last_name', last_name)
        return await self._page(
            User,
            select=f'SELECT {USER_COLUMNS} FROM users',
            count='SELECT COUNT(*) FROM users',
            where=where,
            order_by='created_at DESC, id',
            page_number=page_number,
            page_size=page_size,
        )

    # ---------- personas ----------

    _PERSONA_FIELDS = (
        'display_name', 'first_name', 'last_name',
        'profile_image_url', 'training_file_path', 'created_by',
    )

    async def add_persona(self, persona: Persona) -> Persona:
        q = f"""INSERT INTO personas ({', '.join(self._PERSONA_FIELDS)})
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING {PERSONA_COLUMNS}"""
        return await self._fetch_one(Persona, q, self._values(persona, self._PERSONA_FIELDS))

    async def get_persona(self, persona_id: UUID) -> Optional[Persona]:
        q = f'SELECT {PERSONA_COLUMNS} FROM personas WHERE id = %s AND NOT is_deleted'
        return await self._fetch_one(Persona, q, (persona_id,))

    async def get_persona_by_display_name(self, display_name: str) -> Optional[Persona]:
        q = f"""SELECT {PERSONA_COLUMNS} FROM personas
                WHERE lower(display_name) = lower(%s) AND NOT is_deleted LIMIT 1"""
        return await self._fetch_one(Persona, q, ((display_name or '').strip(),))

    async def update_persona(self, persona: Persona) -> Optional[Persona]:
        assignments = ', '.join(f'{f} = %s' for f in self._PERSONA_FIELDS)
        q = f"""UPDATE personas SET {assignments}, updated_at = NOW()
                WHERE id = %s AND NOT is_deleted
                RETURNING {PERSONA_COLUMNS}"""
        return await self._fetch_one(
            Persona, q, [*self._values(persona, self._PERSONA_FIELDS), persona.id]
        )

    async def delete_persona(self, persona_id: UUID) -> bool:
        return await self._soft_delete('personas', persona_id)

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
        where = (
            _Where('p.')
            .like('first_name', first_name)
            .like('last_name', last_name)
            .like('display_name', display_name)
            .eq('created_by', created_by)
        )
        order_by = PERSONA_ORDER_BY.get((sort_by or '').lower(), PERSONA_ORDER_BY[PersonaSort.RECENT.value])
        columns = ', '.join(f'p.{c.strip()}' for c in PERSONA_COLUMNS.split(','))
        select = f"""SELECT {columns},
                        (SELECT COUNT(*) FROM chats c
                         WHERE c.persona_id = p.id AND NOT c.is_deleted) AS chat_count
                     FROM personas p"""
        return await self._page(
            Persona,
            select=select,
            count='SELECT COUNT(*) FROM personas p',
            where=where,
            order_by=f'{order_by}, p.id',
            page_number=page_number,
            page_size=page_size,
        )

    # ---------- chats ----------

    _CHAT_FIELDS = ('persona_id', 'user_id', 'title', 'last_message_at')

    async def add_chat(self, chat: Chat) -> Chat:
        q = f"""INSERT INTO chats ({', '.join(self._CHAT_FIELDS)})
                VALUES (%s, %s, %s, %s)
                RETURNING {CHAT_COLUMNS}"""
        return await self._fetch_one(Chat, q, self._values(chat, self._CHAT_FIELDS))

    async def get_chat(self, chat_id: UUID) -> Optional[Chat]:
        q = f'SELECT {CHAT_COLUMNS} FROM chats WHERE id = %s AND NOT is_deleted'
        return await self._fetch_one(Chat, q, (chat_id,))

    async def update_chat(self, chat: Chat) -> Optional[Chat]:
        assignments = ', '.join(f'{f} = %s' for f in self._CHAT_FIELDS)
        q = f"""UPDATE chats SET {assignments}, updated_at = NOW()
                WHERE id = %s AND NOT is_deleted
                RETURNING {CHAT_COLUMNS}"""
        return await self._fetch_one(Chat, q, [*self._values(chat, self._CHAT_FIELDS), chat.id])

    async def delete_chat(self, chat_id: UUID) -> bool:
        return await self._soft_delete('chats', chat_id)

    async def search_chats(
        self,
        *,
        persona_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        title: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PaginatedResult[Chat]:
        where = _Where().eq('persona_id', persona_id).eq('user_id', user_id).like('title', title)
        return await self._page(
            Chat,
            select=f'SELECT {CHAT_COLUMNS} FROM chats',
            count='SELECT COUNT(*) FROM chats',
            where=where,
            order_by='created_at DESC, id',
            page_number=page_number,
            page_size=page_size,
        )

    # ---------- messages ----------

    async def add_message(self, message: Message) -> Message:
        q = f"""INSERT INTO messages (chat_id, role, content)
                VALUES (%s, %s, %s)
                RETURNING {MESSAGE_COLUMNS}"""
        return await self._fetch_one(Message, q, (message.chat_id, message.role, message.content))

    async def get_message(self, message_id: UUID) -> Optional[Message]:
        q = f'SELECT {MESSAGE_COLUMNS} FROM messages WHERE id = %s AND NOT is_deleted'
        return await self._fetch_one(Message, q, (message_id,))

    async def delete_message(self, message_id: UUID) -> bool:
        return await self._soft_delete('messages', message_id)

    async def search_messages(
        self,
        *,
        chat_id: Optional[UUID] = None,
        role: Optional[str] = None,
        content: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PaginatedResult[Message]:
        where = _Where().eq('chat_id', chat_id).eq('role', role).like('content', content)
        return await self._page(
            Message,
            select=f'SELECT {MESSAGE_COLUMNS} FROM messages',
            count='SELECT COUNT(*) FROM messages',
            where=where,
            order_by='created_at ASC, seq ASC',
            page_number=page_number,
            page_size=page_size,
        )

    async def last_messages(self, chat_id: UUID, *, limit: int) -> List[Message]:
        if limit <= 0:
            return []
        q = f"""
        SELECT {MESSAGE_COLUMNS}
        FROM (
            SELECT {MESSAGE_COLUMNS}, seq
            FROM messages
            WHERE chat_id = %s AND NOT is_deleted
            ORDER BY created_at DESC, seq DESC
            LIMIT %s
        ) sub
        ORDER BY created_at ASC, seq ASC
        """
        return await self._fetch_all(Message, q, (chat_id, limit))
