import logging
from typing import Optional
from uuid import UUID

from persona_chat.domain.errors import UserDuplicateEmailError, UserNotFoundError
from persona_chat.domain.models import PaginatedResult, User
from persona_chat.domain.ports.repository import RepositoryPort
from persona_chat.domain.validators import validate_user

logger = logging.getLogger(__name__)


class UserService(object):
    def __init__(self, repo: RepositoryPort):
        self.repo = repo

    async def create_user(self, user: User) -> User:
        validate_user(user)
        await self._ensure_unique(user)

        created = await self.repo.add_user(user)
        logger.info('[user] created id=%s', created.id)
        return created

    async def get_user(self, user_id: UUID) -> User:
        user = await self.repo.get_user(user_id)
        if user is None:
            raise UserNotFoundError(f'User with ID {user_id} not found.')
        return user

    async def get_user_by_auth_sub(self, auth_sub: str) -> User:
        user = await self.repo.get_user_by_auth_sub(auth_sub)
        if user is None:
            raise UserNotFoundError(f'User with auth subject {auth_sub} not found.')
        return user

    async def search_users(
        self,
        *,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        last_name: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PaginatedResult[User]:
        return await self.repo.search_users(
            phone=phone,
            email=email,
            last_name=last_name,
            page_number=page_number,
            page_size=page_size,
        )

    async def update_user(self, user: User) -> User:
        validate_user(user)
        await self._ensure_unique(user)

        updated = await self.repo.update_user(user)
        if updated is None:
            raise UserNotFoundError(f'User with ID {user.id} not found.')
        return updated

    async def delete_user(self, user_id: UUID) -> None:
        if not await self.repo.delete_user(user_id):
            raise UserNotFoundError(f'User with ID {user_id} not found.')
        logger.info('[user] deleted id=%s', user_id)

    async def _ensure_unique(self, user: User) -> None:
        existing = await self.repo.get_user_by_email(user.email)
        if existing is not None and existing.id != user.id:
            raise UserDuplicateEmailError(f"A user with email '{user.email}' already exists.")

        if user.auth_sub and user.auth_sub.strip():
            existing = await self.repo.get_user_by_auth_sub(user.auth_sub)
            if existing is not None and existing.id != user.id:
                raise UserDuplicateEmailError(
                    f"A user with auth subject '{user.auth_sub}' already exists."
                )
