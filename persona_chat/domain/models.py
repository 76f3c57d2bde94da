import math
from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, field_validator

T = TypeVar('T')


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken to be UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Entity(BaseModel):
    id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None


class User(Entity):
    first_name: str = ''
    last_name: str = ''
    email: str = ''
    phone: str = ''
    auth_sub: Optional[str] = None
    profile_image_url: Optional[str] = None


class Persona(Entity):
    display_name: str = ''
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    training_file_path: Optional[str] = None
    created_by: Optional[str] = None


class Chat(Entity):
    persona_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    title: Optional[str] = None
    last_message_at: Optional[datetime] = None

    @field_validator('last_message_at')
    def last_message_at_is_aware(cls, v):
        return as_utc(v)


class Message(Entity):
    chat_id: Optional[UUID] = None
    role: str = ''
    content: str = ''


class PaginatedResult(BaseModel, Generic[T]):
    """One page of a query. Transient, never persisted."""

    items: List[T] = []
    total_count: int = 0
    page_number: int = 1
    page_size: int = 10

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1

    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.total_pages


class ImageUpload(BaseModel):
    """An uploaded image file, as received from the client."""

    file_name: str = ''
    content_type: str = ''
    content: Optional[bytes] = None

    @property
    def size(self) -> int:
        return len(self.content or b'')


class StoredImage(BaseModel):
    url: str
    stored_file_name: str
    uploaded_at: datetime
