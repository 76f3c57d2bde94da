from datetime import datetime
from typing import Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from persona_chat.domain.models import PaginatedResult

T = TypeVar('T')


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class UserOut(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    phone: str
    profile_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PersonaOut(CamelModel):
    id: UUID
    display_name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    training_file_path: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ChatOut(CamelModel):
    id: UUID
    persona_id: UUID
    user_id: UUID
    title: Optional[str] = None
    last_message_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MessageOut(CamelModel):
    id: UUID
    chat_id: UUID
    role: str
    content: str
    created_at: Optional[datetime] = None


class TrainingOut(CamelModel):
    persona_id: UUID
    content: str


class ImageUploadOut(CamelModel):
    url: str


class PageOut(CamelModel, Generic[T]):
    items: List[T]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool

    @classmethod
    def from_result(cls, result: PaginatedResult, item_type) -> 'PageOut':
        return cls(
            items=[item_type.model_validate(i) for i in result.items],
            total_count=result.total_count,
            page_number=result.page_number,
            page_size=result.page_size,
            total_pages=result.total_pages,
            has_previous_page=result.has_previous_page,
            has_next_page=result.has_next_page,
        )
