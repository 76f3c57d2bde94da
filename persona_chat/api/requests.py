from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import Query
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from persona_chat.domain.models import as_utc


class CamelIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SendMessageIn(CamelIn):
    chat_id: UUID
    content: str


class MessageIn(CamelIn):
    chat_id: UUID
    role: str
    content: str


class ChatIn(CamelIn):
    persona_id: UUID
    user_id: UUID
    title: Optional[str] = None
    last_message_at: Optional[datetime] = None

    @field_validator('last_message_at')
    def naive_is_utc(cls, v):
        return as_utc(v)


class PersonaIn(CamelIn):
    display_name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


class TrainingIn(CamelIn):
    content: str = ''


class UserIn(CamelIn):
    first_name: str = ''
    last_name: str = ''
    email: str
    phone: str = ''
    profile_image_url: Optional[str] = None


class Paging(object):
    def __init__(
        self,
        page_number: int = Query(1, alias='pageNumber', ge=1),
        page_size: int = Query(10, alias='pageSize', ge=1, le=100),
    ):
        self.page_number = page_number
        self.page_size = page_size
