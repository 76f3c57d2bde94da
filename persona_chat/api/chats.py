from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from persona_chat.api.dto import ChatOut, PageOut
from persona_chat.api.requests import ChatIn, Paging
from persona_chat.domain.models import Chat
from persona_chat.infra.service import get_chat_service
from persona_chat.services.chat_service import ChatService

router = APIRouter(prefix='/chat', tags=['chat'])


@router.post('', status_code=status.HTTP_201_CREATED, response_model=ChatOut)
async def create_chat(body: ChatIn, service: ChatService = Depends(get_chat_service)):
    chat = Chat(
        persona_id=body.persona_id,
        user_id=body.user_id,
        title=body.title,
        last_message_at=body.last_message_at or datetime.now(timezone.utc),
    )
    return ChatOut.model_validate(await service.create_chat(chat))


@router.get('/{chat_id}', response_model=ChatOut)
async def get_chat(chat_id: UUID, service: ChatService = Depends(get_chat_service)):
    return ChatOut.model_validate(await service.get_chat(chat_id))


@router.get('', response_model=PageOut[ChatOut])
async def search_chats(
    persona_id: Optional[UUID] = Query(None, alias='personaId'),
    user_id: Optional[UUID] = Query(None, alias='userId'),
    title: Optional[str] = None,
    paging: Paging = Depends(),
    service: ChatService = Depends(get_chat_service),
):
    result = await service.search_chats(
        persona_id=persona_id,
        user_id=user_id,
        title=title,
        page_number=paging.page_number,
        page_size=paging.page_size,
    )
    return PageOut[ChatOut].from_result(result, ChatOut)


@router.put('/{chat_id}', response_model=ChatOut)
async def update_chat(
    chat_id: UUID, body: ChatIn, service: ChatService = Depends(get_chat_service)
):
    chat = Chat(
        id=chat_id,
        persona_id=body.persona_id,
        user_id=body.user_id,
        title=body.title,
        last_message_at=body.last_message_at,
    )
    return ChatOut.model_validate(await service.update_chat(chat))


@router.delete('/{chat_id}', status_code=status.HTTP_204_NO_CONTENT)
async def delete_chat(chat_id: UUID, service: ChatService = Depends(get_chat_service)):
    await service.delete_chat(chat_id)
