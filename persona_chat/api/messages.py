from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from persona_chat.api.dto import MessageOut, PageOut
from persona_chat.api.requests import MessageIn, Paging, SendMessageIn
from persona_chat.domain.enums import Role
from persona_chat.domain.models import Message
from persona_chat.infra.service import (get_message_service,
                                        get_send_message_service)
from persona_chat.services.message_service import MessageService

router = APIRouter(prefix='/message', tags=['message'])


@router.post('/send', response_model=MessageOut)
async def send_message(
    body: SendMessageIn, service: MessageService = Depends(get_send_message_service)
):
    reply = await service.send_message(
        Message(chat_id=body.chat_id, role=Role.USER.value, content=body.content)
    )
    return MessageOut.model_validate(reply)


@router.post('', status_code=status.HTTP_201_CREATED, response_model=MessageOut)
async def create_message(
    body: MessageIn, service: MessageService = Depends(get_message_service)
):
    created = await service.create_message(
        Message(chat_id=body.chat_id, role=body.role, content=body.content)
    )
    return MessageOut.model_validate(created)


@router.get('/{message_id}', response_model=MessageOut)
async def get_message(
    message_id: UUID, service: MessageService = Depends(get_message_service)
):
    return MessageOut.model_validate(await service.get_message(message_id))


@router.get('', response_model=PageOut[MessageOut])
async def search_messages(
    chat_id: Optional[UUID] = Query(None, alias='chatId'),
    role: Optional[str] = None,
    content: Optional[str] = None,
    paging: Paging = Depends(),
    service: MessageService = Depends(get_message_service),
):
    result = await service.search_messages(
        chat_id=chat_id,
        role=role,
        content=content,
        page_number=paging.page_number,
        page_size=paging.page_size,
    )
    return PageOut[MessageOut].from_result(result, MessageOut)


@router.delete('/{message_id}', status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: UUID, service: MessageService = Depends(get_message_service)
):
    await service.delete_message(message_id)
