from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from persona_chat.api.auth import get_current_subject
from persona_chat.api.dto import PageOut, UserOut
from persona_chat.api.requests import Paging, UserIn
from persona_chat.domain.models import User
from persona_chat.infra.service import get_user_service
from persona_chat.services.user_service import UserService

router = APIRouter(prefix='/user', tags=['user'])


@router.post('', status_code=status.HTTP_201_CREATED, response_model=UserOut)
async def create_user(
    body: UserIn,
    subject: Optional[str] = Depends(get_current_subject),
    service: UserService = Depends(get_user_service),
):
    user = User(**body.model_dump(), auth_sub=subject)
    return UserOut.model_validate(await service.create_user(user))


# declared before /{user_id} so "me" is not parsed as an id
@router.get('/me', response_model=UserOut)
async def get_me(
    subject: Optional[str] = Depends(get_current_subject),
    service: UserService = Depends(get_user_service),
):
    if subject is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Not authenticated')
    return UserOut.model_validate(await service.get_user_by_auth_sub(subject))


@router.get('/{user_id}', response_model=UserOut)
async def get_user(user_id: UUID, service: UserService = Depends(get_user_service)):
    return UserOut.model_validate(await service.get_user(user_id))


@router.get('', response_model=PageOut[UserOut])
async def search_users(
    phone: Optional[str] = None,
    email: Optional[str] = None,
    last_name: Optional[str] = Query(None, alias='lastName'),
    paging: Paging = Depends(),
    service: UserService = Depends(get_user_service),
):
    result = await service.search_users(
        phone=phone,
        email=email,
        last_name=last_name,
        page_number=paging.page_number,
        page_size=paging.page_size,
    )
    return PageOut[UserOut].from_result(result, UserOut)


@router.put('/{user_id}', response_model=UserOut)
async def update_user(
    user_id: UUID, body: UserIn, service: UserService = Depends(get_user_service)
):
    current = await service.get_user(user_id)
    user = current.model_copy(update=body.model_dump())
    return UserOut.model_validate(await service.update_user(user))


@router.delete('/{user_id}', status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UUID, service: UserService = Depends(get_user_service)):
    await service.delete_user(user_id)
