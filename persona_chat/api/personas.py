from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from persona_chat.api.auth import get_current_subject
from persona_chat.api.dto import PageOut, PersonaOut, TrainingOut
from persona_chat.api.requests import Paging, PersonaIn, TrainingIn
from persona_chat.domain.models import Persona
from persona_chat.infra.service import get_persona_service
from persona_chat.services.persona_service import PersonaService

router = APIRouter(prefix='/persona', tags=['persona'])


@router.post('', status_code=status.HTTP_201_CREATED, response_model=PersonaOut)
async def create_persona(
    body: PersonaIn,
    subject: Optional[str] = Depends(get_current_subject),
    service: PersonaService = Depends(get_persona_service),
):
    persona = Persona(**body.model_dump(), created_by=subject)
    return PersonaOut.model_validate(await service.create_persona(persona))


@router.get('/{persona_id}', response_model=PersonaOut)
async def get_persona(
    persona_id: UUID, service: PersonaService = Depends(get_persona_service)
):
    return PersonaOut.model_validate(await service.get_persona(persona_id))


@router.get('', response_model=PageOut[PersonaOut])
async def search_personas(
    first_name: Optional[str] = Query(None, alias='firstName'),
    last_name: Optional[str] = Query(None, alias='lastName'),
    display_name: Optional[str] = Query(None, alias='displayName'),
    created_by: Optional[str] = Query(None, alias='createdBy'),
    sort_by: Optional[str] = Query(None, alias='sortBy'),
    paging: Paging = Depends(),
    service: PersonaService = Depends(get_persona_service),
):
    result = await service.search_personas(
        first_name=first_name,
        last_name=last_name,
        display_name=display_name,
        created_by=created_by,
        sort_by=sort_by,
        page_number=paging.page_number,
        page_size=paging.page_size,
    )
    return PageOut[PersonaOut].from_result(result, PersonaOut)


@router.put('/{persona_id}', response_model=PersonaOut)
async def update_persona(
    persona_id: UUID,
    body: PersonaIn,
    service: PersonaService = Depends(get_persona_service),
):
    current = await service.get_persona(persona_id)
    persona = current.model_copy(update=body.model_dump())
    return PersonaOut.model_validate(await service.update_persona(persona))


@router.delete('/{persona_id}', status_code=status.HTTP_204_NO_CONTENT)
async def delete_persona(
    persona_id: UUID, service: PersonaService = Depends(get_persona_service)
):
    await service.delete_persona(persona_id)


@router.put('/{persona_id}/training', response_model=PersonaOut)
async def update_persona_training(
    persona_id: UUID,
    body: TrainingIn,
    service: PersonaService = Depends(get_persona_service),
):
    return PersonaOut.model_validate(await service.update_training(persona_id, body.content))


@router.get('/{persona_id}/training', response_model=TrainingOut)
async def get_persona_training(
    persona_id: UUID, service: PersonaService = Depends(get_persona_service)
):
    content = await service.get_training(persona_id)
    return TrainingOut(persona_id=persona_id, content=content)
