from fastapi import APIRouter, Depends

from persona_chat.api import chats, images, messages, personas, users
from persona_chat.api.auth import get_current_subject

API_PREFIX = '/api/v1'

router = APIRouter(prefix=API_PREFIX, dependencies=[Depends(get_current_subject)])

router.include_router(messages.router)
router.include_router(chats.router)
router.include_router(personas.router)
router.include_router(users.router)
router.include_router(images.router)
