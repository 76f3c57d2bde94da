from fastapi import Depends

from persona_chat.domain.ports.image_store import ImageStorePort
from persona_chat.domain.ports.llm import LLMGatewayPort
from persona_chat.domain.ports.repository import RepositoryPort
from persona_chat.domain.ports.training_store import TrainingStorePort
from persona_chat.infra.db import get_repo
from persona_chat.infra.llm import get_gateway
from persona_chat.infra.storage import get_image_store, get_training_store
from persona_chat.services.chat_service import ChatService
from persona_chat.services.image_service import ImageService
from persona_chat.services.message_service import MessageService
from persona_chat.services.persona_service import PersonaService
from persona_chat.services.user_service import UserService
from persona_chat.settings import settings


def get_user_service(repo: RepositoryPort = Depends(get_repo)) -> UserService:
    return UserService(repo=repo)


def get_chat_service(repo: RepositoryPort = Depends(get_repo)) -> ChatService:
    return ChatService(repo=repo)


def get_persona_service(
    repo: RepositoryPort = Depends(get_repo),
    store: TrainingStorePort = Depends(get_training_store),
) -> PersonaService:
    return PersonaService(repo=repo, training_store=store)


def get_message_service(
    repo: RepositoryPort = Depends(get_repo),
    personas: PersonaService = Depends(get_persona_service),
) -> MessageService:
    # CRUD only; no gateway is opened
    return MessageService(repo=repo, persona_service=personas)


def get_send_message_service(
    repo: RepositoryPort = Depends(get_repo),
    llm: LLMGatewayPort = Depends(get_gateway),
    personas: PersonaService = Depends(get_persona_service),
) -> MessageService:
    return MessageService(
        repo=repo,
        llm=llm,
        persona_service=personas,
        history_limit=settings.HISTORY_LIMIT,
    )


def get_image_service(store: ImageStorePort = Depends(get_image_store)) -> ImageService:
    return ImageService(
        store,
        max_file_size=settings.IMAGE_MAX_FILE_SIZE_BYTES,
        allowed_extensions=settings.IMAGE_ALLOWED_EXTENSIONS,
        allowed_content_types=settings.IMAGE_ALLOWED_CONTENT_TYPES,
    )
