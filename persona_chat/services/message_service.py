import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from persona_chat.domain.enums import Role
from persona_chat.domain.errors import (MessageNotFoundError,
                                        MessageValidationError)
from persona_chat.domain.models import Message, PaginatedResult
from persona_chat.domain.ports.llm import LLMGatewayPort
from persona_chat.domain.ports.repository import RepositoryPort
from persona_chat.domain.ports.training_store import TrainingStorePort
from persona_chat.domain.prompt import build_system_prompt
from persona_chat.domain.validators import validate_message
from persona_chat.services.chat_service import later_of
from persona_chat.services.persona_service import PersonaService

logger = logging.getLogger(__name__)


class MessageService(object):
    """
    Message log of a chat, plus the send-and-reply workflow.

    `send_message` runs strictly in order:
      1. validate and persist the user's message
      2. load the chat
      3. load the most recent `history_limit` messages, oldest first
      4. load the persona and its training text
      5. build the system prompt and ask the gateway for a reply
      6. validate and persist the assistant's reply
      7. move the chat's `last_message_at` forward

    There is no rollback: if the gateway fails, the user's message
    stays stored and the gateway error propagates unchanged.
    """

    def __init__(
        self,
        repo: RepositoryPort,
        llm: Optional[LLMGatewayPort] = None,
        persona_service: Optional[PersonaService] = None,
        training_store: Optional[TrainingStorePort] = None,
        history_limit: int = 50,
    ):
        self.repo = repo
        self.llm = llm
        self.history_limit = history_limit
        self.persona_service = persona_service or PersonaService(
            repo=repo,
            training_store=training_store,
        )

    async def send_message(self, message: Message) -> Message:
        validate_message(message)
        if message.role != Role.USER.value:
            raise MessageValidationError("Only messages with role 'user' can be sent.")

        user_message = await self.repo.add_message(message)
        chat_id = user_message.chat_id
        logger.info('[send] stored user message id=%s chat_id=%s', user_message.id, chat_id)

        chat = await self.repo.get_chat(chat_id)
        if chat is None:
            # reported as a validation failure, not as not-found
            raise MessageValidationError(f'Chat with ID {chat_id} not found.')

        history = await self.repo.last_messages(chat_id, limit=self.history_limit)
        logger.debug('[send] chat_id=%s history=%d', chat_id, len(history))

        persona = await self.repo.get_persona(chat.persona_id)
        if persona is None:
            raise MessageValidationError(f'Persona with ID {chat.persona_id} not found.')
        training_text = await self.persona_service.load_training(persona)

        system_prompt = build_system_prompt(persona, training_text)
        logger.debug(
            '[send] persona_id=%s prompt_chars=%d training_chars=%d',
            persona.id, len(system_prompt), len(training_text),
        )

        reply = await self.llm.generate_chat_completion(system_prompt, history)

        assistant_message = Message(
            chat_id=chat_id,
            role=Role.ASSISTANT.value,
            content=reply,
        )
        validate_message(assistant_message)
        assistant_message = await self.repo.add_message(assistant_message)
        logger.info(
            '[send] stored assistant message id=%s chat_id=%s chars=%d',
            assistant_message.id, chat_id, len(reply),
        )

        await self._touch_chat(chat_id)
        return assistant_message

    async def _touch_chat(self, chat_id: UUID) -> None:
        chat = await self.repo.get_chat(chat_id)
        if chat is None:
            logger.info('[send] chat_id=%s vanished before metadata update', chat_id)
            return

        chat.last_message_at = later_of(chat.last_message_at, datetime.now(timezone.utc))
        await self.repo.update_chat(chat)

    async def create_message(self, message: Message) -> Message:
        validate_message(message)
        return await self.repo.add_message(message)

    async def get_message(self, message_id: UUID) -> Message:
        message = await self.repo.get_message(message_id)
        if message is None:
            raise MessageNotFoundError(f'Message with ID {message_id} not found.')
        return message

    async def search_messages(
        self,
        *,
        chat_id: Optional[UUID] = None,
        role: Optional[str] = None,
        content: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PaginatedResult[Message]:
        return await self.repo.search_messages(
            chat_id=chat_id,
            role=role,
            content=content,
            page_number=page_number,
            page_size=page_size,
        )

    async def delete_message(self, message_id: UUID) -> None:
        if not await self.repo.delete_message(message_id):
            raise MessageNotFoundError(f'Message with ID {message_id} not found.')
