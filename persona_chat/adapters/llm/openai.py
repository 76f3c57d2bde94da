from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Sequence

import httpx
import openai
from openai import AsyncOpenAI

from persona_chat.adapters.llm.constants import COMPLETIONS_API_PREFIX
from persona_chat.domain.errors import (GatewayApiError,
                                        GatewayConnectionError, PlatformError)
from persona_chat.domain.models import Message
from persona_chat.domain.ports.llm import LLMGatewayPort
from persona_chat.settings import GatewayConfig

logger = logging.getLogger(__name__)


def build_chat_messages(system_prompt: str, history: Sequence[Message]) -> List[dict]:
    """System prompt first, then the history in chat order, roles and content verbatim."""
    return [
        {'role': 'system', 'content': system_prompt},
        *({'role': m.role, 'content': m.content} for m in history),
    ]


def extract_response_content(response: Any) -> str:
    choices = getattr(response, 'choices', None) or []
    if not choices:
        raise GatewayApiError('OpenAI API response contains no choices')

    message = getattr(choices[0], 'message', None)
    content = getattr(message, 'content', None)
    if content is None or not content.strip():
        raise GatewayApiError('OpenAI API response message content is empty')

    return content


class OpenAIGateway(LLMGatewayPort):
    """
    Chat completions over the OpenAI HTTP API.

    One POST to `{base_url}/v1/chat/completions` per call, no retries
    (`max_retries=0`). Transport and provider failures are re-raised as
    GatewayConnectionError / GatewayApiError; nothing else escapes.
    The client is created with the gateway and closed by `aclose()`.
    """

    def __init__(self, config: GatewayConfig, client: Optional[AsyncOpenAI] = None):
        self.config = config
        self.client = client or AsyncOpenAI(
            api_key=config.api_key,
            base_url=f'{config.base_url}{COMPLETIONS_API_PREFIX}',
            timeout=config.timeout_s,
            max_retries=0,
        )
        self._closed = False

    async def generate_chat_completion(
        self, system_prompt: str, history: Sequence[Message]
    ) -> str:
        messages = build_chat_messages(system_prompt, history)
        logger.debug(
            '[openai] model=%s messages=%d max_tokens=%d',
            self.config.model, len(messages), self.config.max_tokens,
        )

        try:
            response = await self.client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
        except openai.APIStatusError as e:
            raise GatewayApiError(
                f'OpenAI API returned error: {e.status_code} - {_body_text(e)}', cause=e
            )
        except (openai.APITimeoutError, httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise GatewayConnectionError(f'OpenAI API request timed out: {e}', cause=e)
        except (openai.APIConnectionError, httpx.TransportError, OSError) as e:
            raise GatewayConnectionError(f'Failed to connect to OpenAI API: {e}', cause=e)
        except PlatformError:
            raise
        except Exception as e:
            raise GatewayApiError(
                f'Unexpected error calling OpenAI API: {type(e).__name__}: {e}', cause=e
            )

        return extract_response_content(response)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.client.close()


def _body_text(error: openai.APIStatusError) -> str:
    try:
        return error.response.text
    except httpx.ResponseNotRead:
        return str(error.body)
