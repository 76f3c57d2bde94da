from typing import AsyncIterator

from fastapi import Request

from persona_chat.adapters.llm.openai import OpenAIGateway
from persona_chat.domain.errors import GatewayConfigurationError
from persona_chat.domain.ports.llm import LLMGatewayPort
from persona_chat.settings import GatewayConfig


def get_gateway_config(request: Request) -> GatewayConfig:
    config = getattr(request.app.state, 'gateway_config', None)
    if config is None:
        error = getattr(request.app.state, 'gateway_config_error', None)
        if error is not None:
            raise error
        raise GatewayConfigurationError('OpenAI gateway is not configured')
    return config


async def get_gateway(request: Request) -> AsyncIterator[LLMGatewayPort]:
    # one client per request, closed when the request is done
    async with OpenAIGateway(get_gateway_config(request)) as gateway:
        yield gateway
