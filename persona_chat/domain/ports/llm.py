import abc
from typing import Sequence

from persona_chat.domain.models import Message


class LLMGatewayPort(abc.ABC):
    """
    Boundary to an external chat-completion provider.

    Implementations own their transport and release it in `aclose()`;
    use them as `async with gateway: ...`. Every failure that leaves
    `generate_chat_completion` is a GatewayError. A second provider or a
    retry policy plugs in here as another implementation.
    """

    @abc.abstractmethod
    async def generate_chat_completion(
        self, system_prompt: str, history: Sequence[Message]
    ) -> str:
        """
        Given a system prompt and the chat history (oldest first),
        return the assistant's reply as plain text.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
