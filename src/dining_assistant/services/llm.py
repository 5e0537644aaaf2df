"""LLM client interface and key-rotating gateway."""

from dataclasses import dataclass
from typing import Protocol

from dining_assistant.services.key_rotation import ApiKeyRotator


class LlmClient(Protocol):
    """Interface for text-generation calls."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        messages: list[dict[str, str]],
        model: str,
        api_key: str,
        max_tokens: int,
        temperature: float = 0.7,
    ) -> str:
        """Return generated text for a conversation."""

    async def complete_json(  # noqa: PLR0913
        self,
        *,
        prompt: str,
        schema: dict[str, object],
        model: str,
        api_key: str,
        max_tokens: int,
    ) -> dict[str, object]:
        """Return structured output matching a JSON schema."""


@dataclass
class LlmGateway:
    """Binds an LLM client to a model and a rotating key pool."""

    client: LlmClient
    rotator: ApiKeyRotator
    model: str

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float = 0.7,
    ) -> str:
        """Generate text for a conversation using the next API key."""
        return await self.client.complete(
            messages=messages,
            model=self.model,
            api_key=self.rotator.next_key(),
            max_tokens=max_tokens,
            temperature=temperature,
        )

    async def complete_prompt(
        self, prompt: str, max_tokens: int, temperature: float = 0.7
    ) -> str:
        """Generate text for a single user prompt."""
        return await self.complete(
            [{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=temperature,
        )

    async def complete_json(
        self, prompt: str, schema: dict[str, object], max_tokens: int = 1000
    ) -> dict[str, object]:
        """Generate structured output using the next API key."""
        return await self.client.complete_json(
            prompt=prompt,
            schema=schema,
            model=self.model,
            api_key=self.rotator.next_key(),
            max_tokens=max_tokens,
        )
