"""OpenAI-compatible chat completions client for text generation."""

import json
from dataclasses import dataclass, field

from openai import AsyncOpenAI

from dining_assistant.services.llm import LlmClient


@dataclass
class OpenAITextClient(LlmClient):
    """LLM client backed by an OpenAI-compatible chat completions endpoint.

    The API key changes per call, so one ``AsyncOpenAI`` instance is kept per key.
    """

    base_url: str | None = None
    _clients: dict[str, AsyncOpenAI] = field(default_factory=dict)

    @classmethod
    def create(cls, base_url: str | None = None) -> "OpenAITextClient":
        """Create a text client for the given endpoint."""
        return cls(base_url=base_url)

    def _client_for(self, api_key: str) -> AsyncOpenAI:
        client = self._clients.get(api_key)
        if client is None:
            client = AsyncOpenAI(api_key=api_key or "missing", base_url=self.base_url)
            self._clients[api_key] = client
        return client

    async def complete(  # noqa: PLR0913
        self,
        *,
        messages: list[dict[str, str]],
        model: str,
        api_key: str,
        max_tokens: int,
        temperature: float = 0.7,
    ) -> str:
        """Return the assistant text for a conversation."""
        response = await self._client_for(api_key).chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise RuntimeError("LLM returned an empty response")
        return content

    async def complete_json(  # noqa: PLR0913
        self,
        *,
        prompt: str,
        schema: dict[str, object],
        model: str,
        api_key: str,
        max_tokens: int,
    ) -> dict[str, object]:
        """Call the model with a JSON schema response format."""
        response = await self._client_for(api_key).chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": "structured_output",
                    "strict": True,
                    "schema": schema,
                },
            },
        )
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise RuntimeError("LLM returned an empty response")
        return json.loads(content)

    async def close(self) -> None:
        """Close every cached OpenAI client."""
        for client in self._clients.values():
            await client.close()
        self._clients.clear()
