"""LLM client used to generate recommendations."""

import logging
import os
from typing import Optional

import anthropic
import openai

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("openai", "anthropic")


class LLMClient:
    """Thin async client over the OpenAI and Anthropic chat APIs.

    Each ``complete`` call is a single attempt; retry policy lives with the
    caller. The client is safe to share between concurrent tasks.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-3.5-turbo",
        provider: str = "openai",
        max_tokens: int = 500,
        temperature: float = 0.5,
        timeout: Optional[float] = None,
    ):
        """Initialize the LLM client.

        Args:
            api_key: API key for the LLM provider
            model: Model name to use
            provider: LLM provider (openai or anthropic)
            max_tokens: Maximum tokens for the response (default: 500)
            temperature: Sampling temperature (default: 0.5)
            timeout: Request timeout in seconds, provider default when omitted
        """
        self.api_key = api_key or os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY")
        self.model = model
        self.provider = provider
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout

        if not self.api_key:
            raise ValueError(
                "API key must be provided or set in LLM_API_KEY environment variable"
            )
        if provider not in SUPPORTED_PROVIDERS:
            raise ValueError(f"Unsupported provider: {provider}")

        self._client = None

    @property
    def source_api(self) -> str:
        """Provider and model identifier, used in retry log lines."""
        return f"{self.provider}_{self.model}".replace("-", "_").replace(".", "_")

    def _get_client(self):
        if self._client is None:
            kwargs = {"api_key": self.api_key}
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            if self.provider == "openai":
                self._client = openai.AsyncOpenAI(**kwargs)
            else:
                self._client = anthropic.AsyncAnthropic(**kwargs)
        return self._client

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one chat completion request.

        Args:
            system_prompt: Instructions for the model
            user_prompt: The request itself

        Returns:
            Response text, stripped

        Raises:
            ValueError: If the provider returns no content
            Exception: Provider transport and API errors propagate unchanged
        """
        if self.provider == "openai":
            text = await self._call_openai(system_prompt, user_prompt)
        else:
            text = await self._call_anthropic(system_prompt, user_prompt)

        if not text or not text.strip():
            raise ValueError(f"No recommendation received from {self.provider}")
        return text.strip()

    async def _call_openai(self, system_prompt: str, user_prompt: str) -> str:
        response = await self._get_client().chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            stream=False,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def _call_anthropic(self, system_prompt: str, user_prompt: str) -> str:
        response = await self._get_client().messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        if not response.content:
            return ""
        return response.content[0].text
