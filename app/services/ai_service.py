"""LLM client: one stateless system-prompt + single-message completion per call."""

import logging
from typing import Optional

from openai import AsyncOpenAI, APIError
from anthropic import AsyncAnthropic, APIError as AnthropicAPIError

from app.core.config import Settings, get_settings
from app.core.exceptions import ConfigurationError, LLMResponseError, LLMServiceError

logger = logging.getLogger(__name__)


class AIService:
    """Thin wrapper over the Anthropic / OpenAI chat APIs."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.provider = settings.llm_provider.lower()
        self.max_tokens = settings.llm_max_tokens

        if self.provider == "anthropic":
            if not settings.anthropic_api_key:
                raise ConfigurationError("ANTHROPIC_API_KEY is not set")
            self.model = settings.anthropic_model
            self.client = AsyncAnthropic(
                api_key=settings.anthropic_api_key,
                timeout=settings.llm_timeout_seconds,
            )
        elif self.provider == "openai":
            if not settings.openai_api_key:
                raise ConfigurationError("OPENAI_API_KEY is not set")
            self.model = settings.openai_model
            self.client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.llm_timeout_seconds,
            )
        else:
            raise ConfigurationError(f"Unsupported LLM provider: {self.provider}")

    async def complete(
        self,
        system_prompt: str,
        message: str,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Send one user message under a system prompt and return the text answer.

        Raises:
            LLMServiceError: the provider call failed (network, quota, 5xx)
            LLMResponseError: the response carried no text
        """
        max_tokens = max_tokens or self.max_tokens
        logger.debug(
            f"LLM call: provider={self.provider} model={self.model} "
            f"system={len(system_prompt)} chars, message={len(message)} chars"
        )

        if self.provider == "anthropic":
            try:
                response = await self.client.messages.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    system=system_prompt,
                    messages=[{"role": "user", "content": message}],
                )
            except AnthropicAPIError as e:
                logger.error(f"Anthropic call failed: {e}")
                raise LLMServiceError("LLM request failed", details=str(e))

            for block in response.content or []:
                if getattr(block, "type", None) == "text" and isinstance(getattr(block, "text", None), str):
                    return block.text
            raise LLMResponseError("No text in LLM response")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": message},
                ],
            )
        except APIError as e:
            logger.error(f"OpenAI call failed: {e}")
            raise LLMServiceError("LLM request failed", details=str(e))

        content = response.choices[0].message.content if response.choices else None
        if not isinstance(content, str):
            raise LLMResponseError("No text in LLM response")
        return content
