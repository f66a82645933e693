"""
OpenAI LLM Provider.
"""

import logging
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from .base import ProviderError

logger = logging.getLogger(__name__)


class OpenAIProvider:
    """
    OpenAI chat completions provider.

    Sends one system message and one user message per call.
    """

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_id: str = DEFAULT_MODEL,
        max_tokens: int = 500,
        temperature: float = 0.7,
        timeout: float = 30.0,
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (falls back to OPENAI_API_KEY)
            model_id: Model ID
            max_tokens: Maximum tokens in the reply
            temperature: Generation temperature
            timeout: Request timeout in seconds
        """
        if api_key:
            self._client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            self._client = AsyncOpenAI(timeout=timeout, max_retries=0)

        self.model_id = model_id
        self.max_tokens = max_tokens
        self.temperature = temperature

        logger.info(f"OpenAI provider initialized: {model_id}")

    async def complete(self, system_prompt: str, user_message: str) -> str:
        """
        Generate a reply.

        Args:
            system_prompt: Tenant system prompt
            user_message: Visitor message

        Returns:
            Reply text

        Raises:
            ProviderError: on API failure or an empty/malformed response
        """
        try:
            response = await self._client.chat.completions.create(
                model=self.model_id,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI generation failed: {e}")
            raise ProviderError(str(e)) from e

        choices = getattr(response, "choices", None)
        if not choices:
            raise ProviderError("OpenAI response contained no choices")

        content = choices[0].message.content if choices[0].message else None
        if not content or not content.strip():
            raise ProviderError("OpenAI response contained no content")

        return content.strip()
