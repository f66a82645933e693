"""
Completion provider interface.
"""

from typing import Protocol, runtime_checkable


class ProviderError(Exception):
    """Completion call failed (transport, rate limit or malformed response)."""


@runtime_checkable
class CompletionGateway(Protocol):
    """Protocol for LLM completion providers."""

    async def complete(self, system_prompt: str, user_message: str) -> str:
        """Return the assistant reply, or raise ProviderError."""
        ...
