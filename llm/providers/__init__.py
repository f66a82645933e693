"""
LLM Provider implementations.
"""

from .base import CompletionGateway, ProviderError


def build_gateway(settings) -> CompletionGateway:
    """Create the completion provider selected by settings."""
    if settings.is_bedrock:
        from .bedrock import BedrockProvider
        return BedrockProvider(
            model_id=settings.bedrock_llm_model_id,
            region=settings.aws_region,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
        )

    from .openai_provider import OpenAIProvider
    return OpenAIProvider(
        api_key=settings.openai_api_key,
        model_id=settings.openai_llm_model,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
    )


__all__ = ["CompletionGateway", "ProviderError", "build_gateway"]
