"""
AWS Bedrock LLM Provider.
"""

import asyncio
import json
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .base import ProviderError

logger = logging.getLogger(__name__)


class BedrockProvider:
    """
    AWS Bedrock LLM provider.

    Supports Claude models via Bedrock.
    """

    DEFAULT_MODEL = "us.anthropic.claude-sonnet-4-20250514-v1:0"

    def __init__(
        self,
        model_id: str = DEFAULT_MODEL,
        region: str = "us-east-1",
        max_tokens: int = 500,
        temperature: float = 0.7,
    ):
        """
        Initialize Bedrock provider.

        Args:
            model_id: Bedrock model ID
            region: AWS region
            max_tokens: Maximum tokens for response
            temperature: Generation temperature
        """
        self.model_id = model_id
        self.region = region
        self.max_tokens = max_tokens
        self.temperature = temperature

        self._client = boto3.client("bedrock-runtime", region_name=region)
        logger.info(f"Bedrock provider initialized: {model_id} in {region}")

    def _invoke(self, system_prompt: str, user_message: str) -> str:
        body = {
            "anthropic_version": "bedrock-2023-05-31",
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "system": system_prompt,
            "messages": [
                {
                    "role": "user",
                    "content": [{"type": "text", "text": user_message}]
                }
            ]
        }

        try:
            response = self._client.invoke_model(
                modelId=self.model_id,
                body=json.dumps(body),
                contentType="application/json",
                accept="application/json",
            )
            response_body = json.loads(response["body"].read())
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Bedrock API error: {e}")
            raise ProviderError(str(e)) from e
        except (KeyError, ValueError) as e:
            raise ProviderError(f"Malformed Bedrock response: {e}") from e

        content = response_body.get("content") if isinstance(response_body, dict) else None
        if not content:
            raise ProviderError("Empty response from Bedrock")

        block = content[0] if isinstance(content, list) else None
        if not isinstance(block, dict) or not isinstance(block.get("text"), str):
            raise ProviderError("Malformed content block in Bedrock response")

        text = block["text"].strip()
        if not text:
            raise ProviderError("Empty response from Bedrock")
        return text

    async def complete(self, system_prompt: str, user_message: str) -> str:
        """Generate a reply; boto3 is synchronous so the call runs in a worker thread."""
        return await asyncio.to_thread(self._invoke, system_prompt, user_message)
