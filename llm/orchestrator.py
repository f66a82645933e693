"""
Chat Orchestrator for the Automagixx chatbot.

Runs one inbound visitor message through the tenant pipeline:
lookup, intent tagging, prompt composition, completion and logging.
"""

import asyncio
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Dict, List, Optional

from intent.classifier import IntentClassifier, IntentResult

from .conversation_store import ConversationLog, MessageRecord
from .prompt_templates import PromptTemplates
from .providers.base import CompletionGateway, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_SUPPORT_PHONE = "(808) 374-2131"

FALLBACK_TEMPLATE = (
    "I'm sorry, I encountered an error. Please try again or contact us directly at {phone}."
)

PHONE_PATTERN = re.compile(r"\(?\d{3}\)?[\s.-]?\d{3}[\s.-]\d{4}")


class TenantNotFound(Exception):
    """No chatbot is registered under the requested id."""

    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        super().__init__(f"Chatbot not found: {tenant_id}")


@dataclass
class ChatRequest:
    """Inbound visitor message."""
    tenant_id: str
    message: str
    conversation_id: str


@dataclass
class ChatResult:
    """Reply to a visitor message."""
    response: str
    conversation_id: str
    tenant_id: str
    intent_tags: List[str] = field(default_factory=list)
    sales_mode: bool = False
    fallback_used: bool = False
    processing_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "response": self.response,
            "conversation_id": self.conversation_id,
            "tenant_id": self.tenant_id,
            "intent_tags": self.intent_tags,
            "sales_mode": self.sales_mode,
            "fallback_used": self.fallback_used,
            "processing_time_ms": self.processing_time_ms,
        }


def fallback_reply(business_info: Optional[str], default_phone: str = DEFAULT_SUPPORT_PHONE) -> str:
    """Apology text pointing at the tenant's phone number when one is listed."""
    match = PHONE_PATTERN.search(business_info or "")
    phone = match.group(0) if match else default_phone
    return FALLBACK_TEMPLATE.format(phone=phone)


class ChatOrchestrator:
    """
    Orchestrates the chat pipeline.

    Pipeline:
    1. Resolve tenant config (TenantNotFound when absent)
    2. Log user message (best effort)
    3. Classify intent
    4. Compose system prompt
    5. Call completion provider (fallback reply on ProviderError)
    6. Log assistant message (best effort)
    7. Upsert conversation summary (best effort)
    8. Return reply

    The tenant ``active`` flag is not consulted; inactive tenants keep answering.
    """

    def __init__(
        self,
        config_store: Any,
        conversation_log: ConversationLog,
        gateway: Optional[CompletionGateway],
        intent_classifier: Optional[IntentClassifier] = None,
        support_phone: str = DEFAULT_SUPPORT_PHONE,
        store_timeout: float = 5.0,
    ):
        """
        Initialize the orchestrator.

        Args:
            config_store: Tenant configuration store
            conversation_log: Message and conversation log
            gateway: Completion provider; None means every call falls back
            intent_classifier: Keyword intent classifier
            support_phone: Phone used in the fallback reply when the tenant lists none
            store_timeout: Seconds a log write may delay the reply
        """
        self.config_store = config_store
        self.conversation_log = conversation_log
        self.gateway = gateway
        self.intent_classifier = intent_classifier or IntentClassifier()
        self.support_phone = support_phone
        self.store_timeout = store_timeout

    async def process(self, request: ChatRequest) -> ChatResult:
        """
        Process a visitor message.

        Args:
            request: Chat request

        Returns:
            Chat result. Provider failures yield the fallback reply.

        Raises:
            TenantNotFound: unknown tenant id; nothing is logged or sent
        """
        start_time = time.time()

        # Step 1: Resolve tenant
        tenant = self.config_store.get(request.tenant_id)
        if tenant is None:
            logger.info(f"Message for unknown chatbot {request.tenant_id}")
            raise TenantNotFound(request.tenant_id)

        # Step 2: Log user message
        await self._best_effort(
            self.conversation_log.append_message(MessageRecord(
                conversation_id=request.conversation_id,
                tenant_id=tenant.id,
                role="user",
                content=request.message,
            )),
            f"log user message for {request.conversation_id}",
        )

        # Step 3: Classify intent
        intent = self.intent_classifier.classify(request.message)

        # Step 4: Compose system prompt
        system_prompt = PromptTemplates.compose(tenant, intent)

        # Step 5: Generate reply
        try:
            response_text = await self._generate_response(system_prompt, request.message)
        except ProviderError as e:
            logger.error(f"Completion failed for chatbot {tenant.id}: {e}")
            return self._result(
                request, intent, fallback_reply(tenant.business_info, self.support_phone),
                start_time, fallback_used=True,
            )

        # Step 6: Log assistant message
        await self._best_effort(
            self.conversation_log.append_message(MessageRecord(
                conversation_id=request.conversation_id,
                tenant_id=tenant.id,
                role="assistant",
                content=response_text,
            )),
            f"log assistant message for {request.conversation_id}",
        )

        # Step 7: Update conversation summary
        await self._best_effort(
            self.conversation_log.upsert_conversation(
                request.conversation_id, tenant.id, datetime.utcnow()
            ),
            f"update conversation {request.conversation_id}",
        )

        return self._result(request, intent, response_text, start_time)

    async def _generate_response(self, system_prompt: str, user_message: str) -> str:
        """Call the provider; an empty reply counts as a malformed response."""
        if self.gateway is None:
            raise ProviderError("No completion provider configured")

        reply = await self.gateway.complete(system_prompt, user_message)
        if not reply or not reply.strip():
            raise ProviderError("Empty completion")
        return reply

    async def _best_effort(self, operation: Awaitable[Any], description: str) -> None:
        """Await a log write; failures and timeouts are logged, never raised."""
        try:
            await asyncio.wait_for(operation, timeout=self.store_timeout)
        except asyncio.TimeoutError:
            logger.error(f"Timed out trying to {description}")
        except Exception as e:
            logger.error(f"Failed to {description}: {e}")

    def _result(
        self,
        request: ChatRequest,
        intent: IntentResult,
        response_text: str,
        start_time: float,
        fallback_used: bool = False,
    ) -> ChatResult:
        processing_time = (time.time() - start_time) * 1000
        return ChatResult(
            response=response_text,
            conversation_id=request.conversation_id,
            tenant_id=request.tenant_id,
            intent_tags=intent.values(),
            sales_mode=intent.sales_mode,
            fallback_used=fallback_used,
            processing_time_ms=round(processing_time, 2),
        )
