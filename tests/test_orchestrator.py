"""Tests for the chat orchestrator pipeline."""

import asyncio
from dataclasses import replace

import pytest

from llm.conversation_store import InMemoryConversationLog
from llm.orchestrator import ChatOrchestrator, ChatRequest, TenantNotFound, fallback_reply
from llm.providers.base import ProviderError

from conftest import BrokenConversationLog, FakeGateway


def _request(tenant_id, message="What time do you open?", conversation_id="conv-1"):
    return ChatRequest(tenant_id=tenant_id, message=message, conversation_id=conversation_id)


@pytest.mark.asyncio
class TestChatOrchestrator:
    async def test_end_to_end_scenario(self, orchestrator, config_store, gateway, conversation_log, hostel_data):
        tenant = config_store.create(hostel_data)

        result = await orchestrator.process(_request(tenant.id))

        assert result.response == "We open at 9am"
        assert result.fallback_used is False
        assert len(gateway.calls) == 1
        system_prompt = gateway.calls[0]["system_prompt"]
        assert "Open 9-5" in system_prompt
        assert "Wifi free" in system_prompt
        assert gateway.calls[0]["user_message"] == "What time do you open?"
        assert await conversation_log.count_messages("conv-1") == 2

    async def test_messages_logged_in_order(self, orchestrator, config_store, conversation_log, hostel_data):
        tenant = config_store.create(hostel_data)
        await orchestrator.process(_request(tenant.id))

        messages = conversation_log._messages
        assert [m.role for m in messages] == ["user", "assistant"]
        assert messages[0].content == "What time do you open?"
        assert messages[1].content == "We open at 9am"
        assert all(m.tenant_id == tenant.id for m in messages)

    async def test_unknown_tenant(self, orchestrator, gateway, conversation_log):
        with pytest.raises(TenantNotFound):
            await orchestrator.process(_request("bot_unknown"))
        assert gateway.calls == []
        assert conversation_log._messages == []

    async def test_provider_error_returns_fallback(self, config_store, conversation_log, hostel_data):
        tenant = config_store.create(hostel_data)
        orchestrator = ChatOrchestrator(
            config_store=config_store,
            conversation_log=conversation_log,
            gateway=FakeGateway(error=ProviderError("rate limited")),
            support_phone="(555) 000-1234",
        )

        result = await orchestrator.process(_request(tenant.id))

        assert result.fallback_used is True
        assert result.response == fallback_reply("Open 9-5", "(555) 000-1234")
        assert "(555) 000-1234" in result.response
        # Only the user turn is logged; no summary for a failed exchange
        assert await conversation_log.count_messages("conv-1") == 1
        assert await conversation_log.get_conversation("conv-1") is None

    async def test_fallback_uses_tenant_phone(self, config_store, conversation_log):
        tenant = config_store.create({
            "businessName": "Hostel",
            "businessInfo": "Phone: (808) 374-2131 (call, text, WhatsApp)",
            "knowledgeBase": "",
        })
        orchestrator = ChatOrchestrator(
            config_store=config_store,
            conversation_log=conversation_log,
            gateway=FakeGateway(error=ProviderError("timeout")),
        )
        result = await orchestrator.process(_request(tenant.id))
        assert "(808) 374-2131" in result.response

    async def test_empty_completion_is_a_provider_error(self, config_store, conversation_log, hostel_data):
        tenant = config_store.create(hostel_data)
        orchestrator = ChatOrchestrator(config_store, conversation_log, FakeGateway(reply="   "))
        result = await orchestrator.process(_request(tenant.id))
        assert result.fallback_used is True

    async def test_missing_gateway_falls_back(self, config_store, conversation_log, hostel_data):
        tenant = config_store.create(hostel_data)
        orchestrator = ChatOrchestrator(config_store, conversation_log, gateway=None)
        result = await orchestrator.process(_request(tenant.id))
        assert result.fallback_used is True

    async def test_log_failures_do_not_change_reply(self, config_store, hostel_data):
        tenant = config_store.create(hostel_data)
        gateway = FakeGateway(reply="Sure!")
        orchestrator = ChatOrchestrator(config_store, BrokenConversationLog(), gateway)

        result = await orchestrator.process(_request(tenant.id))

        assert result.response == "Sure!"
        assert result.fallback_used is False
        assert len(gateway.calls) == 1

    async def test_slow_log_is_bounded(self, config_store, hostel_data):
        class SlowLog(InMemoryConversationLog):
            async def append_message(self, message):
                await asyncio.sleep(10)

        tenant = config_store.create(hostel_data)
        orchestrator = ChatOrchestrator(config_store, SlowLog(), FakeGateway(), store_timeout=0.01)
        result = await orchestrator.process(_request(tenant.id))
        assert result.response == "We open at 9am"

    async def test_conversation_count_increments_by_two(self, orchestrator, config_store, conversation_log, hostel_data):
        tenant = config_store.create(hostel_data)

        await orchestrator.process(_request(tenant.id))
        first = await conversation_log.get_conversation("conv-1")
        await orchestrator.process(_request(tenant.id, message="Is there parking?"))
        second = await conversation_log.get_conversation("conv-1")

        assert first.message_count == 2
        assert second.message_count == first.message_count + 2
        assert second.started_at == first.started_at
        assert second.ended_at >= first.ended_at
        assert second.language_detected == "en"

    async def test_sales_mode_reported(self, orchestrator, config_store, gateway, hostel_data):
        tenant = config_store.create(hostel_data)
        result = await orchestrator.process(_request(tenant.id, message="Can I book a private room?"))
        assert result.sales_mode is True
        assert result.intent_tags == ["availability", "room"]
        assert "CONVERSATION STYLE" in gateway.calls[0]["system_prompt"]

    async def test_inactive_tenant_still_answers(self, config_store, conversation_log, hostel_data):
        created = config_store.create(hostel_data)
        config_store._tenants[created.id] = replace(created, active=False)

        orchestrator = ChatOrchestrator(config_store, conversation_log, FakeGateway())
        result = await orchestrator.process(_request(created.id))
        assert result.response == "We open at 9am"


def test_fallback_reply_default_phone():
    assert fallback_reply(None, "(555) 000-1234") == (
        "I'm sorry, I encountered an error. Please try again or contact us directly at (555) 000-1234."
    )


@pytest.mark.asyncio
async def test_malformed_bedrock_reply_falls_back(config_store, conversation_log, hostel_data):
    import io
    import json
    from unittest.mock import MagicMock, patch

    from llm.providers.bedrock import BedrockProvider

    with patch("llm.providers.bedrock.boto3.client") as factory:
        client = MagicMock()
        client.invoke_model.return_value = {"body": io.BytesIO(json.dumps({"content": ["hi"]}).encode())}
        factory.return_value = client
        provider = BedrockProvider()

    tenant = config_store.create(hostel_data)
    orchestrator = ChatOrchestrator(config_store, conversation_log, provider)
    result = await orchestrator.process(_request(tenant.id))
    assert result.fallback_used is True
