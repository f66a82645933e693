"""Shared fixtures for Automagixx chatbot tests."""

import os

import pytest
from fastapi.testclient import TestClient

# Ensure we use test/mock settings
os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("OPENAI_API_KEY", "test-key")

from api.services import Services, get_services
from api.tenants.snapshot import FileSnapshot
from api.tenants.store import ConfigStore
from config.settings import Settings
from llm.conversation_store import InMemoryConversationLog
from llm.orchestrator import ChatOrchestrator


class FakeGateway:
    """Completion provider double that records every call."""

    def __init__(self, reply="We open at 9am", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, system_prompt, user_message):
        self.calls.append({"system_prompt": system_prompt, "user_message": user_message})
        if self.error is not None:
            raise self.error
        return self.reply


class BrokenConversationLog(InMemoryConversationLog):
    """Log whose writes always fail."""

    async def append_message(self, message):
        raise RuntimeError("database unavailable")

    async def upsert_conversation(self, conversation_id, tenant_id, now=None):
        raise RuntimeError("database unavailable")


@pytest.fixture
def hostel_data():
    return {
        "clientName": "Test Client",
        "businessName": "Test Inn",
        "businessInfo": "Open 9-5",
        "knowledgeBase": "Wifi free",
    }


@pytest.fixture
def snapshot_path(tmp_path):
    return tmp_path / "chatbot-configs.json"


@pytest.fixture
def snapshot(snapshot_path):
    return FileSnapshot(str(snapshot_path))


@pytest.fixture
def config_store(snapshot):
    store = ConfigStore(snapshot)
    store.load()
    return store


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def conversation_log():
    return InMemoryConversationLog()


@pytest.fixture
def orchestrator(config_store, conversation_log, gateway):
    return ChatOrchestrator(
        config_store=config_store,
        conversation_log=conversation_log,
        gateway=gateway,
        support_phone="(555) 000-1234",
    )


@pytest.fixture
def settings(snapshot_path):
    return Settings(
        snapshot_path=str(snapshot_path),
        chatbot_configs=None,
        snapshot_read_only=False,
        vercel=None,
        database_url=None,
        admin_api_key=None,
        public_base_url="http://chat.example.com",
        support_phone="(555) 000-1234",
        rate_limit_per_minute=1000,
    )


@pytest.fixture
def services(settings, snapshot, conversation_log, gateway):
    svc = Services()
    svc.initialize(
        settings=settings,
        snapshot=snapshot,
        conversation_log=conversation_log,
        gateway=gateway,
    )
    return svc


@pytest.fixture
def client(services, settings):
    """Create a FastAPI test client wired to the test services."""
    from api.main import create_app
    app = create_app(settings)
    app.dependency_overrides[get_services] = lambda: services
    return TestClient(app)
