"""
Service initialization and dependency injection for the Automagixx chatbot API.

Creates and manages all service instances used by the API.
"""

import logging
from typing import Optional

from config.settings import get_settings, Settings
from intent.classifier import IntentClassifier
from llm.conversation_store import ConversationLog, InMemoryConversationLog
from llm.orchestrator import ChatOrchestrator
from llm.providers import CompletionGateway, build_gateway

from .analytics.aggregator import AnalyticsAggregator
from .tenants.snapshot import SnapshotBackend, build_snapshot
from .tenants.store import ConfigStore

logger = logging.getLogger(__name__)


class Services:
    """Container for all application services."""

    def __init__(self):
        self.settings: Optional[Settings] = None
        self.config_store: Optional[ConfigStore] = None
        self.conversation_log: Optional[ConversationLog] = None
        self.gateway: Optional[CompletionGateway] = None
        self.intent_classifier: Optional[IntentClassifier] = None
        self.orchestrator: Optional[ChatOrchestrator] = None
        self.aggregator: Optional[AnalyticsAggregator] = None
        self._initialized = False

    def initialize(
        self,
        settings: Optional[Settings] = None,
        snapshot: Optional[SnapshotBackend] = None,
        conversation_log: Optional[ConversationLog] = None,
        gateway: Optional[CompletionGateway] = None,
    ):
        """
        Initialize all services.

        Explicit collaborators override the ones described by settings.
        """
        if self._initialized:
            return

        self.settings = settings or get_settings()
        logger.info(f"Initializing services with provider: {self.settings.llm_provider}")

        self._init_config_store(snapshot)
        self._init_conversation_log(conversation_log)
        self._init_gateway(gateway)
        self._init_orchestrator()
        self.aggregator = AnalyticsAggregator(self.conversation_log)
        self._initialized = True
        logger.info("All services initialized")

    def _init_config_store(self, snapshot: Optional[SnapshotBackend]):
        """Create the tenant store and restore its snapshot."""
        self.config_store = ConfigStore(snapshot or build_snapshot(self.settings))
        self.config_store.load()

    def _init_conversation_log(self, conversation_log: Optional[ConversationLog]):
        """Use the database log when one is initialized, else an in-memory log."""
        if conversation_log is not None:
            self.conversation_log = conversation_log
            return

        from database.session import get_session_factory
        session_factory = get_session_factory()
        if session_factory is not None:
            from llm.db_conversation_store import DbConversationLog
            self.conversation_log = DbConversationLog(session_factory)
            logger.info("Conversation log: database")
        else:
            self.conversation_log = InMemoryConversationLog()
            logger.warning("DATABASE_URL not set, conversation log kept in memory")

    def _init_gateway(self, gateway: Optional[CompletionGateway]):
        """Initialize the completion provider."""
        if gateway is not None:
            self.gateway = gateway
            return
        try:
            self.gateway = build_gateway(self.settings)
        except Exception as e:
            # Allow API to start; every message gets the fallback reply
            logger.error(f"Completion provider initialization failed: {e}")
            logger.warning("API starting in degraded mode")
            self.gateway = None

    def _init_orchestrator(self):
        """Initialize the chat orchestrator."""
        self.intent_classifier = IntentClassifier()
        self.orchestrator = ChatOrchestrator(
            config_store=self.config_store,
            conversation_log=self.conversation_log,
            gateway=self.gateway,
            intent_classifier=self.intent_classifier,
            support_phone=self.settings.support_phone,
            store_timeout=self.settings.store_timeout_seconds,
        )
        logger.info("Chat orchestrator ready")

    @property
    def is_ready(self) -> bool:
        return self._initialized and self.orchestrator is not None

    def health(self) -> dict:
        """Return health status of all services."""
        return {
            "initialized": self._initialized,
            "chatbots": self.config_store.count() if self.config_store else 0,
            "completion_provider": self.gateway is not None,
            "conversation_log": type(self.conversation_log).__name__ if self.conversation_log else None,
        }


# Singleton
_services = Services()


def get_services() -> Services:
    """Get the global services instance."""
    return _services


def initialize_services():
    """Initialize all services (called at startup)."""
    _services.initialize()
