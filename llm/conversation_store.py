"""
ConversationLog protocol for the Automagixx chatbot.

Abstracts conversation storage so the orchestrator and analytics can work
with either in-memory lists or a database backend.
"""

import asyncio
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, List, Optional, Protocol, runtime_checkable

# Language detection is not implemented; every conversation records this value.
DEFAULT_LANGUAGE = "en"

# One user turn plus one assistant turn.
MESSAGES_PER_EXCHANGE = 2


@dataclass(frozen=True)
class MessageRecord:
    """A single logged turn. Append-only."""
    conversation_id: str
    tenant_id: str
    role: str  # user | assistant
    content: str
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, str]:
        return {
            "conversationId": self.conversation_id,
            "role": self.role,
            "content": self.content,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class ConversationRecord:
    """Summary of a visitor session."""
    id: str
    tenant_id: str
    message_count: int
    started_at: datetime
    ended_at: datetime
    language_detected: str = DEFAULT_LANGUAGE


@runtime_checkable
class ConversationLog(Protocol):
    """Protocol for conversation persistence."""

    async def append_message(self, message: MessageRecord) -> None:
        """Append a message."""
        ...

    async def upsert_conversation(
        self, conversation_id: str, tenant_id: str, now: Optional[datetime] = None
    ) -> ConversationRecord:
        """Create the summary with two messages, or add two and refresh ``ended_at``."""
        ...

    async def get_conversation(self, conversation_id: str) -> Optional[ConversationRecord]:
        """Get a conversation summary."""
        ...

    async def list_messages(
        self, tenant_id: str, since: datetime, until: Optional[datetime] = None
    ) -> List[MessageRecord]:
        """Messages of a tenant created in ``[since, until]``, oldest first."""
        ...

    async def list_conversations(
        self, tenant_id: str, since: datetime, until: Optional[datetime] = None
    ) -> List[ConversationRecord]:
        """Conversations of a tenant started in ``[since, until]``."""
        ...

    async def count_messages(self, conversation_id: str) -> int:
        """Number of logged messages in a conversation."""
        ...


def _in_window(value: datetime, since: datetime, until: Optional[datetime]) -> bool:
    return value >= since and (until is None or value <= until)


class InMemoryConversationLog:
    """Process-local conversation log. Used when no database is configured."""

    def __init__(self):
        self._messages: List[MessageRecord] = []
        self._conversations: Dict[str, ConversationRecord] = {}
        self._lock = asyncio.Lock()

    async def append_message(self, message: MessageRecord) -> None:
        async with self._lock:
            self._messages.append(message)

    async def upsert_conversation(
        self, conversation_id: str, tenant_id: str, now: Optional[datetime] = None
    ) -> ConversationRecord:
        now = now or datetime.utcnow()
        async with self._lock:
            existing = self._conversations.get(conversation_id)
            if existing is None:
                record = ConversationRecord(
                    id=conversation_id,
                    tenant_id=tenant_id,
                    message_count=MESSAGES_PER_EXCHANGE,
                    started_at=now,
                    ended_at=now,
                )
            else:
                record = replace(
                    existing,
                    message_count=existing.message_count + MESSAGES_PER_EXCHANGE,
                    ended_at=now,
                )
            self._conversations[conversation_id] = record
            return record

    async def get_conversation(self, conversation_id: str) -> Optional[ConversationRecord]:
        return self._conversations.get(conversation_id)

    async def list_messages(
        self, tenant_id: str, since: datetime, until: Optional[datetime] = None
    ) -> List[MessageRecord]:
        messages = [
            m for m in self._messages
            if m.tenant_id == tenant_id and _in_window(m.created_at, since, until)
        ]
        return sorted(messages, key=lambda m: m.created_at)

    async def list_conversations(
        self, tenant_id: str, since: datetime, until: Optional[datetime] = None
    ) -> List[ConversationRecord]:
        return [
            c for c in self._conversations.values()
            if c.tenant_id == tenant_id and _in_window(c.started_at, since, until)
        ]

    async def count_messages(self, conversation_id: str) -> int:
        return sum(1 for m in self._messages if m.conversation_id == conversation_id)
