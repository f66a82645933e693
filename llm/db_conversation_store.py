"""
Database-backed ConversationLog for the Automagixx chatbot.

Implements the ConversationLog protocol using the repository layer.
Each operation runs in its own session and commits on success.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database.models import Conversation, Message
from database.repositories import ConversationRepository

from .conversation_store import (
    DEFAULT_LANGUAGE,
    MESSAGES_PER_EXCHANGE,
    ConversationRecord,
    MessageRecord,
)

logger = logging.getLogger(__name__)


def _to_message_record(msg: Message) -> MessageRecord:
    return MessageRecord(
        conversation_id=msg.conversation_id,
        tenant_id=msg.tenant_id,
        role=msg.role,
        content=msg.content,
        created_at=msg.created_at,
    )


def _to_conversation_record(conv: Conversation) -> ConversationRecord:
    return ConversationRecord(
        id=conv.id,
        tenant_id=conv.tenant_id,
        message_count=conv.message_count,
        started_at=conv.started_at,
        ended_at=conv.ended_at,
        language_detected=conv.language_detected,
    )


class DbConversationLog:
    """Persistent conversation log backed by PostgreSQL or SQLite."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def append_message(self, message: MessageRecord) -> None:
        async with self._session_factory() as session:
            repo = ConversationRepository(session)
            await repo.add_message(
                conversation_id=message.conversation_id,
                tenant_id=message.tenant_id,
                role=message.role,
                content=message.content,
                created_at=message.created_at,
            )
            await session.commit()

    async def upsert_conversation(
        self, conversation_id: str, tenant_id: str, now: Optional[datetime] = None
    ) -> ConversationRecord:
        async with self._session_factory() as session:
            repo = ConversationRepository(session)
            conv = await repo.upsert_summary(
                conversation_id=conversation_id,
                tenant_id=tenant_id,
                now=now or datetime.utcnow(),
                increment=MESSAGES_PER_EXCHANGE,
                language=DEFAULT_LANGUAGE,
            )
            record = _to_conversation_record(conv)
            await session.commit()
        logger.debug(f"Conversation {conversation_id} now has {record.message_count} messages")
        return record

    async def get_conversation(self, conversation_id: str) -> Optional[ConversationRecord]:
        async with self._session_factory() as session:
            conv = await ConversationRepository(session).get_by_id(conversation_id)
            return _to_conversation_record(conv) if conv else None

    async def list_messages(
        self, tenant_id: str, since: datetime, until: Optional[datetime] = None
    ) -> List[MessageRecord]:
        async with self._session_factory() as session:
            messages = await ConversationRepository(session).messages_since(tenant_id, since, until)
            return [_to_message_record(m) for m in messages]

    async def list_conversations(
        self, tenant_id: str, since: datetime, until: Optional[datetime] = None
    ) -> List[ConversationRecord]:
        async with self._session_factory() as session:
            conversations = await ConversationRepository(session).conversations_since(
                tenant_id, since, until
            )
            return [_to_conversation_record(c) for c in conversations]

    async def count_messages(self, conversation_id: str) -> int:
        async with self._session_factory() as session:
            return await ConversationRepository(session).count_messages(conversation_id)
