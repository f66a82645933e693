"""
Repository classes for the Automagixx chatbot data access layer.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Conversation, Message

logger = logging.getLogger(__name__)


class ConversationRepository:
    """Data access for conversations and messages."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, conversation_id: str) -> Optional[Conversation]:
        result = await self.session.execute(
            select(Conversation).where(Conversation.id == conversation_id)
        )
        return result.scalar_one_or_none()

    async def upsert_summary(
        self,
        conversation_id: str,
        tenant_id: str,
        now: datetime,
        increment: int = 2,
        language: str = "en",
    ) -> Conversation:
        """Increment an existing summary in place, or insert a new one."""
        result = await self.session.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(
                message_count=Conversation.message_count + increment,
                ended_at=now,
            )
        )
        if result.rowcount == 0:
            self.session.add(Conversation(
                id=conversation_id,
                tenant_id=tenant_id,
                message_count=increment,
                started_at=now,
                ended_at=now,
                language_detected=language,
            ))
        await self.session.flush()

        conv = await self.get_by_id(conversation_id)
        await self.session.refresh(conv)
        return conv

    async def add_message(
        self,
        conversation_id: str,
        tenant_id: str,
        role: str,
        content: str,
        created_at: Optional[datetime] = None,
    ) -> Message:
        msg = Message(
            conversation_id=conversation_id,
            tenant_id=tenant_id,
            role=role,
            content=content,
            created_at=created_at or datetime.utcnow(),
        )
        self.session.add(msg)
        await self.session.flush()
        return msg

    async def messages_since(
        self, tenant_id: str, since: datetime, until: Optional[datetime] = None
    ) -> List[Message]:
        q = (
            select(Message)
            .where(Message.tenant_id == tenant_id, Message.created_at >= since)
            .order_by(Message.created_at.asc())
        )
        if until is not None:
            q = q.where(Message.created_at <= until)
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def conversations_since(
        self, tenant_id: str, since: datetime, until: Optional[datetime] = None
    ) -> List[Conversation]:
        q = select(Conversation).where(
            Conversation.tenant_id == tenant_id, Conversation.started_at >= since
        )
        if until is not None:
            q = q.where(Conversation.started_at <= until)
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def count_messages(self, conversation_id: str) -> int:
        result = await self.session.execute(
            select(func.count(Message.id)).where(Message.conversation_id == conversation_id)
        )
        return result.scalar() or 0
