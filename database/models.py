"""
SQLAlchemy ORM models for the Automagixx chatbot.

Conversation summaries and logged messages. Tenant configuration is not
stored here; it lives in the snapshot-backed config store.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, String, Integer, DateTime, Text, Index
from sqlalchemy.orm import DeclarativeBase


def _uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(String(64), primary_key=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    message_count = Column(Integer, nullable=False, default=0)
    started_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    ended_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    language_detected = Column(String(10), nullable=False, default="en")

    __table_args__ = (
        Index("ix_conv_tenant_started", "tenant_id", "started_at"),
    )


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=_uuid)
    conversation_id = Column(String(64), nullable=False, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    role = Column(String(10), nullable=False)  # user, assistant
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_msg_tenant_created", "tenant_id", "created_at"),
    )
