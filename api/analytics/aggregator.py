"""
Analytics Aggregator for the Automagixx chatbot.

Read-only summaries of a tenant's conversation log over a trailing window.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from llm.conversation_store import ConversationLog

logger = logging.getLogger(__name__)


@dataclass
class AnalyticsSummary:
    """Conversation statistics for one tenant and window."""
    total_conversations: int = 0
    total_messages: int = 0
    top_questions: List[Dict[str, Any]] = field(default_factory=list)
    recent_messages: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalConversations": self.total_conversations,
            "totalMessages": self.total_messages,
            "topQuestions": self.top_questions,
            "recentMessages": self.recent_messages,
        }


class AnalyticsAggregator:
    """Computes tenant analytics from the conversation log."""

    QUESTION_PREFIX_CHARS = 100
    TOP_QUESTIONS_LIMIT = 10
    RECENT_MESSAGES_LIMIT = 20

    def __init__(self, conversation_log: ConversationLog):
        self.conversation_log = conversation_log

    async def summarize(
        self, tenant_id: str, window_days: int, now: Optional[datetime] = None
    ) -> AnalyticsSummary:
        """
        Summarize the window ``[now - window_days, now]``.

        Args:
            tenant_id: Tenant to summarize
            window_days: Window length in days
            now: End of the window (defaults to current UTC time)

        Returns:
            AnalyticsSummary
        """
        now = now or datetime.utcnow()
        since = now - timedelta(days=window_days)

        conversations = await self.conversation_log.list_conversations(tenant_id, since, now)
        messages = await self.conversation_log.list_messages(tenant_id, since, now)

        recent = sorted(messages, key=lambda m: m.created_at, reverse=True)
        summary = AnalyticsSummary(
            total_conversations=len(conversations),
            total_messages=len(messages),
            top_questions=self._top_questions(messages),
            recent_messages=[m.to_dict() for m in recent[:self.RECENT_MESSAGES_LIMIT]],
        )
        logger.debug(
            f"Analytics for {tenant_id} ({window_days}d): "
            f"{summary.total_conversations} conversations, {summary.total_messages} messages"
        )
        return summary

    def _top_questions(self, messages) -> List[Dict[str, Any]]:
        """Group user messages by their first characters; ties keep first-seen order."""
        counts: Dict[str, int] = {}
        for msg in messages:
            if msg.role != "user":
                continue
            question = msg.content[:self.QUESTION_PREFIX_CHARS]
            counts[question] = counts.get(question, 0) + 1

        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [
            {"question": question, "count": count}
            for question, count in ranked[:self.TOP_QUESTIONS_LIMIT]
        ]
