"""
Intent Classification for the Automagixx chatbot.

Keyword heuristics that tag a visitor message with the commercial topics it
touches. The tags decide whether the prompt switches to the sales style.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List

logger = logging.getLogger(__name__)


class IntentTag(Enum):
    """Commercial topics detected in a message."""
    PRICING = "pricing"
    AVAILABILITY = "availability"
    ROOM = "room"


@dataclass(frozen=True)
class IntentResult:
    """Result of intent classification."""
    tags: FrozenSet[IntentTag] = field(default_factory=frozenset)

    @property
    def sales_mode(self) -> bool:
        """True when any commercial topic was detected."""
        return bool(self.tags)

    def values(self) -> List[str]:
        """Tag values in declaration order."""
        return [tag.value for tag in IntentTag if tag in self.tags]


class IntentClassifier:
    """
    Classifies visitor messages by substring keyword matching.

    Tags are independent: every tag whose keyword list has a hit is set,
    so several may co-occur. Matching is plain substring search, so
    "bedroom" counts as a room mention and "expensive" as pricing.
    """

    INTENT_KEYWORDS: Dict[IntentTag, List[str]] = {
        IntentTag.PRICING: ["price", "cost", "rate", "expensive"],
        IntentTag.AVAILABILITY: ["available", "book", "reserve"],
        IntentTag.ROOM: ["room", "bed", "dorm", "private"],
    }

    def classify(self, message: str) -> IntentResult:
        """
        Classify a visitor message.

        Args:
            message: Raw message text (case is ignored)

        Returns:
            IntentResult with every matching tag
        """
        message_lower = (message or "").lower()
        tags = frozenset(
            tag
            for tag, keywords in self.INTENT_KEYWORDS.items()
            if any(keyword in message_lower for keyword in keywords)
        )
        if tags:
            logger.debug(f"Intent tags: {sorted(t.value for t in tags)}")
        return IntentResult(tags=tags)
