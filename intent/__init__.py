"""
Intent Module for the Automagixx chatbot.

Keyword-based tagging of visitor messages (pricing, availability, room)
that drives the sales-mode prompt switch.
"""

from .classifier import IntentClassifier, IntentResult, IntentTag

__all__ = [
    "IntentClassifier",
    "IntentResult",
    "IntentTag",
]
