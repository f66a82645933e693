"""
API Routes for the Automagixx chatbot.
"""

from . import admin, analytics, chat, widget

__all__ = ["admin", "analytics", "chat", "widget"]
