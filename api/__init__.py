"""
API Module for the Automagixx chatbot.

FastAPI application with routes for:
- Tenant chatbot administration
- Visitor chat messages
- Widget pages
- Analytics
"""

from .main import create_app, app

__all__ = ["create_app", "app"]
