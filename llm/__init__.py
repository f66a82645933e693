"""
LLM Orchestration Module for the Automagixx chatbot.

This module handles:
- Completion provider abstraction (OpenAI, Bedrock)
- System prompt composition
- Conversation logging
- The per-message chat pipeline
"""

from .orchestrator import ChatOrchestrator, ChatRequest, ChatResult, TenantNotFound
from .prompt_templates import PromptTemplates, PromptType

__all__ = [
    "ChatOrchestrator",
    "ChatRequest",
    "ChatResult",
    "TenantNotFound",
    "PromptTemplates",
    "PromptType",
]
