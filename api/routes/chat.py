"""
Chat API Routes for the Automagixx chatbot.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from llm.orchestrator import ChatRequest as OrchestratorRequest, TenantNotFound, fallback_reply

from ..middleware.metrics import record_chat
from ..services import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request / Response Models ─────────────────────────────────────

class MessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")


class MessageResponse(BaseModel):
    response: str


# ── Endpoints ─────────────────────────────────────────────────────

@router.post("/{chatbot_id}/message", response_model=MessageResponse)
async def handle_message(
    chatbot_id: str,
    request: MessageRequest,
    services: Services = Depends(get_services),
):
    """
    Answer a visitor message for one tenant chatbot.

    Always answers with ``{"response": ...}``; provider failures are replaced
    by a fallback reply. Only an unknown chatbot id yields ``{"error": ...}``.
    """
    conversation_id = request.conversation_id or f"conv_{uuid.uuid4().hex}"

    try:
        result = await services.orchestrator.process(OrchestratorRequest(
            tenant_id=chatbot_id,
            message=request.message,
            conversation_id=conversation_id,
        ))
    except TenantNotFound:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Chatbot not found"},
        )
    except Exception as e:
        logger.error(f"Error handling message for {chatbot_id}: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"response": fallback_reply(None, services.settings.support_phone)},
        )

    record_chat(result.intent_tags, result.processing_time_ms, result.fallback_used)
    logger.info(
        f"Chat {chatbot_id}/{conversation_id}: tags={result.intent_tags} "
        f"fallback={result.fallback_used} time={result.processing_time_ms}ms"
    )
    return MessageResponse(response=result.response)
