"""
Admin API Routes for the Automagixx chatbot.

Tenant registration and listing.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..middleware.auth import require_admin
from ..middleware.metrics import record_chatbot_created
from ..services import Services, get_services
from ..widget.render import render_embed_code, widget_url

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


# ── Models ────────────────────────────────────────────

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CustomizationIn(CamelModel):
    primary_color: Optional[str] = None
    accent_color: Optional[str] = None
    welcome_message: Optional[str] = None


class CreateChatbotRequest(CamelModel):
    client_name: Optional[str] = None
    business_name: Optional[str] = None
    business_info: Optional[str] = None
    knowledge_base: Optional[str] = None
    customization: Optional[CustomizationIn] = None


class CreateChatbotResponse(CamelModel):
    success: bool
    chatbot_id: str
    embed_code: str
    preview_url: str


class ChatbotSummary(CamelModel):
    id: str
    client_name: Optional[str] = None
    business_name: Optional[str] = None
    created_at: str
    active: bool


class ChatbotList(BaseModel):
    chatbots: List[ChatbotSummary]


# ── Endpoints ─────────────────────────────────────────

@router.post("/create-chatbot", response_model=CreateChatbotResponse, response_model_by_alias=True)
async def create_chatbot(
    request: CreateChatbotRequest,
    services: Services = Depends(get_services),
):
    """Register a new tenant chatbot and return its embed code."""
    settings = services.settings
    data: Dict[str, Any] = request.model_dump(by_alias=True, exclude_none=True)

    try:
        # Snapshot save is blocking file I/O
        config = await asyncio.to_thread(services.config_store.create, data)
        embed_code = render_embed_code(config, settings.public_base_url, settings.brand_name)
    except Exception as e:
        logger.error(f"Error creating chatbot: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to create chatbot"},
        )

    record_chatbot_created()
    return CreateChatbotResponse(
        success=True,
        chatbot_id=config.id,
        embed_code=embed_code,
        preview_url=widget_url(config.id, settings.public_base_url),
    )


@router.get("/chatbots", response_model=ChatbotList, response_model_by_alias=True)
async def list_chatbots(services: Services = Depends(get_services)):
    """List registered chatbots without their business info or knowledge base."""
    return {"chatbots": services.config_store.list()}
