"""
Analytics API routes for the Automagixx chatbot.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from ..middleware.auth import require_admin
from ..services import Services, get_services

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/{chatbot_id}")
async def chatbot_analytics(
    chatbot_id: str,
    days: int = Query(7, ge=1, le=365),
    services: Services = Depends(get_services),
):
    """Conversation totals, top questions and recent messages for a chatbot."""
    if services.config_store.get(chatbot_id) is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Chatbot not found"},
        )

    summary = await services.aggregator.summarize(chatbot_id, days)
    return summary.to_dict()
