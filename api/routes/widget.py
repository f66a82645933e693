"""
Widget page route for the Automagixx chatbot.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, PlainTextResponse

from ..services import Services, get_services
from ..widget.render import render_widget_page

router = APIRouter()


@router.get("/widget/{chatbot_id}", response_class=HTMLResponse)
async def widget_page(chatbot_id: str, services: Services = Depends(get_services)):
    """Serve the iframe chat page for a tenant."""
    config = services.config_store.get(chatbot_id)
    if config is None:
        return PlainTextResponse("Chatbot not found", status_code=404)
    return HTMLResponse(render_widget_page(config))
