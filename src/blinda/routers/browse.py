"""Direct access to the browser agent."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from ..error_handlers import error_context
from ..services import BrowserSessionService
from ..schemas.commands import BrowseRequest
from .dependencies import get_browser_service

router = APIRouter(prefix="/api", tags=["browse"])


@router.post(
    "/browse",
    dependencies=[Depends(error_context("Error executing Hyperbrowser task"))],
)
async def browse(
    payload: BrowseRequest,
    browser: BrowserSessionService = Depends(get_browser_service),
) -> dict[str, Any]:
    """Execute one task and return the page state with the session id for reuse."""

    result = await browser.execute(payload.task_description or "", payload.session_id)
    return result.as_payload()


__all__ = ["router"]
