"""Voice command orchestration endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ..error_handlers import error_context
from ..orchestrator import CommandOrchestrator
from ..schemas.commands import ProcessCommandRequest
from .dependencies import get_orchestrator

logger = logging.getLogger(__name__)

SESSION_HEADER = "x-session-id"

router = APIRouter(prefix="/api", tags=["commands"])


@router.post(
    "/process-command",
    response_class=StreamingResponse,
    dependencies=[Depends(error_context("Error processing command"))],
)
async def process_command(
    payload: ProcessCommandRequest,
    orchestrator: CommandOrchestrator = Depends(get_orchestrator),
) -> StreamingResponse:
    """Run the full pipeline and stream back the spoken narration."""

    result = await orchestrator.process(
        payload.transcribed_text or "", payload.session_id
    )
    logger.info("Streaming audio back with session ID: %s", result.session_id)
    return StreamingResponse(
        result.speech.iter_chunks(),
        media_type=result.media_type,
        headers={SESSION_HEADER: result.session_id},
    )


__all__ = ["SESSION_HEADER", "router"]
