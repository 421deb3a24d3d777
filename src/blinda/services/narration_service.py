"""Turn raw browser page state into a short spoken narration."""

from __future__ import annotations

import logging
from typing import Optional

from ..openrouter import OpenRouterClient

logger = logging.getLogger(__name__)


class NarrationService:
    """Thin wrapper over the language model used for page narration.

    Output is not deterministic; the same page state can yield different text.
    """

    def __init__(self, client: OpenRouterClient, *, model: Optional[str] = None):
        self._client = client
        self._model = model

    async def summarize(self, system_prompt: str, user_context: str) -> str:
        text = await self._client.complete_chat(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_context},
            ],
            model=self._model,
        )
        logger.info("Generated narration (%d chars)", len(text))
        return text


__all__ = ["NarrationService"]
