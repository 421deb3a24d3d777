#!/usr/bin/env python3
"""Blinda terminal client.

Records a spoken command, sends it through the backend pipeline and plays the
narrated answer. The browser session id is kept on disk between runs.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from rich.console import Console
from rich.style import Style

from .api import BackendClient, BackendError
from .audio import MicrophoneRecorder, SubprocessPlayer
from .config import ClientConfig
from .controller import ClientController, ControllerState
from .session_store import FileSessionStore

INFO_STYLE = Style(color="cyan")
USER_STYLE = Style(color="bright_blue", bold=True)
ERROR_STYLE = Style(color="red", bold=True)

_STATE_LABELS = {
    ControllerState.IDLE: "Ready. Press Enter to speak.",
    ControllerState.RECORDING: "Listening... press Enter to finish.",
    ControllerState.TRANSCRIBING: "Transcribing...",
    ControllerState.ORCHESTRATING: "Working in the browser...",
    ControllerState.PLAYING: "Speaking. Type s to stop, or press Enter to talk.",
}


class VoiceShell:
    """Keyboard loop around a ClientController."""

    def __init__(self, config: ClientConfig, console: Optional[Console] = None) -> None:
        self.config = config
        self.console = console or Console()
        self.backend = BackendClient(config.server_url, timeout=config.request_timeout)
        self.controller = ClientController(
            self.backend,
            MicrophoneRecorder(
                sample_rate=config.sample_rate,
                channels=config.channels,
                device=config.input_device,
            ),
            SubprocessPlayer(config.player_command),
            FileSessionStore(config.session_file),
            on_state_change=self._show_state,
            on_transcript=self._show_transcript,
            on_error=self._show_error,
        )
        self._cycle: Optional[asyncio.Task[None]] = None

    def _show_state(self, state: ControllerState) -> None:
        self.console.print(f"[dim]{_STATE_LABELS[state]}[/dim]")

    def _show_transcript(self, text: str) -> None:
        self.console.print(f"You said: {text}", style=USER_STYLE)

    def _show_error(self, exc: Exception) -> None:
        self.console.bell()
        if isinstance(exc, BackendError) and exc.session_expired:
            self.console.print(
                "The browser session ended. Your next command starts a new one.",
                style=ERROR_STYLE,
            )
            return
        self.console.print(f"Error: {exc}", style=ERROR_STYLE)

    async def _check_health(self) -> bool:
        try:
            health = await self.backend.check_health()
        except BackendError as exc:
            self.console.print(f"Cannot connect to backend: {exc}", style=ERROR_STYLE)
            return False
        missing = health.get("missing_credentials") or []
        if missing:
            self.console.print(
                f"Backend is missing: {', '.join(missing)}", style=ERROR_STYLE
            )
        return True

    async def _toggle_recording(self) -> None:
        if self.controller.state is ControllerState.RECORDING:
            self._cycle = asyncio.create_task(self.controller.stop_recording())
        else:
            await self.controller.start_recording()

    async def run(self) -> None:
        if not await self._check_health():
            return

        session_id = self.controller.session_id
        if session_id:
            self.console.print(f"[dim]Resuming session: {session_id[:8]}...[/dim]")
        self.console.print(
            "[bold]Blinda[/bold] - Enter to talk, s to stop speech, n for a new session, q to quit",
            style=INFO_STYLE,
        )
        self._show_state(self.controller.state)

        try:
            while True:
                try:
                    key = await asyncio.to_thread(self.console.input, "")
                except EOFError:
                    break
                key = key.strip().lower()
                if key == "q":
                    break
                if key == "s":
                    await self.controller.interrupt()
                elif key == "n":
                    self.controller.forget_session()
                    self.console.print("Session cleared. Starting fresh.", style=INFO_STYLE)
                elif key == "":
                    await self._toggle_recording()
        finally:
            await self.controller.interrupt()
            if self._cycle is not None and not self._cycle.done():
                self._cycle.cancel()
            await self.backend.aclose()


def main() -> None:
    """CLI entry point."""
    config = ClientConfig.from_env_and_args()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    shell = VoiceShell(config)
    try:
        asyncio.run(shell.run())
    except KeyboardInterrupt:
        shell.console.print("\n[dim]Goodbye![/dim]")


if __name__ == "__main__":
    main()
