"""Terminal client: microphone capture, session persistence and playback."""
