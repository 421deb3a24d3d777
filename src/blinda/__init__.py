"""Voice-driven web browsing assistant."""

__version__ = "0.1.0"
