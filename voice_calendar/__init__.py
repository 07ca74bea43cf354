"""Voice-driven calendar assistant."""

__version__ = "1.0.0"
