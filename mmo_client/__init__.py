"""Real-time multiplayer game client."""

__version__ = "0.1.0"
