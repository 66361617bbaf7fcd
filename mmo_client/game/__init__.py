"""Session state."""

from .client_state import PlayerInfo, SessionState

__all__ = ["PlayerInfo", "SessionState"]
