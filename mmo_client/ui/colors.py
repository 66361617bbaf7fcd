"""
Colors and styles for the client HUD.
"""


class Colors:
    """HUD color palette."""
    BACKGROUND = (0, 0, 0)

    # Panels
    PANEL_BG = (0, 0, 0, 160)
    LOADING_BG = (20, 24, 32)

    # Player labels
    LABEL_BG = (0, 0, 0, 178)

    # Text colors
    TEXT_WHITE = (255, 255, 255)
    TEXT_GRAY = (170, 170, 170)

    # Connection indicator, by connection state
    STATUS_DISCONNECTED = (128, 128, 128)
    STATUS_CONNECTING = (255, 193, 7)
    STATUS_CONNECTED = (40, 167, 69)
    STATUS_ERROR = (220, 53, 69)

    # Status message backgrounds, by message kind
    MESSAGE_INFO = (23, 162, 184, 220)
    MESSAGE_SUCCESS = (40, 167, 69, 220)
    MESSAGE_ERROR = (220, 53, 69, 220)


STATUS_COLORS = {
    "disconnected": Colors.STATUS_DISCONNECTED,
    "connecting": Colors.STATUS_CONNECTING,
    "connected": Colors.STATUS_CONNECTED,
    "error": Colors.STATUS_ERROR,
}

MESSAGE_COLORS = {
    "info": Colors.MESSAGE_INFO,
    "success": Colors.MESSAGE_SUCCESS,
    "error": Colors.MESSAGE_ERROR,
}
