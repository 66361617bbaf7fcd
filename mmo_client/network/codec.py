"""
Wire codecs.

JSON text frames are what the game server speaks; msgpack binary frames are
available for servers configured to use them.
"""

import json
from typing import Any, Dict, Union

import msgpack

Frame = Union[str, bytes]


class ProtocolError(ValueError):
    """Raised when an inbound frame cannot be turned into a message."""


class MessageCodec:
    """Encodes outbound messages and decodes inbound frames."""

    CODECS = ("json", "msgpack")

    def __init__(self, name: str = "json"):
        if name not in self.CODECS:
            raise ValueError(f"Unknown codec: {name}")
        self.name = name

    def encode(self, message: Dict[str, Any]) -> Frame:
        if self.name == "msgpack":
            return msgpack.packb(message)
        return json.dumps(message, separators=(",", ":"))

    def decode(self, frame: Frame) -> Dict[str, Any]:
        """
        Decode a frame into a message mapping.

        Raises:
            ProtocolError: if the frame is undecodable, is not a mapping,
                or lacks a string ``action`` field.
        """
        try:
            if self.name == "msgpack":
                message = msgpack.unpackb(frame, raw=False)
            else:
                message = json.loads(frame)
        except (ValueError, TypeError) as e:
            raise ProtocolError(f"Undecodable frame: {e}") from e

        if not isinstance(message, dict):
            raise ProtocolError(f"Expected a mapping, got {type(message).__name__}")

        action = message.get("action")
        if not isinstance(action, str):
            raise ProtocolError("Message has no action")

        return message
