"""Keyboard input."""

from .input_manager import InputController

__all__ = ["InputController"]
