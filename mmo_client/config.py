"""
Client configuration management.

Loads configuration from client_config.yml with environment variable overrides.
Uses Pydantic for validation and type safety.
"""

import logging
import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path.cwd() / "client_config.yml"

logger = logging.getLogger("mmo_client.config")


class ServerConfig(BaseModel):
    """Server connection settings."""
    url: str = Field(default="wss://codepath-mmorg.onrender.com", description="WebSocket endpoint")
    codec: Literal["json", "msgpack"] = Field(default="json", description="Wire codec")
    reconnect_delay: float = Field(default=3.0, gt=0, description="Seconds to wait before reconnecting")


class DisplayConfig(BaseModel):
    """Display and window settings."""
    width: int = Field(default=1024, gt=0, description="Initial viewport width in pixels")
    height: int = Field(default=768, gt=0, description="Initial viewport height in pixels")
    title: str = Field(default="Mini MMORPG", description="Window title")
    fps: int = Field(default=60, gt=0, description="Frame scheduler rate")
    resizable: bool = Field(default=True, description="Allow resizing the window")


class WorldConfig(BaseModel):
    """Shared world dimensions and background image."""
    width: int = Field(default=2048, gt=0, description="World width in world units")
    height: int = Field(default=2048, gt=0, description="World height in world units")
    image: str = Field(default="world.jpg", description="Background world image resource")
    assets_dir: str = Field(default=".", description="Base directory for relative resources")


class GameConfig(BaseModel):
    """Game-specific settings."""
    username: str = Field(default="Chinmayi", description="Username sent with join_game")
    avatar_size: int = Field(default=32, gt=0, description="Rendered avatar width")
    cull_margin: int = Field(default=50, ge=0, description="Off-screen margin before culling")
    label_width: int = Field(default=60, gt=0)
    label_height: int = Field(default=15, gt=0)
    label_font_size: int = Field(default=16, gt=0)
    info_message_seconds: float = Field(default=3.0, gt=0, description="Lifetime of info messages")


class KeyBindings(BaseModel):
    """Keyboard shortcuts configuration."""
    move_up: list[str] = Field(default=["up", "w"], description="Move up keys")
    move_down: list[str] = Field(default=["down", "s"], description="Move down keys")
    move_left: list[str] = Field(default=["left", "a"], description="Move left keys")
    move_right: list[str] = Field(default=["right", "d"], description="Move right keys")


class DebugConfig(BaseModel):
    """Debug and development settings."""
    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")


class ClientConfig(BaseModel):
    """Complete client configuration."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    world: WorldConfig = Field(default_factory=WorldConfig)
    game: GameConfig = Field(default_factory=GameConfig)
    key_bindings: KeyBindings = Field(default_factory=KeyBindings)
    debug: DebugConfig = Field(default_factory=DebugConfig)

    @classmethod
    def from_yaml(cls, path: Optional[Path] = None) -> "ClientConfig":
        """Load configuration from YAML file."""
        path = Path(path) if path else DEFAULT_CONFIG_PATH

        if not path.exists():
            # Defaults, still subject to environment overrides
            config = cls(**cls._apply_env_overrides({}))
            config._save_default(path)
            return config

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        data = cls._apply_env_overrides(data)

        return cls(**data)

    @staticmethod
    def _apply_env_overrides(data: dict) -> dict:
        """Apply environment variable overrides to config data."""
        env_mappings = {
            "SERVER_URL": ("server", "url"),
            "SERVER_CODEC": ("server", "codec"),
            "DISPLAY_WIDTH": ("display", "width"),
            "DISPLAY_HEIGHT": ("display", "height"),
            "PLAYER_USERNAME": ("game", "username"),
            "LOG_LEVEL": ("debug", "log_level"),
        }

        for env_var, (section, key) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                if section not in data:
                    data[section] = {}
                # Raw strings; pydantic coerces and validates them
                data[section][key] = value

        return data

    def _save_default(self, path: Path) -> None:
        """Save default configuration to file."""
        data = self.model_dump()
        try:
            with open(path, "w") as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.warning(f"Could not write default config to {path}: {e}")


def get_config(path: Optional[Path] = None) -> ClientConfig:
    """Get the singleton configuration instance."""
    if not hasattr(get_config, "_instance"):
        get_config._instance = ClientConfig.from_yaml(path)
    return get_config._instance


def reload_config(path: Optional[Path] = None) -> ClientConfig:
    """Reload configuration from file."""
    get_config._instance = ClientConfig.from_yaml(path)
    return get_config._instance
