"""
Sprite Manager - Loads and caches avatar frames and the world image.

Handles:
- Asynchronous loading of image resources (data URLs, http(s) URLs, local files)
- In-memory caching of decoded surfaces, keyed by resource identifier
- Remembering failed resources so they are never retried
"""

import asyncio
import base64
import io
import os
from pathlib import Path
from typing import Callable, Dict, Optional, Set, Tuple
from urllib.parse import unquote_to_bytes

import aiohttp
import pygame

from ..logging_config import get_logger

logger = get_logger(__name__)


def decode_data_url(url: str) -> Tuple[bytes, str]:
    """
    Decode a ``data:`` URL.

    Returns:
        (payload bytes, format hint such as "png")

    Raises:
        ValueError: if the URL is not a well-formed data URL
    """
    if not url.startswith("data:") or "," not in url:
        raise ValueError("Not a data URL")

    header, payload = url[5:].split(",", 1)
    media_type = header.split(";", 1)[0]
    hint = media_type.rsplit("/", 1)[-1] if "/" in media_type else ""

    if header.endswith(";base64"):
        return base64.b64decode(payload), hint
    return unquote_to_bytes(payload), hint


def describe(resource: str) -> str:
    """Short form of a resource identifier for log lines."""
    if resource.startswith("data:"):
        return resource[:32] + "..."
    return resource


class SpriteManager:
    """
    Manages image loading and caching.

    ``get_surface`` never blocks: it returns the decoded surface when ready,
    otherwise starts one background load and returns None. ``on_ready`` is
    called with the resource identifier whenever a load completes.
    """

    def __init__(self, assets_dir: str = ".", on_ready: Optional[Callable[[str], None]] = None):
        self.assets_dir = Path(assets_dir)
        self.on_ready = on_ready
        self.http_session: Optional[aiohttp.ClientSession] = None

        # In-memory surface cache: resource -> pygame.Surface
        self._surface_cache: Dict[str, pygame.Surface] = {}

        # Scaled copies: (resource, width) -> pygame.Surface
        self._scaled_cache: Dict[Tuple[str, int], pygame.Surface] = {}

        # Pending loads (avoid duplicate requests)
        self._pending_loads: Dict[str, asyncio.Task] = {}

        # Failed loads (never retried)
        self._failed_paths: Set[str] = set()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self.http_session is None or self.http_session.closed:
            self.http_session = aiohttp.ClientSession()
        return self.http_session

    async def close(self) -> None:
        """Cancel pending loads and close the HTTP session."""
        for task in list(self._pending_loads.values()):
            task.cancel()
        self._pending_loads.clear()

        if self.http_session and not self.http_session.closed:
            await self.http_session.close()

    def is_ready(self, resource: str) -> bool:
        return resource in self._surface_cache

    def is_failed(self, resource: str) -> bool:
        return resource in self._failed_paths

    def is_pending(self, resource: str) -> bool:
        return resource in self._pending_loads

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def get_surface(self, resource: str) -> Optional[pygame.Surface]:
        """Decoded surface for a resource, or None while it is loading or if it failed."""
        surface = self._surface_cache.get(resource)
        if surface is None:
            self.request(resource)
        return surface

    def get_scaled(self, resource: str, width: int) -> Optional[pygame.Surface]:
        """
        Surface scaled to ``width``, preserving the source aspect ratio.

        Returns None under the same conditions as ``get_surface``.
        """
        key = (resource, width)
        scaled = self._scaled_cache.get(key)
        if scaled is not None:
            return scaled

        surface = self.get_surface(resource)
        if surface is None:
            return None

        source_width, source_height = surface.get_size()
        if source_width == 0 or source_height == 0:
            return None

        height = max(1, round(width * source_height / source_width))
        scaled = pygame.transform.scale(surface, (width, height))
        self._scaled_cache[key] = scaled
        return scaled

    def request(self, resource: str) -> Optional[asyncio.Task]:
        """
        Start loading a resource unless it is cached, failed or in flight.

        Returns:
            The in-flight task, or None if nothing is (or can be) loading
        """
        if resource in self._surface_cache or resource in self._failed_paths:
            return None

        task = self._pending_loads.get(resource)
        if task is not None:
            return task

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running event loop, cannot load {describe(resource)}")
            return None

        task = loop.create_task(self._load(resource))
        self._pending_loads[resource] = task
        return task

    async def load(self, resource: str) -> Optional[pygame.Surface]:
        """Load a resource and wait for the result."""
        task = self.request(resource)
        if task is not None:
            await task
        return self._surface_cache.get(resource)

    # =========================================================================
    # LOADING
    # =========================================================================

    async def _load(self, resource: str) -> None:
        try:
            data, hint = await self._read_bytes(resource)
            surface = self._decode(data, hint)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError, pygame.error) as e:
            logger.warning(f"Failed to load {describe(resource)}: {e}")
            self._failed_paths.add(resource)
            return
        finally:
            self._pending_loads.pop(resource, None)

        self._surface_cache[resource] = surface
        logger.debug(f"Loaded {describe(resource)}")

        if self.on_ready:
            self.on_ready(resource)

    async def _read_bytes(self, resource: str) -> Tuple[bytes, str]:
        if resource.startswith("data:"):
            return decode_data_url(resource)

        if resource.startswith(("http://", "https://")):
            session = await self._get_session()
            async with session.get(resource) as response:
                if response.status != 200:
                    raise ValueError(f"HTTP {response.status}")
                data = await response.read()
            return data, os.path.splitext(resource.split("?", 1)[0])[1].lstrip(".")

        path = self.assets_dir / resource
        with open(path, "rb") as f:
            data = f.read()
        return data, path.suffix.lstrip(".")

    def _decode(self, data: bytes, hint: str) -> pygame.Surface:
        surface = pygame.image.load(io.BytesIO(data), hint)
        # Pixel-format conversion needs a display mode
        if pygame.display.get_surface() is not None:
            surface = surface.convert_alpha()
        return surface
