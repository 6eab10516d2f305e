"""Operating-system platform detection."""

from __future__ import annotations

import sys
from enum import Enum


class Platform(Enum):
    """Operating systems dotling distinguishes between."""

    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"

    @classmethod
    def current(cls) -> "Platform":
        """Return the platform of the running machine."""
        if sys.platform == "darwin":
            return cls.MACOS
        if sys.platform.startswith("win"):
            return cls.WINDOWS
        return cls.LINUX

    @classmethod
    def parse(cls, text: str) -> "Platform | None":
        """Parse a platform name case-insensitively; return None if unknown."""
        return _ALIASES.get(text.lower())

    def __str__(self) -> str:
        return self.value


_ALIASES = {
    "linux": Platform.LINUX,
    "macos": Platform.MACOS,
    "darwin": Platform.MACOS,
    "windows": Platform.WINDOWS,
    "win": Platform.WINDOWS,
}


def should_deploy(os_name: str | None) -> bool:
    """Return True if an entry restricted to ``os_name`` belongs on this machine."""
    if os_name is None or os_name == "all":
        return True
    return Platform.parse(os_name) is Platform.current()