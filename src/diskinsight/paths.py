"""Well-known per-user directories, resolved per platform."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class UserDirs:
    """Base directories the analyzers resolve their locations from.

    ``local_app_data`` holds machine-local caches (``%LOCALAPPDATA%``,
    ``~/Library/Caches``, ``~/.cache``); ``app_data`` holds roaming
    application data (``%APPDATA%``, ``~/Library/Application Support``,
    ``~/.config``).
    """

    home: Path
    local_app_data: Path
    app_data: Path
    windows: bool = False

    @classmethod
    def detect(cls) -> UserDirs:
        """Resolve directories for the current user and platform."""
        home = Path.home()

        if sys.platform == "win32":
            local = os.environ.get("LOCALAPPDATA")
            roaming = os.environ.get("APPDATA")
            return cls(
                home=home,
                local_app_data=Path(local) if local else home / "AppData" / "Local",
                app_data=Path(roaming) if roaming else home / "AppData" / "Roaming",
                windows=True,
            )

        if sys.platform == "darwin":
            return cls.for_home(home, darwin=True)

        cache = os.environ.get("XDG_CACHE_HOME")
        config = os.environ.get("XDG_CONFIG_HOME")
        return cls(
            home=home,
            local_app_data=Path(cache) if cache else home / ".cache",
            app_data=Path(config) if config else home / ".config",
        )

    @classmethod
    def for_home(cls, home: Path, windows: bool = False, darwin: bool = False) -> UserDirs:
        """Derive the conventional layout beneath an arbitrary home directory."""
        home = Path(home)
        if windows:
            return cls(
                home=home,
                local_app_data=home / "AppData" / "Local",
                app_data=home / "AppData" / "Roaming",
                windows=True,
            )
        if darwin:
            return cls(
                home=home,
                local_app_data=home / "Library" / "Caches",
                app_data=home / "Library" / "Application Support",
            )
        return cls(
            home=home,
            local_app_data=home / ".cache",
            app_data=home / ".config",
        )
