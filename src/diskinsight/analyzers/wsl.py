"""WSL2 distribution analyzer.

Finds the ext4.vhdx virtual disks backing WSL2 distributions and the Docker
Desktop WSL2 backend under %LOCALAPPDATA%\\Packages.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from diskinsight.analyzers.base import list_files, list_subdirectories
from diskinsight.cancellation import CancellationToken
from diskinsight.models import Insight, InsightType, RecommendedAction
from diskinsight.paths import UserDirs
from diskinsight.sizes import format_size

logger = logging.getLogger(__name__)

DISTRIBUTION_PATTERNS = (
    "CanonicalGroupLimited.Ubuntu*",
    "TheDebianProject.DebianGNULinux*",
    "*WSL*",
    "*Linux*",
)

DOCKER_PATTERN = "Docker*"


def _matches(name: str, pattern: str) -> bool:
    # Package folder names are matched the way Windows globbing does
    return fnmatch.fnmatchcase(name.lower(), pattern.lower())


def friendly_distribution_name(folder_name: str) -> str:
    if "Ubuntu" in folder_name:
        return "Ubuntu"
    if "Debian" in folder_name:
        return "Debian"
    return folder_name


class WSL2Analyzer:
    """Reports WSL2 virtual disks, which can only be removed destructively."""

    name: str = "WSL2"

    def __init__(self, dirs: UserDirs, supported: Optional[bool] = None) -> None:
        self.dirs = dirs
        self._supported = sys.platform == "win32" if supported is None else supported

    @property
    def is_available(self) -> bool:
        return self._supported

    @property
    def packages_path(self) -> Path:
        return self.dirs.local_app_data / "Packages"

    def analyze(self, token: CancellationToken) -> list[Insight]:
        insights: list[Insight] = []
        if not self.is_available or not self.packages_path.is_dir():
            return insights

        seen: set[str] = set()

        for pattern in DISTRIBUTION_PATTERNS:
            for folder in list_subdirectories(self.packages_path, token):
                if not _matches(folder.name, pattern):
                    continue
                local_state = Path(folder.path) / "LocalState"
                for vhdx in list_files(local_state, token):
                    if not vhdx.name.lower().endswith(".vhdx"):
                        continue
                    insight = self._disk_insight(vhdx, seen, distribution=folder.name)
                    if insight:
                        insights.append(insight)

        for folder in list_subdirectories(self.packages_path, token):
            if not _matches(folder.name, DOCKER_PATTERN):
                continue
            for vhdx in self._walk_vhdx(Path(folder.path) / "LocalState", token):
                insight = self._disk_insight(vhdx, seen, distribution=None)
                if insight:
                    insights.append(insight)

        return insights

    def _disk_insight(
        self,
        entry: os.DirEntry,
        seen: set[str],
        distribution: Optional[str],
    ) -> Optional[Insight]:
        """Build an insight for one virtual disk, once per resolved path."""
        try:
            resolved = str(Path(entry.path).resolve())
            size = entry.stat(follow_symlinks=False).st_size
        except OSError as e:
            logger.debug("Skipping virtual disk %s: %s", entry.path, e)
            return None

        if resolved in seen:
            return None
        seen.add(resolved)

        if distribution is None:
            return Insight(
                type=InsightType.LINUX_SUBSYSTEM_DISTRIBUTION,
                description=f"Docker Desktop WSL2 data: {format_size(size)}",
                path=entry.path,
                size_in_bytes=size,
                action=RecommendedAction.REVIEW,
            )

        clean_name = friendly_distribution_name(distribution)
        return Insight(
            type=InsightType.LINUX_SUBSYSTEM_DISTRIBUTION,
            description=f"WSL2 {clean_name}: {format_size(size)}",
            path=entry.path,
            size_in_bytes=size,
            action=RecommendedAction.REVIEW,
            cleanup_command=f"wsl --unregister {clean_name}",
        )

    def _walk_vhdx(self, root: Path, token: CancellationToken):
        """Yield every .vhdx file below root."""
        for entry in list_files(root, token):
            if entry.name.lower().endswith(".vhdx"):
                yield entry
        for sub in list_subdirectories(root, token):
            yield from self._walk_vhdx(Path(sub.path), token)
