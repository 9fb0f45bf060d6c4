"""Static file analyzer: old downloads, large files and disk images."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

from diskinsight.analyzers.base import is_pruned_directory, list_files, list_subdirectories
from diskinsight.cancellation import CancellationToken
from diskinsight.models import Insight, InsightType, RecommendedAction
from diskinsight.paths import UserDirs
from diskinsight.sizes import MB, format_size

logger = logging.getLogger(__name__)

OLD_DOWNLOADS_MIN_BYTES = 100 * MB
INSTALLER_MIN_BYTES = 50 * MB

INSTALLER_EXTENSIONS = frozenset({".exe", ".msi", ".msix", ".dmg", ".pkg"})
ARCHIVABLE_EXTENSIONS = frozenset({".mp4", ".mkv", ".avi", ".mov", ".wmv", ".zip", ".rar", ".7z"})
DISK_IMAGE_EXTENSIONS = frozenset({".iso", ".img", ".vhd", ".vmdk"})

LARGE_FILE_DIRS = ("Videos", "Movies", "Documents", "Desktop")
LARGE_FILE_MAX_DEPTH = 3
DISK_IMAGE_MAX_DEPTH = 4

# Application data trees hold images the user didn't put there
DISK_IMAGE_SKIP_DIRS = frozenset({"AppData", "Library"})


def _extension(name: str) -> str:
    return Path(name).suffix.lower()


class StaticFilesAnalyzer:
    """Finds cold or bulky user files that are better archived than kept."""

    name: str = "Static Files"

    def __init__(
        self,
        dirs: UserDirs,
        days_until_old: int = 180,
        large_file_mb: int = 500,
        now: Optional[float] = None,
    ) -> None:
        self.dirs = dirs
        self.days_until_old = days_until_old
        self.large_file_threshold = large_file_mb * MB
        self._now = now

    @property
    def is_available(self) -> bool:
        return True

    def analyze(self, token: CancellationToken) -> list[Insight]:
        insights: list[Insight] = []
        home = self.dirs.home

        downloads = home / "Downloads"
        if downloads.is_dir():
            self._analyze_downloads(downloads, insights, token)

        for name in LARGE_FILE_DIRS:
            location = home / name
            if location.is_dir():
                self._find_large_files(location, insights, token, depth=0)

        if home.is_dir():
            reported = {i.path for i in insights}
            self._find_disk_images(home, insights, reported, token, depth=0)

        return insights

    def _analyze_downloads(self, path: Path, insights: list[Insight], token: CancellationToken) -> None:
        now = self._now if self._now is not None else time.time()
        cutoff = now - self.days_until_old * 24 * 60 * 60

        old_count = 0
        old_bytes = 0
        installer_count = 0
        installer_bytes = 0

        for entry in list_files(path, token):
            try:
                stat = entry.stat(follow_symlinks=False)
            except OSError:
                continue

            if stat.st_atime < cutoff:
                old_count += 1
                old_bytes += stat.st_size

            if _extension(entry.name) in INSTALLER_EXTENSIONS and stat.st_size > INSTALLER_MIN_BYTES:
                installer_count += 1
                installer_bytes += stat.st_size

        if old_bytes > OLD_DOWNLOADS_MIN_BYTES:
            insights.append(
                Insight(
                    type=InsightType.OLD_FILES,
                    description=f"Downloads: {old_count} old files ({format_size(old_bytes)})",
                    path=str(path),
                    size_in_bytes=old_bytes,
                    action=RecommendedAction.ARCHIVE,
                )
            )

        if installer_count:
            insights.append(
                Insight(
                    type=InsightType.LARGE_FILES,
                    description=f"Downloads: {installer_count} large installers ({format_size(installer_bytes)})",
                    path=str(path),
                    size_in_bytes=installer_bytes,
                    action=RecommendedAction.REVIEW,
                )
            )

    def _find_large_files(
        self,
        path: Path,
        insights: list[Insight],
        token: CancellationToken,
        depth: int,
    ) -> None:
        if depth > LARGE_FILE_MAX_DEPTH:
            return

        for entry in list_files(path, token):
            try:
                size = entry.stat(follow_symlinks=False).st_size
            except OSError:
                continue
            if size <= self.large_file_threshold:
                continue

            archivable = _extension(entry.name) in ARCHIVABLE_EXTENSIONS
            insights.append(
                Insight(
                    type=InsightType.LARGE_FILES,
                    description=f"Large file: {entry.name} ({format_size(size)})",
                    path=entry.path,
                    size_in_bytes=size,
                    action=RecommendedAction.ARCHIVE if archivable else RecommendedAction.REVIEW,
                )
            )

        for sub in list_subdirectories(path, token):
            if is_pruned_directory(sub.name):
                continue
            self._find_large_files(Path(sub.path), insights, token, depth + 1)

    def _find_disk_images(
        self,
        path: Path,
        insights: list[Insight],
        reported: set[str],
        token: CancellationToken,
        depth: int,
    ) -> None:
        if depth > DISK_IMAGE_MAX_DEPTH:
            return

        for entry in list_files(path, token):
            if _extension(entry.name) not in DISK_IMAGE_EXTENSIONS or entry.path in reported:
                continue
            try:
                size = entry.stat(follow_symlinks=False).st_size
            except OSError:
                continue
            insights.append(
                Insight(
                    type=InsightType.LARGE_FILES,
                    description=f"Disk image: {entry.name} ({format_size(size)})",
                    path=entry.path,
                    size_in_bytes=size,
                    action=RecommendedAction.ARCHIVE,
                )
            )

        for sub in list_subdirectories(path, token):
            if is_pruned_directory(sub.name) or sub.name in DISK_IMAGE_SKIP_DIRS:
                continue
            self._find_disk_images(Path(sub.path), insights, reported, token, depth + 1)
