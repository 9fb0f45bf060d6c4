"""Package manager cache analyzer (NuGet, npm, Yarn, pnpm, pip, Cargo, Go, Maven, Gradle)."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from diskinsight.cancellation import CancellationToken
from diskinsight.models import Insight, InsightType, RecommendedAction
from diskinsight.paths import UserDirs
from diskinsight.scanner import directory_size
from diskinsight.sizes import MB, format_size

logger = logging.getLogger(__name__)


class CacheLocation(BaseModel):
    """One well-known package manager cache directory."""

    label: str = Field(..., description="Display label used in the insight description")
    path: Path = Field(..., description="Absolute cache directory")
    threshold_bytes: int = Field(100 * MB, description="Only report caches strictly larger than this")
    action: RecommendedAction = Field(RecommendedAction.CLEAN)
    cleanup_command: Optional[str] = None


def default_cache_locations(dirs: UserDirs, gopath: Optional[str] = None) -> list[CacheLocation]:
    """
    Well-known cache directories for the given user layout.

    Args:
        dirs: Resolved user directories
        gopath: GOPATH override (defaults to the GOPATH environment variable)

    Returns:
        One CacheLocation per ecosystem location, in reporting order
    """
    home = dirs.home
    local = dirs.local_app_data
    go_root = Path(gopath or os.environ.get("GOPATH") or home / "go")

    if dirs.windows:
        npm_cache = local / "npm-cache"
        yarn_cache = local / "Yarn" / "Cache"
        pnpm_store = local / "pnpm-store"
        pip_cache = local / "pip" / "cache"
    else:
        npm_cache = local / "npm"
        yarn_cache = local / "yarn"
        pnpm_store = home / ".local" / "share" / "pnpm" / "store"
        pip_cache = local / "pip"

    return [
        CacheLocation(
            label="NuGet package cache",
            path=home / ".nuget" / "packages",
            action=RecommendedAction.REVIEW,
            cleanup_command="dotnet nuget locals all --clear",
        ),
        CacheLocation(
            label="npm cache",
            path=npm_cache,
            cleanup_command="npm cache clean --force",
        ),
        CacheLocation(
            label="npm cache (~/.npm)",
            path=home / ".npm",
            cleanup_command="npm cache clean --force",
        ),
        CacheLocation(
            label="Yarn cache",
            path=yarn_cache,
            cleanup_command="yarn cache clean",
        ),
        CacheLocation(
            label="pnpm store",
            path=pnpm_store,
            action=RecommendedAction.REVIEW,
            cleanup_command="pnpm store prune",
        ),
        CacheLocation(
            label="pip cache",
            path=pip_cache,
            threshold_bytes=50 * MB,
            cleanup_command="pip cache purge",
        ),
        CacheLocation(
            label="Cargo registry cache",
            path=home / ".cargo" / "registry",
            action=RecommendedAction.REVIEW,
            cleanup_command="cargo cache --autoclean",
        ),
        CacheLocation(
            label="Go modules cache",
            path=go_root / "pkg" / "mod" / "cache",
            cleanup_command="go clean -modcache",
        ),
        CacheLocation(
            label="Maven repository cache",
            path=home / ".m2" / "repository",
            action=RecommendedAction.REVIEW,
        ),
        CacheLocation(
            label="Gradle caches",
            path=home / ".gradle" / "caches",
            action=RecommendedAction.REVIEW,
        ),
    ]


class PackageCacheAnalyzer:
    """Reports package manager caches above their size thresholds.

    Presence is decided purely by directory existence; the package manager
    itself does not have to be installed.
    """

    name: str = "Package Caches"

    def __init__(self, dirs: UserDirs, locations: Optional[list[CacheLocation]] = None) -> None:
        self.dirs = dirs
        self.locations = locations if locations is not None else default_cache_locations(dirs)

    @property
    def is_available(self) -> bool:
        return True

    def analyze(self, token: CancellationToken) -> list[Insight]:
        insights: list[Insight] = []
        seen: set[Path] = set()

        for location in self.locations:
            token.raise_if_cancelled()
            if location.path in seen or not location.path.is_dir():
                continue
            seen.add(location.path)

            size = directory_size(location.path, token)
            logger.debug("%s at %s: %d bytes", location.label, location.path, size)
            if size <= location.threshold_bytes:
                continue

            insights.append(
                Insight(
                    type=InsightType.DEPENDENCY_CACHE,
                    description=f"{location.label}: {format_size(size)}",
                    path=str(location.path),
                    size_in_bytes=size,
                    action=location.action,
                    cleanup_command=location.cleanup_command,
                )
            )

        return insights
