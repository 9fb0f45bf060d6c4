"""IDE and editor cache analyzer (Visual Studio, JetBrains, VS Code)."""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass
from pathlib import Path

from diskinsight.analyzers.base import list_subdirectories
from diskinsight.cancellation import CancellationToken
from diskinsight.models import Insight, InsightType, RecommendedAction
from diskinsight.paths import UserDirs
from diskinsight.scanner import directory_size
from diskinsight.sizes import MB, format_size

logger = logging.getLogger(__name__)

VISUAL_STUDIO_VERSIONS = ("17.0", "16.0", "15.0")  # VS 2022, 2019, 2017


@dataclass(frozen=True)
class CacheFolder:
    """A cache-like subfolder and the policy for reporting it."""

    label: str
    subpath: str
    threshold_bytes: int
    action: RecommendedAction = RecommendedAction.CLEAN


VISUAL_STUDIO_INSTANCE_FOLDERS = (
    CacheFolder("Component Cache", "ComponentModelCache", 50 * MB),
    CacheFolder("Designer Cache", "Designer/ShadowCache", 20 * MB),
)

# Indexes rebuild on their own but take a while, so they need a decision
JETBRAINS_PRODUCT_FOLDERS = (
    CacheFolder("caches", "caches", 100 * MB),
    CacheFolder("index", "index", 100 * MB, RecommendedAction.REVIEW),
    CacheFolder("logs", "log", 50 * MB),
)

VSCODE_FOLDERS = (
    CacheFolder("VS Code Cache", "Code/Cache", 100 * MB),
    CacheFolder("VS Code Cached Data", "Code/CachedData", 50 * MB),
    CacheFolder("VS Code Cached Extensions", "Code/CachedExtensions", 50 * MB),
)


class IDECacheAnalyzer:
    """Reports IDE caches, indexes and logs above per-folder thresholds."""

    name: str = "IDE Caches"

    def __init__(self, dirs: UserDirs) -> None:
        self.dirs = dirs

    @property
    def is_available(self) -> bool:
        return True

    def analyze(self, token: CancellationToken) -> list[Insight]:
        insights: list[Insight] = []
        self._analyze_visual_studio(insights, token)
        self._analyze_jetbrains(insights, token)
        self._analyze_vscode(insights, token)
        return insights

    def _check(
        self,
        path: Path,
        label: str,
        threshold_bytes: int,
        action: RecommendedAction,
        insights: list[Insight],
        token: CancellationToken,
    ) -> None:
        token.raise_if_cancelled()
        if not path.is_dir():
            return
        size = directory_size(path, token)
        if size <= threshold_bytes:
            return
        insights.append(
            Insight(
                type=InsightType.TOOLING_CACHE,
                description=f"{label}: {format_size(size)}",
                path=str(path),
                size_in_bytes=size,
                action=action,
            )
        )

    def _analyze_visual_studio(self, insights: list[Insight], token: CancellationToken) -> None:
        vs_root = self.dirs.local_app_data / "Microsoft" / "VisualStudio"

        for version in VISUAL_STUDIO_VERSIONS:
            major = version.split(".")[0]
            for instance in list_subdirectories(vs_root, token):
                if not fnmatch.fnmatchcase(instance.name, f"{version}_*"):
                    continue
                for folder in VISUAL_STUDIO_INSTANCE_FOLDERS:
                    self._check(
                        Path(instance.path) / folder.subpath,
                        f"VS {major} {folder.label}",
                        folder.threshold_bytes,
                        folder.action,
                        insights,
                        token,
                    )

        self._check(
            self.dirs.local_app_data / "Microsoft" / "CodeAnalysis",
            "VS Code Analysis Cache",
            100 * MB,
            RecommendedAction.CLEAN,
            insights,
            token,
        )
        self._check(
            self.dirs.local_app_data / "Temp" / "VisualStudio",
            "Visual Studio Temp",
            50 * MB,
            RecommendedAction.CLEAN,
            insights,
            token,
        )

    def _analyze_jetbrains(self, insights: list[Insight], token: CancellationToken) -> None:
        bases = [
            self.dirs.local_app_data / "JetBrains",
            self.dirs.app_data / "JetBrains",
        ]
        for base in bases:
            for product in list_subdirectories(base, token):
                for folder in JETBRAINS_PRODUCT_FOLDERS:
                    self._check(
                        Path(product.path) / folder.subpath,
                        f"{product.name} {folder.label}",
                        folder.threshold_bytes,
                        folder.action,
                        insights,
                        token,
                    )

    def _analyze_vscode(self, insights: list[Insight], token: CancellationToken) -> None:
        for folder in VSCODE_FOLDERS:
            self._check(
                self.dirs.app_data / folder.subpath,
                folder.label,
                folder.threshold_bytes,
                folder.action,
                insights,
                token,
            )

        # Deleting extensions loses user setup, so only very large sets are surfaced
        self._check(
            self.dirs.home / ".vscode" / "extensions",
            "VS Code Extensions",
            500 * MB,
            RecommendedAction.REVIEW,
            insights,
            token,
        )
