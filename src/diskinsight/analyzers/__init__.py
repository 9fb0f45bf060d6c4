"""Insight analyzers and the default registry."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from diskinsight.config import Settings
from diskinsight.paths import UserDirs
from diskinsight.analyzers.base import InsightAnalyzer
from diskinsight.analyzers.docker import DockerAnalyzer
from diskinsight.analyzers.ide_cache import IDECacheAnalyzer
from diskinsight.analyzers.package_cache import PackageCacheAnalyzer
from diskinsight.analyzers.project_artifacts import ProjectArtifactsAnalyzer
from diskinsight.analyzers.static_files import StaticFilesAnalyzer
from diskinsight.analyzers.wsl import WSL2Analyzer

logger = logging.getLogger(__name__)

__all__ = [
    "DockerAnalyzer",
    "IDECacheAnalyzer",
    "InsightAnalyzer",
    "PackageCacheAnalyzer",
    "ProjectArtifactsAnalyzer",
    "StaticFilesAnalyzer",
    "WSL2Analyzer",
    "build_analyzers",
]


def build_analyzers(
    settings: Optional[Settings] = None,
    dirs: Optional[UserDirs] = None,
) -> list[InsightAnalyzer]:
    """Instantiate the default analyzers in execution order.

    Analyzers named in ``settings.disabled_analyzers`` are left out.
    """
    settings = settings or Settings()
    dirs = dirs or UserDirs.detect()

    roots = [Path(r) for r in settings.project_search_roots] or None

    analyzers: list[InsightAnalyzer] = [
        DockerAnalyzer(
            command=settings.docker_command,
            probe_timeout=settings.docker_probe_timeout,
        ),
        WSL2Analyzer(dirs),
        ProjectArtifactsAnalyzer(
            dirs,
            search_roots=roots,
            max_depth=settings.project_max_depth,
        ),
        PackageCacheAnalyzer(dirs),
        IDECacheAnalyzer(dirs),
        StaticFilesAnalyzer(
            dirs,
            days_until_old=settings.days_until_old,
            large_file_mb=settings.large_file_mb,
        ),
    ]

    disabled = set(settings.disabled_analyzers)
    enabled: list[InsightAnalyzer] = []
    for analyzer in analyzers:
        if analyzer.name in disabled:
            logger.info("Analyzer disabled by config: %s", analyzer.name)
            continue
        enabled.append(analyzer)
    return enabled
