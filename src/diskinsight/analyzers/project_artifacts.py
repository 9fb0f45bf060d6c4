"""Project artifact analyzer.

Finds regenerable dependency folders (node_modules, target, .venv, ...) next
to the project manifest that produced them, under developer workspace roots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from diskinsight.analyzers.base import list_subdirectories
from diskinsight.cancellation import CancellationToken
from diskinsight.models import Insight, InsightType, RecommendedAction
from diskinsight.paths import UserDirs
from diskinsight.scanner import directory_size, expand_path
from diskinsight.sizes import MB, format_size

logger = logging.getLogger(__name__)

MIN_ARTIFACT_BYTES = 10 * MB
DEFAULT_MAX_DEPTH = 5


@dataclass(frozen=True)
class ArtifactRule:
    """A manifest file and the dependency folder installed beside it."""

    marker: str
    folder: str


DEFAULT_RULES = (
    ArtifactRule(marker="package.json", folder="node_modules"),
    ArtifactRule(marker="Cargo.toml", folder="target"),
    ArtifactRule(marker="pyproject.toml", folder=".venv"),
    ArtifactRule(marker="composer.json", folder="vendor"),
    ArtifactRule(marker="Podfile", folder="Pods"),
)

WORKSPACE_DIRS = (
    "source",
    "repos",
    "projects",
    "dev",
    "code",
    "workspace",
    "Workspace",
    "Documents/GitHub",
)


def default_search_roots(dirs: UserDirs) -> list[Path]:
    """Conventional workspace directories under home that exist."""
    roots = [dirs.home / name for name in WORKSPACE_DIRS]
    return [root for root in roots if root.is_dir()]


def delete_command(path: Path, windows: bool) -> str:
    if windows:
        return f'rmdir /s /q "{path}"'
    return f'rm -rf "{path}"'


class ProjectArtifactsAnalyzer:
    """Reports dependency folders that can be deleted and reinstalled."""

    name: str = "Project Artifacts"

    def __init__(
        self,
        dirs: UserDirs,
        search_roots: Optional[list[Path]] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        rules: tuple[ArtifactRule, ...] = DEFAULT_RULES,
    ) -> None:
        self.dirs = dirs
        self.max_depth = max_depth
        self.rules = rules
        if search_roots:
            self.search_roots = [expand_path(str(r)) for r in search_roots]
            self.search_roots = [r for r in self.search_roots if r.is_dir()]
        else:
            self.search_roots = default_search_roots(dirs)

    @property
    def is_available(self) -> bool:
        return True

    def analyze(self, token: CancellationToken) -> list[Insight]:
        insights: list[Insight] = []
        seen: set[str] = set()
        for root in self.search_roots:
            token.raise_if_cancelled()
            self._find_artifacts(root, insights, seen, token, depth=0)
        return insights

    def _find_artifacts(
        self,
        path: Path,
        insights: list[Insight],
        seen: set[str],
        token: CancellationToken,
        depth: int,
    ) -> None:
        if depth > self.max_depth:
            return

        artifact_names = {rule.folder for rule in self.rules}

        for entry in list_subdirectories(path, token):
            name = entry.name
            if name.startswith(".") or name in artifact_names:
                continue

            project = Path(entry.path)
            found_artifact = False

            for rule in self.rules:
                artifact = project / rule.folder
                try:
                    if not artifact.is_dir():
                        continue
                except OSError:
                    continue
                if not (project / rule.marker).is_file():
                    continue
                found_artifact = True

                if str(artifact) in seen:
                    continue
                seen.add(str(artifact))

                size = directory_size(artifact, token)
                if size <= MIN_ARTIFACT_BYTES:
                    continue

                insights.append(
                    Insight(
                        type=InsightType.PROJECT_ARTIFACTS,
                        description=f"{rule.folder} in {project.name}: {format_size(size)}",
                        path=str(artifact),
                        size_in_bytes=size,
                        action=RecommendedAction.CLEAN,
                        cleanup_command=delete_command(artifact, self.dirs.windows),
                    )
                )

            # A matched project is not searched for nested projects
            if not found_artifact:
                self._find_artifacts(project, insights, seen, token, depth + 1)
