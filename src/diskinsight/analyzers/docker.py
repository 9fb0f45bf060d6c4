"""Container runtime analyzer.

Reads `docker system df -v` and the dangling-image list through the CLI and
turns reclaimable space into insights. Output is scraped with text patterns;
sections that don't match are skipped silently.
"""

from __future__ import annotations

import logging
import re
import subprocess
from typing import Optional

from pydantic import BaseModel

from diskinsight.cancellation import CancellationToken
from diskinsight.models import Insight, InsightType, RecommendedAction
from diskinsight.sizes import parse_size

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.2

_SIZE = r"([\d.]+[KMGT]?B)"

_IMAGES_PATTERN = re.compile(rf"Images\s+\d+\s+\d+\s+{_SIZE}\s+{_SIZE}\s+\((\d+)%\)", re.IGNORECASE)
_CONTAINERS_PATTERN = re.compile(rf"Containers\s+\d+\s+\d+\s+{_SIZE}\s+{_SIZE}", re.IGNORECASE)
_VOLUMES_PATTERN = re.compile(rf"Local Volumes\s+\d+\s+\d+\s+{_SIZE}\s+{_SIZE}", re.IGNORECASE)


class ReclaimableSection(BaseModel):
    """Reclaimable space reported for one `system df` section."""

    total: str
    reclaimable: str
    reclaimable_bytes: int
    percent: Optional[int] = None


class DockerDiskUsage(BaseModel):
    """Sections extracted from `docker system df` output."""

    images: Optional[ReclaimableSection] = None
    containers: Optional[ReclaimableSection] = None
    volumes: Optional[ReclaimableSection] = None


def _section(match: Optional[re.Match], with_percent: bool = False) -> Optional[ReclaimableSection]:
    if match is None:
        return None
    return ReclaimableSection(
        total=match.group(1),
        reclaimable=match.group(2),
        reclaimable_bytes=parse_size(match.group(2)),
        percent=int(match.group(3)) if with_percent else None,
    )


def parse_system_df(output: str) -> DockerDiskUsage:
    """Extract images, containers and local volumes sections from df output."""
    if not output:
        return DockerDiskUsage()
    return DockerDiskUsage(
        images=_section(_IMAGES_PATTERN.search(output), with_percent=True),
        containers=_section(_CONTAINERS_PATTERN.search(output)),
        volumes=_section(_VOLUMES_PATTERN.search(output)),
    )


def count_dangling_images(output: str) -> int:
    """Count image IDs in `docker images -f dangling=true -q` output."""
    return len([line for line in output.splitlines() if line.strip()])


class DockerAnalyzer:
    """Reports reclaimable Docker images, containers and volumes."""

    name: str = "Docker"

    def __init__(self, command: str = "docker", probe_timeout: float = 5.0) -> None:
        self.command = command
        self.probe_timeout = probe_timeout

    @property
    def is_available(self) -> bool:
        """True if `docker version` exits zero within the probe timeout."""
        try:
            result = subprocess.run(
                [self.command, "version"],
                capture_output=True,
                text=True,
                timeout=self.probe_timeout,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.debug("Docker probe failed: %s", e)
            return False
        return result.returncode == 0

    def analyze(self, token: CancellationToken) -> list[Insight]:
        insights: list[Insight] = []

        df_output = self._run_command(["system", "df", "-v"], token)
        if not df_output:
            return insights

        usage = parse_system_df(df_output)
        insights.extend(self._usage_insights(usage))

        dangling_output = self._run_command(["images", "-f", "dangling=true", "-q"], token)
        dangling = count_dangling_images(dangling_output)
        if dangling > 0:
            insights.append(
                Insight(
                    type=InsightType.CONTAINER_IMAGES,
                    description=f"{dangling} dangling image(s) can be removed",
                    path="docker images",
                    size_in_bytes=0,
                    action=RecommendedAction.CLEAN,
                    cleanup_command="docker image prune -f",
                )
            )

        return insights

    def _usage_insights(self, usage: DockerDiskUsage) -> list[Insight]:
        insights: list[Insight] = []

        images = usage.images
        if images and images.reclaimable_bytes > 0 and (images.percent or 0) > 0:
            insights.append(
                Insight(
                    type=InsightType.CONTAINER_IMAGES,
                    description=f"Docker images: {images.reclaimable} reclaimable ({images.percent}%)",
                    path="docker images",
                    size_in_bytes=images.reclaimable_bytes,
                    action=RecommendedAction.REVIEW,
                    cleanup_command="docker image prune -a",
                )
            )

        containers = usage.containers
        if containers and containers.reclaimable_bytes > 0:
            insights.append(
                Insight(
                    type=InsightType.CONTAINER_CONTAINERS,
                    description=f"Stopped containers: {containers.reclaimable} reclaimable",
                    path="docker ps -a",
                    size_in_bytes=containers.reclaimable_bytes,
                    action=RecommendedAction.CLEAN,
                    cleanup_command="docker container prune -f",
                )
            )

        volumes = usage.volumes
        if volumes and volumes.reclaimable_bytes > 0:
            insights.append(
                Insight(
                    type=InsightType.CONTAINER_VOLUMES,
                    description=f"Unused volumes: {volumes.reclaimable} reclaimable",
                    path="docker volume ls",
                    size_in_bytes=volumes.reclaimable_bytes,
                    action=RecommendedAction.REVIEW,
                    cleanup_command="docker volume prune -f",
                )
            )

        return insights

    def _run_command(self, args: list[str], token: CancellationToken) -> str:
        """
        Run the container CLI and return stdout.

        Returns an empty string on spawn failure or non-zero exit. The
        process is killed if the token is cancelled while it runs.
        """
        token.raise_if_cancelled()
        try:
            process = subprocess.Popen(
                [self.command, *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            logger.debug("Could not start %s: %s", self.command, e)
            return ""

        with process:
            while True:
                try:
                    stdout, _ = process.communicate(timeout=_POLL_INTERVAL)
                    break
                except subprocess.TimeoutExpired:
                    if token.is_cancelled:
                        process.kill()
                        process.communicate()
                        token.raise_if_cancelled()

        token.raise_if_cancelled()
        if process.returncode != 0:
            logger.debug("%s %s exited with %s", self.command, " ".join(args), process.returncode)
            return ""
        return stdout or ""
