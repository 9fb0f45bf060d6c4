"""Base protocol and shared helpers for insight analyzers."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol, runtime_checkable

from diskinsight.cancellation import CancellationToken
from diskinsight.models import Insight

logger = logging.getLogger(__name__)


@runtime_checkable
class InsightAnalyzer(Protocol):
    """Interface for probes that detect cleanup or archive opportunities."""

    name: str

    @property
    def is_available(self) -> bool:
        """Cheap capability probe; must not raise."""
        ...

    def analyze(self, token: CancellationToken) -> list[Insight]:
        """Probe the system and return findings.

        May block for a long time. Expected failures (unreadable
        directories, missing tools) degrade to fewer findings; cancellation
        raises OperationCancelled.

        Args:
            token: Shared cancellation token for the aggregate run.

        Returns:
            Findings in discovery order.

        """
        ...


def list_subdirectories(path: Path, token: CancellationToken) -> Iterator[os.DirEntry]:
    """Yield immediate subdirectories of path; nothing if it can't be listed."""
    try:
        with os.scandir(path) as entries:
            dirs = []
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        dirs.append(entry)
                except OSError:
                    continue
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", path, e)
        return

    for entry in dirs:
        token.raise_if_cancelled()
        yield entry


def list_files(path: Path, token: CancellationToken) -> Iterator[os.DirEntry]:
    """Yield regular files directly inside path; nothing if it can't be listed."""
    try:
        with os.scandir(path) as entries:
            files = []
            for entry in entries:
                try:
                    if entry.is_file(follow_symlinks=False):
                        files.append(entry)
                except OSError:
                    continue
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", path, e)
        return

    for entry in files:
        token.raise_if_cancelled()
        yield entry


def is_pruned_directory(name: str) -> bool:
    """Hidden and system-marker directories are never descended into."""
    return name.startswith(".") or name.startswith("$")
