"""Directory size walking for diskinsight."""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from diskinsight.cancellation import CancellationToken
from diskinsight.models import DiskUsage, FolderInfo

logger = logging.getLogger(__name__)


def expand_path(path: str) -> Path:
    """Expand ~ and environment variables in path."""
    return Path(os.path.expanduser(os.path.expandvars(path)))


def get_directory_size(
    path: Path,
    token: Optional[CancellationToken] = None,
) -> tuple[int, int, int]:
    """
    Calculate total size of a directory tree.

    Symlinks are not followed. Entries or subtrees that cannot be read
    (permission denied, name too long, vanished) contribute 0.

    Args:
        path: Directory to scan
        token: Optional cancellation token, checked for every entry

    Returns:
        Tuple of (total_bytes, file_count, dir_count)

    Raises:
        OperationCancelled: If the token is cancelled mid-walk
    """
    total_size = 0
    file_count = 0
    dir_count = 0

    def _scan(p: str) -> None:
        nonlocal total_size, file_count, dir_count
        try:
            with os.scandir(p) as entries:
                for entry in entries:
                    if token is not None:
                        token.raise_if_cancelled()
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total_size += entry.stat(follow_symlinks=False).st_size
                            file_count += 1
                        elif entry.is_dir(follow_symlinks=False):
                            dir_count += 1
                            _scan(entry.path)
                    except OSError:
                        continue
        except OSError as e:
            logger.debug("Skipping unreadable directory %s: %s", p, e)

    _scan(os.fspath(path))
    return total_size, file_count, dir_count


def directory_size(path: Path, token: Optional[CancellationToken] = None) -> int:
    """Total bytes below path; the accumulation every analyzer reuses."""
    size, _, _ = get_directory_size(path, token)
    return size


def get_folder_info(path: Path) -> FolderInfo:
    """
    Summarize a directory.

    Raises:
        FileNotFoundError: If path is not an existing directory
    """
    path = Path(path)
    if not path.is_dir():
        raise FileNotFoundError(f"Directory not found: {path}")

    size, files, dirs = get_directory_size(path)
    return FolderInfo(
        path=str(path),
        name=path.name or str(path),
        size_in_bytes=size,
        file_count=files,
        folder_count=dirs,
    )


def get_subdirectories(path: Path) -> list[FolderInfo]:
    """
    Summarize each immediate subdirectory of path, largest first.

    Subfolders that cannot be listed are kept with size 0 and an
    "(Access Denied)" marker in the name.
    """
    path = Path(path)
    if not path.is_dir():
        raise FileNotFoundError(f"Directory not found: {path}")

    results: list[FolderInfo] = []
    with os.scandir(path) as entries:
        for entry in entries:
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                continue

            try:
                # Probe access up front; get_directory_size swallows it
                with os.scandir(entry.path):
                    pass
            except PermissionError:
                results.append(
                    FolderInfo(path=entry.path, name=f"{entry.name} (Access Denied)")
                )
                continue
            except OSError:
                continue

            size, files, dirs = get_directory_size(Path(entry.path))
            results.append(
                FolderInfo(
                    path=entry.path,
                    name=entry.name,
                    size_in_bytes=size,
                    file_count=files,
                    folder_count=dirs,
                )
            )

    results.sort(key=lambda f: f.size_in_bytes, reverse=True)
    return results


def get_disk_usage(mount_point: str = "/") -> DiskUsage:
    """
    Get overall disk usage for a mount point.

    Args:
        mount_point: Mount point to check (default: /)

    Returns:
        DiskUsage with total, used, and free bytes
    """
    usage = shutil.disk_usage(mount_point)
    return DiskUsage(
        total_bytes=usage.total,
        used_bytes=usage.used,
        free_bytes=usage.free,
        mount_point=mount_point,
    )
