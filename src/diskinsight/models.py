"""Data models for diskinsight."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from diskinsight.sizes import format_size


class InsightType(str, Enum):
    """Category of a finding."""

    CONTAINER_IMAGES = "container_images"
    CONTAINER_CONTAINERS = "container_containers"
    CONTAINER_VOLUMES = "container_volumes"
    LINUX_SUBSYSTEM_DISTRIBUTION = "linux_subsystem_distribution"
    PROJECT_ARTIFACTS = "project_artifacts"
    DEPENDENCY_CACHE = "dependency_cache"
    TOOLING_CACHE = "tooling_cache"
    TEMP_FILES = "temp_files"
    OLD_FILES = "old_files"
    LARGE_FILES = "large_files"


class RecommendedAction(str, Enum):
    """Recommended action for a finding."""

    CLEAN = "clean"  # Safe to delete, regenerable
    ARCHIVE = "archive"  # Move to external storage, do not delete
    REVIEW = "review"  # User judgment needed before acting


class Insight(BaseModel):
    """An actionable finding about reclaimable or archivable disk space."""

    model_config = ConfigDict(frozen=True)

    type: InsightType = Field(..., description="Category of the finding")
    description: str = Field(..., description="Human-readable summary including size")
    path: str = Field(..., description="Filesystem path or synthetic marker (e.g. 'docker images')")
    size_in_bytes: int = Field(..., ge=0, description="Estimated reclaimable bytes (0 if unknown)")
    action: RecommendedAction = Field(..., description="Recommended action")
    cleanup_command: Optional[str] = Field(
        None, description="Suggested shell command; never executed by diskinsight"
    )

    @property
    def size_human(self) -> str:
        return format_size(self.size_in_bytes)


class AnalysisProgress(BaseModel):
    """Progress notification emitted while analyzers run."""

    model_config = ConfigDict(frozen=True)

    current_analyzer: str
    completed_count: int = Field(..., ge=0)
    total_count: int = Field(..., ge=0)

    @property
    def percent_complete(self) -> int:
        if self.total_count <= 0:
            return 0
        return (self.completed_count * 100) // self.total_count


class AnalysisResult(BaseModel):
    """Merged output of one aggregate run."""

    all_insights: list[Insight] = Field(default_factory=list)
    by_analyzer: dict[str, list[Insight]] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)

    @property
    def total_reclaimable_bytes(self) -> int:
        return sum(i.size_in_bytes for i in self.all_insights)

    @property
    def total_insight_count(self) -> int:
        return len(self.all_insights)

    def items_for_action(self, action: RecommendedAction) -> list[Insight]:
        """Insights with the given recommended action, in discovery order."""
        return [i for i in self.all_insights if i.action == action]

    def bytes_for_action(self, action: RecommendedAction) -> int:
        return sum(i.size_in_bytes for i in self.items_for_action(action))

    @property
    def clean_items(self) -> list[Insight]:
        return self.items_for_action(RecommendedAction.CLEAN)

    @property
    def archive_items(self) -> list[Insight]:
        return self.items_for_action(RecommendedAction.ARCHIVE)

    @property
    def review_items(self) -> list[Insight]:
        return self.items_for_action(RecommendedAction.REVIEW)


class FolderInfo(BaseModel):
    """Size summary of a single directory tree."""

    path: str = Field(..., description="Full path to the folder")
    name: str = Field(..., description="Folder name")
    size_in_bytes: int = Field(0, description="Total size of all files below the folder")
    file_count: int = Field(0, description="Number of files below the folder")
    folder_count: int = Field(0, description="Number of subfolders below the folder")

    @property
    def size_human(self) -> str:
        return format_size(self.size_in_bytes)


class DiskUsage(BaseModel):
    """Overall disk usage information."""

    total_bytes: int = Field(..., description="Total disk size in bytes")
    used_bytes: int = Field(..., description="Used space in bytes")
    free_bytes: int = Field(..., description="Free space in bytes")
    mount_point: str = Field("/", description="Mount point")

    @property
    def used_percent(self) -> float:
        """Percentage of disk used."""
        return (self.used_bytes / self.total_bytes) * 100 if self.total_bytes > 0 else 0
