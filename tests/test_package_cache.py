"""Tests for the package manager cache analyzer."""

import pytest

from diskinsight.analyzers.package_cache import (
    CacheLocation,
    PackageCacheAnalyzer,
    default_cache_locations,
)
from diskinsight.cancellation import OperationCancelled
from diskinsight.models import InsightType, RecommendedAction
from diskinsight.paths import UserDirs
from diskinsight.sizes import MB


class TestDefaultLocations:
    def test_posix_layout(self, home_dirs, tmp_path):
        locations = {loc.label: loc for loc in default_cache_locations(home_dirs, gopath=str(tmp_path / "go"))}
        assert locations["npm cache (~/.npm)"].path == tmp_path / ".npm"
        assert locations["npm cache"].path == tmp_path / ".cache" / "npm"
        assert locations["pip cache"].threshold_bytes == 50 * MB
        assert locations["Go modules cache"].path == tmp_path / "go" / "pkg" / "mod" / "cache"
        assert locations["Maven repository cache"].cleanup_command is None
        assert locations["NuGet package cache"].action == RecommendedAction.REVIEW

    def test_windows_layout(self, tmp_path):
        dirs = UserDirs.for_home(tmp_path, windows=True)
        locations = {loc.label: loc for loc in default_cache_locations(dirs)}
        assert locations["npm cache"].path == tmp_path / "AppData" / "Local" / "npm-cache"

    def test_gopath_from_environment(self, home_dirs, tmp_path, monkeypatch):
        monkeypatch.setenv("GOPATH", str(tmp_path / "gopath"))
        locations = {loc.label: loc for loc in default_cache_locations(home_dirs)}
        assert locations["Go modules cache"].path == tmp_path / "gopath" / "pkg" / "mod" / "cache"


class TestThresholds:
    def test_exactly_at_threshold_not_reported(self, home_dirs, tmp_path, make_sparse, token):
        make_sparse(tmp_path / ".npm" / "_cacache" / "blob", 100 * MB)
        assert PackageCacheAnalyzer(home_dirs).analyze(token) == []

    def test_one_byte_over_threshold_reported(self, home_dirs, tmp_path, make_sparse, token):
        make_sparse(tmp_path / ".npm" / "_cacache" / "blob", 100 * MB + 1)
        insights = PackageCacheAnalyzer(home_dirs).analyze(token)
        assert len(insights) == 1
        assert insights[0].size_in_bytes == 100 * MB + 1

    def test_pip_has_lower_threshold(self, home_dirs, tmp_path, make_sparse, token):
        make_sparse(tmp_path / ".cache" / "pip" / "http" / "blob", 60 * MB)
        insights = PackageCacheAnalyzer(home_dirs).analyze(token)
        assert len(insights) == 1
        assert insights[0].cleanup_command == "pip cache purge"


class TestAnalyze:
    def test_npm_cache_insight(self, home_dirs, tmp_path, make_sparse, token):
        make_sparse(tmp_path / ".npm" / "_cacache" / "blob", 150 * MB)
        insight = PackageCacheAnalyzer(home_dirs).analyze(token)[0]

        assert insight.type == InsightType.DEPENDENCY_CACHE
        assert insight.action == RecommendedAction.CLEAN
        assert insight.path == str(tmp_path / ".npm")
        assert insight.description == "npm cache (~/.npm): 150.00 MB"
        assert insight.cleanup_command == "npm cache clean --force"

    def test_missing_directories_are_skipped(self, home_dirs, token):
        assert PackageCacheAnalyzer(home_dirs).analyze(token) == []

    def test_same_path_reported_once(self, home_dirs, tmp_path, make_sparse, token):
        make_sparse(tmp_path / "cache" / "blob", 200 * MB)
        locations = [
            CacheLocation(label="first", path=tmp_path / "cache"),
            CacheLocation(label="second", path=tmp_path / "cache"),
        ]
        insights = PackageCacheAnalyzer(home_dirs, locations=locations).analyze(token)
        assert [i.description.split(":")[0] for i in insights] == ["first"]

    def test_review_caches(self, home_dirs, tmp_path, make_sparse, token):
        make_sparse(tmp_path / ".gradle" / "caches" / "blob", 300 * MB)
        insight = PackageCacheAnalyzer(home_dirs).analyze(token)[0]
        assert insight.action == RecommendedAction.REVIEW
        assert insight.cleanup_command is None

    def test_cancelled(self, home_dirs, cancelled_token):
        with pytest.raises(OperationCancelled):
            PackageCacheAnalyzer(home_dirs).analyze(cancelled_token)
