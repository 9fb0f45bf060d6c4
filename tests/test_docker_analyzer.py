"""Tests for the container runtime analyzer."""

import shutil
import subprocess
import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from diskinsight.analyzers.docker import (
    DockerAnalyzer,
    count_dangling_images,
    parse_system_df,
)
from diskinsight.cancellation import CancellationToken, OperationCancelled
from diskinsight.models import InsightType, RecommendedAction
from diskinsight.sizes import GB, MB

SYSTEM_DF = """\
TYPE            TOTAL     ACTIVE    SIZE      RECLAIMABLE
Images          12        3         4.5GB     3.2GB (71%)
Containers      5         1         120MB     100MB (83%)
Local Volumes   4         2         2GB       1.5GB (75%)
Build Cache     30        0         800MB     800MB
"""

NOTHING_RECLAIMABLE = """\
TYPE            TOTAL     ACTIVE    SIZE      RECLAIMABLE
Images          2         2         1GB       0B (0%)
Containers      2         2         10kB      0B (0%)
Local Volumes   1         1         5MB       0B (0%)
"""


class TestParseSystemDf:
    def test_parses_all_sections(self):
        usage = parse_system_df(SYSTEM_DF)
        assert usage.images.reclaimable == "3.2GB"
        assert usage.images.reclaimable_bytes == int(3.2 * GB)
        assert usage.images.percent == 71
        assert usage.containers.reclaimable_bytes == 100 * MB
        assert usage.volumes.reclaimable_bytes == int(1.5 * GB)

    def test_lowercase_kilobytes(self):
        usage = parse_system_df(NOTHING_RECLAIMABLE)
        assert usage.containers.total == "10kB"
        assert usage.containers.reclaimable_bytes == 0

    def test_empty_output(self):
        usage = parse_system_df("")
        assert usage.images is None
        assert usage.containers is None
        assert usage.volumes is None

    def test_unrecognized_output(self):
        assert parse_system_df("permission denied while trying to connect").images is None


class TestCountDanglingImages:
    def test_counts_non_empty_lines(self):
        assert count_dangling_images("abc123\ndef456\n\n") == 2

    def test_empty(self):
        assert count_dangling_images("") == 0


class TestIsAvailable:
    @patch("diskinsight.analyzers.docker.subprocess.run")
    def test_available_when_version_succeeds(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        assert DockerAnalyzer().is_available is True
        args = mock_run.call_args
        assert args[0][0] == ["docker", "version"]
        assert args[1]["timeout"] == 5.0

    @patch("diskinsight.analyzers.docker.subprocess.run")
    def test_unavailable_on_nonzero_exit(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1)
        assert DockerAnalyzer().is_available is False

    @patch("diskinsight.analyzers.docker.subprocess.run")
    def test_unavailable_when_not_installed(self, mock_run):
        mock_run.side_effect = FileNotFoundError("docker")
        assert DockerAnalyzer().is_available is False

    @patch("diskinsight.analyzers.docker.subprocess.run")
    def test_unavailable_on_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="docker", timeout=5)
        assert DockerAnalyzer().is_available is False


class TestAnalyze:
    def test_reports_reclaimable_sections(self, token):
        analyzer = DockerAnalyzer()
        with patch.object(DockerAnalyzer, "_run_command", side_effect=[SYSTEM_DF, ""]):
            insights = analyzer.analyze(token)

        by_type = {i.type: i for i in insights}
        assert len(insights) == 3

        images = by_type[InsightType.CONTAINER_IMAGES]
        assert images.action == RecommendedAction.REVIEW
        assert images.cleanup_command == "docker image prune -a"
        assert images.path == "docker images"
        assert "71%" in images.description

        containers = by_type[InsightType.CONTAINER_CONTAINERS]
        assert containers.action == RecommendedAction.CLEAN
        assert containers.size_in_bytes == 100 * MB
        assert containers.cleanup_command == "docker container prune -f"

        volumes = by_type[InsightType.CONTAINER_VOLUMES]
        assert volumes.action == RecommendedAction.REVIEW
        assert volumes.cleanup_command == "docker volume prune -f"

    def test_dangling_images(self, token):
        analyzer = DockerAnalyzer()
        with patch.object(
            DockerAnalyzer, "_run_command", side_effect=[NOTHING_RECLAIMABLE, "a1\nb2\nc3\n"]
        ):
            insights = analyzer.analyze(token)

        assert len(insights) == 1
        dangling = insights[0]
        assert dangling.type == InsightType.CONTAINER_IMAGES
        assert dangling.description == "3 dangling image(s) can be removed"
        assert dangling.size_in_bytes == 0
        assert dangling.action == RecommendedAction.CLEAN
        assert dangling.cleanup_command == "docker image prune -f"

    def test_no_df_output_skips_dangling_query(self, token):
        analyzer = DockerAnalyzer()
        with patch.object(DockerAnalyzer, "_run_command", return_value="") as mock_cmd:
            assert analyzer.analyze(token) == []
        assert mock_cmd.call_count == 1

    def test_pre_cancelled_token(self, cancelled_token):
        with pytest.raises(OperationCancelled):
            DockerAnalyzer(command="definitely-not-a-real-binary").analyze(cancelled_token)


class TestRunCommand:
    def test_missing_binary_gives_empty_output(self, token):
        analyzer = DockerAnalyzer(command="definitely-not-a-real-binary")
        assert analyzer._run_command(["version"], token) == ""

    @pytest.mark.skipif(shutil.which("false") is None, reason="needs `false`")
    def test_nonzero_exit_gives_empty_output(self, token):
        assert DockerAnalyzer(command="false")._run_command([], token) == ""

    @pytest.mark.skipif(shutil.which("echo") is None, reason="needs `echo`")
    def test_returns_stdout(self, token):
        assert DockerAnalyzer(command="echo")._run_command(["hello"], token).strip() == "hello"

    @pytest.mark.skipif(shutil.which("sleep") is None, reason="needs `sleep`")
    def test_cancel_kills_running_process(self):
        token = CancellationToken()
        timer = threading.Timer(0.3, token.cancel)
        timer.start()
        started = time.monotonic()
        try:
            with pytest.raises(OperationCancelled):
                DockerAnalyzer(command="sleep")._run_command(["30"], token)
        finally:
            timer.cancel()
        assert time.monotonic() - started < 10
