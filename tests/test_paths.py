"""Tests for per-platform user directory resolution."""

from pathlib import Path

from diskinsight.paths import UserDirs


class TestForHome:
    def test_linux_layout(self, tmp_path):
        dirs = UserDirs.for_home(tmp_path)
        assert dirs.local_app_data == tmp_path / ".cache"
        assert dirs.app_data == tmp_path / ".config"
        assert dirs.windows is False

    def test_windows_layout(self, tmp_path):
        dirs = UserDirs.for_home(tmp_path, windows=True)
        assert dirs.local_app_data == tmp_path / "AppData" / "Local"
        assert dirs.app_data == tmp_path / "AppData" / "Roaming"
        assert dirs.windows is True

    def test_darwin_layout(self, tmp_path):
        dirs = UserDirs.for_home(tmp_path, darwin=True)
        assert dirs.local_app_data == tmp_path / "Library" / "Caches"
        assert dirs.app_data == tmp_path / "Library" / "Application Support"


class TestDetect:
    def test_linux_honours_xdg(self, monkeypatch, tmp_path):
        monkeypatch.setattr("diskinsight.paths.sys.platform", "linux")
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)

        dirs = UserDirs.detect()
        assert dirs.local_app_data == tmp_path / "cache"
        assert dirs.app_data == Path.home() / ".config"
        assert dirs.windows is False
