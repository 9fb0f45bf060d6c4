"""Shared fixtures for diskinsight tests."""

from pathlib import Path

import pytest

from diskinsight.cancellation import CancellationToken
from diskinsight.paths import UserDirs


@pytest.fixture(autouse=True)
def no_gopath(monkeypatch):
    monkeypatch.delenv("GOPATH", raising=False)


@pytest.fixture
def token():
    return CancellationToken()


@pytest.fixture
def cancelled_token():
    t = CancellationToken()
    t.cancel()
    return t


@pytest.fixture
def home_dirs(tmp_path):
    """POSIX-style user directories rooted at tmp_path."""
    return UserDirs.for_home(tmp_path)


@pytest.fixture
def make_sparse():
    """Create a sparse file of an exact logical size without writing data."""

    def _make(path: Path, size: int) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.truncate(size)
        return path

    return _make
