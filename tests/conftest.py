"""Shared fixtures for execsave tests."""

import json
from typing import Dict, List, Optional

import pytest

from execsave.config import ConfigLoader
from execsave.document import Workspace
from execsave.handler import Host
from execsave.logger import configure_logger, get_logger
from execsave.notifications import Notifier


class FakeFileSystem:
    """In-memory stat/chmod capability."""

    def __init__(self, modes: Optional[Dict[str, int]] = None):
        self.modes: Dict[str, int] = dict(modes or {})
        self.chmod_calls: List[tuple] = []
        self.stat_error: Optional[BaseException] = None
        self.chmod_error: Optional[BaseException] = None

    async def stat_mode(self, path: str) -> int:
        if self.stat_error is not None:
            raise self.stat_error
        if path not in self.modes:
            raise FileNotFoundError(2, "No such file or directory", path)
        return self.modes[path]

    async def chmod(self, path: str, mode: int) -> None:
        if self.chmod_error is not None:
            raise self.chmod_error
        self.chmod_calls.append((path, mode))
        self.modes[path] = mode


class RecordingNotifier(Notifier):
    """Notifier that remembers every message."""

    def __init__(self):
        self.infos: List[str] = []
        self.errors: List[str] = []

    async def show_info(self, message: str) -> None:
        self.infos.append(message)

    async def show_error(self, message: str) -> None:
        self.errors.append(message)


def _read_log_entries(log_dir) -> List[dict]:
    get_logger().flush()
    entries = []
    for path in sorted(log_dir.glob("*.jsonl")):
        for line in path.read_text(encoding="utf-8").splitlines():
            if line.strip():
                entries.append(json.loads(line))
    return entries


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep tests away from the real home config, env and log directory."""
    for var in (
        "EXECSAVE_ENABLED",
        "EXECSAVE_PERMISSION_STRATEGY",
        "EXECSAVE_SILENT",
        "EXECSAVE_SILENT_ERRORS",
    ):
        monkeypatch.delenv(var, raising=False)

    log_dir = tmp_path / "logs"
    configure_logger(level="TRACE", log_directory=str(log_dir))
    yield
    get_logger().close()


@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "logs"


@pytest.fixture
def log_entries(log_dir):
    """Callable returning every JSON-lines entry written so far."""
    return lambda: _read_log_entries(log_dir)


@pytest.fixture
def home_dir(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def fake_fs():
    return FakeFileSystem()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_host(fake_fs, notifier, home_dir):
    """Build a Host around the fakes with optional config overrides."""

    def _make(
        overrides: Optional[dict] = None,
        umask: int = 0o022,
        posix: bool = True,
        workspace: Optional[Workspace] = None,
        file_system=None,
    ) -> Host:
        return Host(
            file_system=file_system or fake_fs,
            notifier=notifier,
            config_loader=ConfigLoader(home_dir=str(home_dir), overrides=overrides),
            workspace=workspace or Workspace(),
            posix=posix,
            umask=umask,
        )

    return _make
