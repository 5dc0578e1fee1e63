import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

# Ensure project root is on path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kvconf.store import ConfigStore, StoreOptions
from kvconf.storage import MemoryBackend


class RecordingReporter:
    """Collects (level, message) pairs instead of logging them."""

    def __init__(self):
        self.records: List[Tuple[str, str]] = []

    def __call__(self, level: str, message: str) -> None:
        self.records.append((level, message))

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [m for lvl, m in self.records if level is None or lvl == level]


@pytest.fixture(scope="session")
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture()
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "app.conf"


@pytest.fixture()
def write_config(config_path: Path):
    """Write raw text to the config file and return its path."""
    def _write(text: str) -> Path:
        config_path.write_text(text, encoding="utf-8")
        return config_path
    return _write


@pytest.fixture()
def store(reporter: RecordingReporter) -> ConfigStore:
    # Memory-only store; nothing is persisted until it is bound to a file
    return ConfigStore(reporter=reporter)


@pytest.fixture()
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture()
def materializing_store(reporter: RecordingReporter) -> ConfigStore:
    return ConfigStore(options=StoreOptions(materialize_defaults=True), reporter=reporter)
