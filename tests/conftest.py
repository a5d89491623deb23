from datetime import datetime, timezone
from pathlib import Path
from typing import List

import pytest

from sessionlog import Defaults, Registry
from sessionlog.files import FileManager


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "logs"


@pytest.fixture
def registry(log_dir, clock):
    reg = Registry(Defaults(directory=str(log_dir)), files=FileManager(clock=clock))
    yield reg
    reg.close()


@pytest.fixture
def read_log():
    """Return every line of every .log file under a directory, files in name order."""

    def _read(directory) -> List[str]:
        lines: List[str] = []
        for path in sorted(Path(directory).glob("*.log")):
            lines.extend(path.read_text(encoding="utf-8").splitlines())
        return lines

    return _read
