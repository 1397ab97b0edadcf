"""On-disk layout of the data directory."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

WAL_DIRNAME = "wal"
WAL_FILENAME = "microdose_sessions.wal"
STATE_FILENAME = "state.json"
ARCHIVE_FILENAME = "sessions.csv"
STRENGTH_SIGNAL_PATH = Path("strength") / "signal.json"
PROCESSED_SUFFIX = ".processed"


@dataclass(frozen=True)
class DataPaths:
    """Paths of every persisted file, relative to one data directory."""

    data_dir: Path

    @property
    def wal_dir(self) -> Path:
        return self.data_dir / WAL_DIRNAME

    @property
    def wal(self) -> Path:
        return self.wal_dir / WAL_FILENAME

    @property
    def state(self) -> Path:
        return self.wal_dir / STATE_FILENAME

    @property
    def archive(self) -> Path:
        return self.data_dir / ARCHIVE_FILENAME

    @property
    def strength_signal(self) -> Path:
        return self.data_dir / STRENGTH_SIGNAL_PATH

    def ensure_dirs(self) -> None:
        self.wal_dir.mkdir(parents=True, exist_ok=True)
