"""Environment-variable-based configuration for the nightly rollup."""

from __future__ import annotations

import os

from microdose_engine.config import Config

MICRODOSE_CONFIG: Config = Config.from_env()
ROLLUP_HOUR: int = int(os.environ.get("ROLLUP_HOUR", "3"))
ROLLUP_MINUTE: int = int(os.environ.get("ROLLUP_MINUTE", "0"))
ROLLUP_CLEANUP: bool = os.environ.get("ROLLUP_CLEANUP", "").lower() in ("1", "true", "yes")
