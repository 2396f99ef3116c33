"""
config.py
Settings for where the record files live (production vs. test directory) and logging.

Values are read from environment variables when ``Settings()`` is created, so
set them before importing. Stores never read these globals themselves: build a
``Settings`` and hand it to ``db.open_stores``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

# Backing file per entity (production names)
FILE_NAMES = {
    "customers": "customers.txt",
    "vehicles": "vehicles.txt",
    "services": "services.txt",
    "discounts": "discounts.txt",
    "history": "service_history.txt",
}


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    data_dir: Path = field(default_factory=lambda: Path(os.getenv("CAR_SERVICE_DATA_DIR", ".")))
    test_mode: bool = field(default_factory=lambda: _env_flag("CAR_SERVICE_TEST_MODE"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: str | None = field(default_factory=lambda: os.getenv("LOG_FILE") or None)

    def path_for(self, entity: str) -> Path:
        """
        Backing file for an entity key from FILE_NAMES.
        Test mode keeps the same encoding but moves every file to data_dir/tests/test_<name>.
        """
        name = FILE_NAMES[entity]
        if self.test_mode:
            return Path(self.data_dir) / "tests" / f"test_{name}"
        return Path(self.data_dir) / name


def settings_for_tests(data_dir: Path | str) -> Settings:
    return Settings(data_dir=Path(data_dir), test_mode=True, log_level="DEBUG", log_file=None)


settings = Settings()
