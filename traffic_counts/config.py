"""Configuration models for the traffic count importer."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .database.database import database_url as default_database_url
from .pipeline.binning import TimeInterval


@dataclass
class ImportConfig:
    data_root: Optional[Path] = None
    database_url: str = field(default_factory=default_database_url)
    bin_interval: str = "15min"
    compute_aadv: bool = True

    def __post_init__(self) -> None:
        self.bin_interval = self.bin_interval.lower()
        if self.data_root is not None:
            self.data_root = Path(self.data_root)

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval.from_name(self.bin_interval)

    @classmethod
    def from_file(cls, path: Path) -> "ImportConfig":
        with Path(path).open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        return cls(
            data_root=data.get("data_root"),
            database_url=data.get("database_url") or default_database_url(),
            bin_interval=data.get("bin_interval", "15min"),
            compute_aadv=bool(data.get("compute_aadv", True)),
        )


def load_config(path: Optional[Path]) -> ImportConfig:
    if path is None:
        return ImportConfig()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    return ImportConfig.from_file(path)
