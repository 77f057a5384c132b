"""Configuration models for header harvesting."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


def _default_max_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


class DecodeMode(str, Enum):
    BOUNDED = "bounded"
    FULL = "full"


class HarvestConfig(BaseModel):
    input_root: Path
    decode_mode: DecodeMode = DecodeMode.BOUNDED
    max_workers: int = Field(
        default_factory=_default_max_workers,
        ge=1,
        le=128,
        description="Number of concurrent header decodes",
    )
    max_in_flight: Optional[int] = Field(
        default=None,
        ge=1,
        description="Upper bound on submitted but unfinished files (defaults to 4x max_workers)",
    )
    use_process_pool: bool = Field(
        default=False,
        description="Decode in a ProcessPoolExecutor instead of threads",
    )
    follow_symlinks: bool = False
    scan_workers: int = Field(default=8, ge=1, le=64)
    timeout_seconds: Optional[float] = Field(default=None, gt=0)

    def resolved_max_in_flight(self) -> int:
        return self.max_in_flight or self.max_workers * 4


def get_default_config(input_root: Path) -> HarvestConfig:
    """Build a config for *input_root* honouring ``HARVEST_*`` environment overrides."""

    values: dict = {"input_root": input_root}
    workers = os.getenv("HARVEST_MAX_WORKERS")
    if workers:
        values["max_workers"] = int(workers)
    mode = os.getenv("HARVEST_DECODE_MODE")
    if mode:
        values["decode_mode"] = DecodeMode(mode.lower())
    values["use_process_pool"] = os.getenv("HARVEST_PROCESS_POOL", "false").lower() == "true"
    values["follow_symlinks"] = os.getenv("HARVEST_FOLLOW_SYMLINKS", "false").lower() == "true"
    return HarvestConfig(**values)
