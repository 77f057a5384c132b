"""Worker logic for parsing DICOM files."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import DecodeMode
from .decoder import read_header
from .errors import DecodeFailure, HeaderDecodeError
from .models import MetadataRecord


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileOutcome:
    """Result of one file. Exactly one of ``record`` and ``failure`` is set."""

    path: str
    record: Optional[MetadataRecord] = None
    failure: Optional[DecodeFailure] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


def extract_file(path: Path, mode: DecodeMode = DecodeMode.BOUNDED) -> FileOutcome:
    """Decode one file, converting any per-file failure into a logged outcome.

    Must stay a module-level function so it can be shipped to a process pool.
    """

    try:
        record = read_header(path, mode)
    except HeaderDecodeError as exc:
        logger.debug("failed to parse file: %s: %s", exc.path, exc.failure)
        return FileOutcome(path=exc.path, failure=exc.failure)
    return FileOutcome(path=record.filepath, record=record)
