"""JSON output for harvested records."""

from __future__ import annotations

import json
from pathlib import Path
from typing import BinaryIO, Iterable, List

from .errors import SerializationError, SinkWriteError
from .models import MetadataRecord


def render_records(records: Iterable[MetadataRecord]) -> bytes:
    """Serialize *records* as an indented JSON array, sorted by file path."""

    rows: List[dict] = [record.to_dict() for record in sorted(records, key=lambda r: (r.filepath, r.patient_id))]
    try:
        text = json.dumps(rows, indent=2, ensure_ascii=False)
        return (text + "\n").encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Failed to serialize records: {exc}") from exc


def write_records(records: Iterable[MetadataRecord], stream: BinaryIO) -> int:
    """Write the JSON document to *stream* and flush it. Returns bytes written."""

    payload = render_records(records)
    try:
        stream.write(payload)
        stream.flush()
    except OSError as exc:
        raise SinkWriteError(f"Failed to write output: {exc}") from exc
    return len(payload)


def write_records_to_path(records: Iterable[MetadataRecord], path: Path) -> int:
    payload = render_records(records)
    try:
        with open(path, "wb") as fh:
            fh.write(payload)
            fh.flush()
    except OSError as exc:
        raise SinkWriteError(f"Failed to write output to {path}: {exc}") from exc
    return len(payload)
