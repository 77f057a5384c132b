from __future__ import annotations

import io
import json

import pytest

from harvest.errors import SinkWriteError
from harvest.models import MetadataRecord
from harvest.sink import render_records, write_records, write_records_to_path


def _records():
    return {
        MetadataRecord(filepath="/data/b.dcm", patient_name="B^Bee", patient_id="00A123"),
        MetadataRecord(filepath="/data/a.dcm", patient_name="Ä^Umlaut", patient_id="0042"),
    }


def test_write_records_pretty_json():
    stream = io.BytesIO()

    written = write_records(_records(), stream)

    payload = stream.getvalue()
    assert written == len(payload)
    document = json.loads(payload.decode("utf-8"))
    assert document == [
        {"filepath": "/data/a.dcm", "patient_name": "Ä^Umlaut", "patient_id": "0042"},
        {"filepath": "/data/b.dcm", "patient_name": "B^Bee", "patient_id": "00A123"},
    ]
    assert b'\n  {\n    "filepath"' in payload
    assert '"patient_id": "00A123"' in payload.decode("utf-8")


def test_empty_collection_renders_empty_array():
    assert render_records([]) == b"[]\n"


def test_write_records_to_path(tmp_path):
    target = tmp_path / "out.json"

    write_records_to_path(_records(), target)

    assert len(json.loads(target.read_text(encoding="utf-8"))) == 2


def test_unwritable_destination_is_fatal(tmp_path):
    with pytest.raises(SinkWriteError):
        write_records_to_path(_records(), tmp_path / "no-such-dir" / "out.json")


class _FullDisk(io.BytesIO):
    def write(self, data):
        raise OSError(28, "No space left on device")


def test_stream_write_failure_is_fatal():
    with pytest.raises(SinkWriteError):
        write_records(_records(), _FullDisk())
