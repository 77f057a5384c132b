"""Header decoding for a single DICOM file."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Optional

import pydicom
from pydicom.dataset import Dataset
from pydicom.errors import InvalidDicomError
from pydicom.filereader import read_partial
from pydicom.multival import MultiValue
from pydicom.tag import BaseTag, Tag
from pydicom.valuerep import PersonName

from .config import DecodeMode
from .errors import DecodeFailure, DecodeFailureKind, HeaderDecodeError
from .models import MetadataRecord


PATIENT_NAME_TAG = Tag(0x0010, 0x0010)
PATIENT_ID_TAG = Tag(0x0010, 0x0020)
REQUIRED_TAGS = (PATIENT_NAME_TAG, PATIENT_ID_TAG)


def _past_required_fields(tag: BaseTag, vr: Optional[str], length: int) -> bool:
    # Top-level elements are stored in ascending tag order, so nothing after
    # PatientID can still hold one of the required fields.
    return tag > PATIENT_ID_TAG


def _fail(path: Path, kind: DecodeFailureKind, detail: str) -> HeaderDecodeError:
    return HeaderDecodeError(path, DecodeFailure(kind=kind, detail=detail))


def _read_dataset(path: Path, mode: DecodeMode) -> Dataset:
    try:
        fp = open(path, "rb")
    except OSError as exc:
        raise _fail(path, DecodeFailureKind.OPEN_FAILED, exc.strerror or str(exc)) from exc

    with fp:
        try:
            if mode is DecodeMode.FULL:
                return pydicom.dcmread(fp)
            return read_partial(
                fp,
                stop_when=_past_required_fields,
                specific_tags=list(REQUIRED_TAGS),
            )
        except InvalidDicomError as exc:
            raise _fail(path, DecodeFailureKind.INVALID_CONTAINER, str(exc)) from exc
        except Exception as exc:
            # pydicom surfaces truncated or corrupt data as assorted exception types
            raise _fail(path, DecodeFailureKind.INVALID_CONTAINER, f"{type(exc).__name__}: {exc}") from exc


def value_as_text(value: object) -> str:
    """Render a DICOM element value as text, the way it is stored in the header."""

    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        raise TypeError("binary value")
    if isinstance(value, str):
        return value
    if isinstance(value, PersonName):
        return str(value)
    if isinstance(value, (MultiValue, list, tuple)):
        return "\\".join(value_as_text(item) for item in value)
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    raise TypeError(f"unsupported value type {type(value).__name__}")


def _field_text(path: Path, dataset: Dataset, tag: BaseTag, keyword: str) -> str:
    if tag not in dataset:
        raise _fail(path, DecodeFailureKind.MISSING_FIELD, f"{keyword} {tag} not present")
    try:
        value = dataset[tag].value
        return value_as_text(value)
    except Exception as exc:
        raise _fail(path, DecodeFailureKind.FIELD_NOT_TEXT, f"{keyword} {tag}: {exc}") from exc


def path_as_text(path: Path) -> str:
    """Return *path* as text, rejecting names that are not valid UTF-8."""

    text = str(path)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise _fail(path, DecodeFailureKind.PATH_NOT_TEXT, "path is not valid UTF-8") from exc
    return text


def read_header(path: Path, mode: DecodeMode = DecodeMode.BOUNDED) -> MetadataRecord:
    """Decode *path* and return its patient name and id.

    ``BOUNDED`` stops parsing right after PatientID and keeps only the two
    required elements; ``FULL`` reads the whole file including pixel data.
    Both produce the same values for a valid file. Any problem is raised as
    :class:`HeaderDecodeError` with a failure kind.
    """

    path = Path(path)
    dataset = _read_dataset(path, mode)
    patient_name = _field_text(path, dataset, PATIENT_NAME_TAG, "PatientName")
    patient_id = _field_text(path, dataset, PATIENT_ID_TAG, "PatientID")
    filepath = path_as_text(path)
    return MetadataRecord(filepath=filepath, patient_name=patient_name, patient_id=patient_id)
