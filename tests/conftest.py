from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import pydicom
import pytest
from pydicom.dataset import FileDataset, FileMetaDataset


def _create_dicom(
    path: Path,
    *,
    patient_id: object = "PATIENT1",
    patient_name: object = "Test^Patient",
    uid_suffix: str = "1",
    pixel_bytes: int = 256,
) -> Path:
    """Write a small explicit VR little endian MR instance to *path*.

    Pass ``None`` for a patient field to leave it out of the dataset.
    """

    file_meta = FileMetaDataset()
    file_meta.MediaStorageSOPClassUID = "1.2.840.10008.5.1.4.1.1.4"
    file_meta.MediaStorageSOPInstanceUID = f"1.2.826.0.1.3680043.2.1125.{uid_suffix}"
    file_meta.TransferSyntaxUID = pydicom.uid.ExplicitVRLittleEndian

    ds = FileDataset(str(path), {}, file_meta=file_meta, preamble=b"\0" * 128)

    ds.SOPClassUID = file_meta.MediaStorageSOPClassUID
    ds.SOPInstanceUID = file_meta.MediaStorageSOPInstanceUID
    ds.Modality = "MR"
    if patient_name is not None:
        ds.PatientName = patient_name
    if patient_id is not None:
        ds.PatientID = patient_id
    ds.PatientBirthDate = "19700101"
    ds.StudyInstanceUID = "1.2.3.4.5"
    ds.SeriesInstanceUID = "1.2.3.4.5.6"
    if pixel_bytes:
        ds.add_new(0x7FE00010, "OB", b"\x01" * pixel_bytes)

    path.parent.mkdir(parents=True, exist_ok=True)
    ds.save_as(path, implicit_vr=False, little_endian=True)
    return path


@pytest.fixture
def make_dicom() -> Callable[..., Path]:
    return _create_dicom


@pytest.fixture
def write_junk() -> Callable[[Path, Optional[bytes]], Path]:
    def _write(path: Path, payload: Optional[bytes] = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload if payload is not None else b"definitely not a dicom file\n")
        return path

    return _write
