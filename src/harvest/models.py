"""Record and result types produced by a harvest run."""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Dict, FrozenSet


@dataclass(frozen=True)
class MetadataRecord:
    filepath: str
    patient_name: str
    # PatientID is a DICOM "long string"; keep it as text so leading zeros survive.
    patient_id: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class HarvestResult:
    """Frozen record set plus counters describing the run.

    Counters are diagnostic only and are never written to the JSON document.
    """

    records: FrozenSet[MetadataRecord]
    files_discovered: int = 0
    traversal_errors: int = 0
    failures: Counter = field(default_factory=Counter)
    elapsed_seconds: float = 0.0

    @property
    def files_failed(self) -> int:
        return sum(self.failures.values())

    def metrics(self) -> dict:
        return {
            "files_discovered": self.files_discovered,
            "records": len(self.records),
            "files_failed": self.files_failed,
            "traversal_errors": self.traversal_errors,
            "failures": {str(getattr(kind, "value", kind)): count for kind, count in sorted(self.failures.items())},
            "elapsed_seconds": round(self.elapsed_seconds, 3),
        }
