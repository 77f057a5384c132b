"""Failure kinds and exceptions raised while harvesting DICOM headers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DecodeFailureKind(str, Enum):
    INVALID_CONTAINER = "invalid_container"
    MISSING_FIELD = "missing_field"
    FIELD_NOT_TEXT = "field_not_text"
    PATH_NOT_TEXT = "path_not_text"
    OPEN_FAILED = "open_failed"


class TraversalFailureKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    VANISHED = "vanished"
    OTHER = "other"


@dataclass(frozen=True)
class DecodeFailure:
    """Why a single file produced no record."""

    kind: DecodeFailureKind
    detail: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.detail}"


@dataclass(frozen=True)
class TraversalEntryError:
    """An entry the walker dropped. Reported, never raised."""

    kind: TraversalFailureKind
    path: str
    detail: str

    @classmethod
    def from_os_error(cls, path: object, exc: OSError) -> "TraversalEntryError":
        if isinstance(exc, PermissionError):
            kind = TraversalFailureKind.PERMISSION_DENIED
        elif isinstance(exc, FileNotFoundError):
            kind = TraversalFailureKind.VANISHED
        else:
            kind = TraversalFailureKind.OTHER
        return cls(kind=kind, path=str(path), detail=exc.strerror or str(exc))

    def __str__(self) -> str:
        return f"{self.path}: {self.detail}"


class HeaderDecodeError(Exception):
    """Raised by the header decoder when a file yields no record."""

    def __init__(self, path: object, failure: DecodeFailure) -> None:
        self.path = str(path)
        self.failure = failure
        super().__init__(f"{self.path}: {failure}")

    def __reduce__(self):
        return (type(self), (self.path, self.failure))

    @property
    def kind(self) -> DecodeFailureKind:
        return self.failure.kind


class HarvestError(RuntimeError):
    """Fatal error that aborts the whole run."""


class RootNotTraversableError(HarvestError):
    def __init__(self, root: object, reason: str) -> None:
        self.root = str(root)
        super().__init__(f"Cannot traverse input root {self.root}: {reason}")


class SinkWriteError(HarvestError):
    """Raised when the JSON document cannot be written or flushed."""


class SerializationError(HarvestError):
    """Raised when records cannot be rendered as JSON."""


class HarvestTimeoutError(HarvestError):
    def __init__(self, timeout_seconds: float, pending: int) -> None:
        self.timeout_seconds = timeout_seconds
        self.pending = pending
        super().__init__(f"Harvest timed out after {timeout_seconds:g}s with {pending} file(s) still in flight")
