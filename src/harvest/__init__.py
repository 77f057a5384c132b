"""DICOM patient header harvesting."""

from .config import DecodeMode, HarvestConfig, get_default_config  # noqa: F401
from .core import harvest, run_harvest  # noqa: F401
from .decoder import read_header  # noqa: F401
from .errors import (  # noqa: F401
    DecodeFailure,
    DecodeFailureKind,
    HarvestError,
    HeaderDecodeError,
    RootNotTraversableError,
)
from .models import HarvestResult, MetadataRecord  # noqa: F401
