"""Archive packaging utilities."""

from .builder import ArchiveBuilder, ArchiveFormat, ArchiveSpec
from .runtime import RuntimeFetcher, RuntimeKind
from .utils import compute_sha256

__all__ = [
    "ArchiveBuilder",
    "ArchiveFormat",
    "ArchiveSpec",
    "RuntimeFetcher",
    "RuntimeKind",
    "compute_sha256",
]
