"""Shared machinery for versioned document schemas."""

from src.dsl.errors import (
    ArchiveError,
    DocumentError,
    ImportFormatError,
    QuotaExceededError,
    SchemaError,
    UnsupportedVersionError,
)
from src.dsl.serializer import canonical_data, dump_yaml_stable, load_yaml
from src.dsl.versioning import SchemaRegistry, stamp_version

__all__ = [
    "ArchiveError",
    "DocumentError",
    "ImportFormatError",
    "QuotaExceededError",
    "SchemaError",
    "SchemaRegistry",
    "UnsupportedVersionError",
    "canonical_data",
    "dump_yaml_stable",
    "load_yaml",
    "stamp_version",
]
