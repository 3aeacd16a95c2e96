"""Framework documents module."""

from src.frameworks.registry import (
    dump_framework,
    framework_registry,
    get_latest_framework_version,
    parse_framework,
)
from src.frameworks.schemas import (
    FRAMEWORK_BODY_FIELD,
    FrameworkDocument,
    FrameworkDslV1,
    FrameworkDslV2,
    FrameworkSummary,
)

__all__ = [
    "FRAMEWORK_BODY_FIELD",
    "FrameworkDocument",
    "FrameworkDslV1",
    "FrameworkDslV2",
    "FrameworkSummary",
    "dump_framework",
    "framework_registry",
    "get_latest_framework_version",
    "parse_framework",
]
