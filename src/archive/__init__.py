"""Archive synchronization: front-matter files in a zip plus a manifest."""

from src.archive.packager import MANIFEST_FILENAME, export_archive
from src.archive.quota import PLAN_LIMITS, PlanTier, check_quota
from src.archive.schemas import (
    Collection,
    FrameworkEntry,
    ImportMode,
    ImportResult,
    ManifestEntry,
    PromptEntry,
    SelectionState,
    Settings,
)

__all__ = [
    "Collection",
    "FrameworkEntry",
    "ImportMode",
    "ImportResult",
    "MANIFEST_FILENAME",
    "ManifestEntry",
    "PLAN_LIMITS",
    "PlanTier",
    "PromptEntry",
    "SelectionState",
    "Settings",
    "check_quota",
    "export_archive",
]
