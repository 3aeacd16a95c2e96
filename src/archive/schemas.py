"""Collection envelope and archive schemas.

The collection is the whole stored state the archive engine reads and
replaces: ordered Frameworks, ordered Prompts (with a sharing flag) and
settings. Document payloads are always latest-version documents.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from src.frameworks.schemas import FrameworkDocument
from src.prompts.schemas import PromptDocument


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class FrameworkEntry(BaseModel):
    """A Framework as stored in the collection."""

    id: str
    content: FrameworkDocument
    order: int = Field(..., description="Display order; not required to be unique")
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)


class PromptEntry(BaseModel):
    """A Prompt as stored in the collection."""

    id: str
    content: PromptDocument
    order: int = Field(..., description="Display order; not required to be unique")
    shared: bool = True
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)


class Settings(BaseModel):
    default_framework_id: str = ""
    version: str = ""


class Collection(BaseModel):
    """Everything the archive engine reads and writes in one save."""

    frameworks: list[FrameworkEntry] = Field(default_factory=list)
    prompts: list[PromptEntry] = Field(default_factory=list)
    settings: Settings = Field(default_factory=Settings)

    def get_framework(self, framework_id: str) -> Optional[FrameworkEntry]:
        return next((f for f in self.frameworks if f.id == framework_id), None)

    def get_prompt(self, prompt_id: str) -> Optional[PromptEntry]:
        return next((p for p in self.prompts if p.id == prompt_id), None)

    def default_framework(self) -> Optional[FrameworkEntry]:
        """The configured default Framework, else the first one."""
        found = self.get_framework(self.settings.default_framework_id)
        if found is not None:
            return found
        return self.frameworks[0] if self.frameworks else None


class SelectionState(BaseModel):
    """The user's in-progress selection (the popup draft)."""

    user_prompt: str = ""
    selected_prompt_id: str = ""
    result_area: str = ""
    selected_model_id: str = ""


class ManifestEntry(BaseModel):
    """One prompt's order and sharing flag in an archive manifest."""

    id: str
    order: int
    shared: bool = True


class ImportMode(str, Enum):
    FULL = "full"
    DIFF = "diff"


class ImportResult(BaseModel):
    """Outcome of one archive import."""

    mode: ImportMode
    frameworks_imported: int = 0
    prompts_imported: int = 0
    skipped_files: list[str] = Field(
        default_factory=list,
        description="Files that matched a document pattern but failed to parse",
    )
    duplicate_ids: list[str] = Field(
        default_factory=list,
        description="Ids dropped because an earlier file or the live collection had them",
    )
    default_framework_id: Optional[str] = None
