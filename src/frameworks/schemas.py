"""Framework document schemas.

A Framework is free-form instructional text (``content``) that prompts can
associate with through their ``frameworkRef``. Two schema versions exist:

- v1: the original shape; files written before the ``version`` key existed
  are read as v1
- v2: current shape, identical fields with ``version: 2``

Both versions are strict: unknown keys are rejected.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from src.dsl.fields import STRICT_DOCUMENT, DocumentId, JsonMap, NonEmptyStr, Slug


class FrameworkDslV1(BaseModel):
    """Framework document, schema version 1."""

    model_config = STRICT_DOCUMENT

    version: Literal[1] = 1
    id: DocumentId = Field(..., description="Stable UUID, survives export/import")
    slug: Optional[Slug] = Field(default=None, description="URL-safe short name")
    name: NonEmptyStr = Field(..., description="Human-readable name")
    content: NonEmptyStr = Field(..., description="Instructional text")
    metadata: Optional[JsonMap] = None


class FrameworkDslV2(BaseModel):
    """Framework document, schema version 2 (latest)."""

    model_config = STRICT_DOCUMENT

    version: Literal[2] = 2
    id: DocumentId = Field(..., description="Stable UUID, survives export/import")
    slug: Optional[Slug] = Field(default=None, description="URL-safe short name")
    name: NonEmptyStr = Field(..., description="Human-readable name")
    content: NonEmptyStr = Field(
        ...,
        description="Instructional text; stored as the Markdown body in archives",
    )
    metadata: Optional[JsonMap] = Field(
        default=None,
        description="Free-form metadata, emitted with sorted keys",
    )


# Alias for the current version
FrameworkDocument = FrameworkDslV2

# Field carried as the Markdown body in front-matter files
FRAMEWORK_BODY_FIELD = "content"


class FrameworkSummary(BaseModel):
    """Lightweight framework info for listing endpoints."""

    id: str
    name: str
    slug: Optional[str] = None
    order: int
    is_default: bool = False
