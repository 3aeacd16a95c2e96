"""Prompt document schemas.

A Prompt is a ``template`` with ``{{name}}`` placeholders plus the declared
inputs that fill them.

MIGRATION NOTES:
- v1 declared placeholders as ``variables`` (string-only, no type)
- v2 replaces them with typed ``inputs`` and adds enums, labels, tests,
  context, policies and tags
- The v1 -> v2 step lives in src/prompts/registry.py

All versions are strict: unknown keys are rejected.
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, JsonValue, PositiveInt

from src.dsl.fields import STRICT_DOCUMENT, DocumentId, JsonMap, NonEmptyStr, Slug


class InputType(str, Enum):
    """Value type accepted by a prompt input."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class PromptModel(BaseModel):
    """LLM the prompt was written for."""

    model_config = ConfigDict(extra="forbid")

    provider: NonEmptyStr
    name: NonEmptyStr


# ── v1 ───────────────────────────────────────────────────


class PromptVariableV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: NonEmptyStr
    required: bool = False
    description: Optional[str] = None
    default: Optional[str] = None


class PromptDslV1(BaseModel):
    """Prompt document, schema version 1."""

    model_config = STRICT_DOCUMENT

    version: Literal[1] = 1
    id: DocumentId
    slug: Optional[Slug] = None
    name: NonEmptyStr
    template: NonEmptyStr
    variables: list[PromptVariableV1] = Field(default_factory=list)
    model: Optional[PromptModel] = None
    metadata: Optional[JsonMap] = None
    framework_ref: Optional[str] = Field(default=None, alias="frameworkRef")


# ── v2 ───────────────────────────────────────────────────


class PromptInput(BaseModel):
    """A named value the template expects."""

    model_config = ConfigDict(extra="forbid")

    name: NonEmptyStr = Field(..., description="Placeholder name used as {{name}}")
    type: InputType = Field(default=InputType.STRING)
    required: bool = False
    ref: Optional[str] = Field(
        default=None,
        description="Key of an enums/labels group that supplies the choices",
    )
    description: Optional[str] = None
    default: JsonValue = None


class TestAssertions(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    contains: Optional[list[str]] = None
    not_contains: Optional[list[str]] = Field(default=None, alias="notContains")
    max_tokens: Optional[PositiveInt] = Field(default=None, alias="maxTokens")


class PromptTest(BaseModel):
    """An example invocation with expectations on the model output."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    # Keeps pytest from collecting this class
    __test__ = False

    name: NonEmptyStr
    with_: JsonMap = Field(default_factory=dict, alias="with")
    assert_: TestAssertions = Field(default_factory=TestAssertions, alias="assert")


class PromptDslV2(BaseModel):
    """Prompt document, schema version 2 (latest)."""

    model_config = STRICT_DOCUMENT

    version: Literal[2] = 2
    id: DocumentId = Field(..., description="Stable UUID, survives export/import")
    slug: Optional[Slug] = None
    name: Optional[NonEmptyStr] = None
    template: NonEmptyStr = Field(
        ...,
        description="Template text with {{name}} placeholders; the Markdown body in archives",
    )
    inputs: list[PromptInput] = Field(default_factory=list)
    model: Optional[PromptModel] = None
    enums: Optional[dict[str, list[str]]] = Field(
        default=None,
        description="Named choice lists: {group: [value, ...]}",
    )
    labels: Optional[dict[str, dict[str, str]]] = Field(
        default=None,
        description="Display labels per group: {group: {value: label}}",
    )
    metadata: Optional[JsonMap] = None
    tests: Optional[list[PromptTest]] = None
    context: Optional[JsonMap] = None
    policies: Optional[JsonMap] = None
    tags: list[str] = Field(default_factory=list)
    framework_ref: Optional[str] = Field(
        default=None,
        alias="frameworkRef",
        description="Weak reference to a Framework id; never resolved or validated",
    )


# Alias for the current version
PromptDocument = PromptDslV2

# Field carried as the Markdown body in front-matter files
PROMPT_BODY_FIELD = "template"


class PromptSummary(BaseModel):
    """Lightweight prompt info for listing endpoints."""

    id: str
    name: Optional[str] = None
    slug: Optional[str] = None
    order: int
    shared: bool
    framework_ref: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    input_count: int = 0


class RenderRequest(BaseModel):
    variables: dict[str, Any] = Field(default_factory=dict)


class RenderResponse(BaseModel):
    prompt_id: str
    text: str
    missing_required: list[str] = Field(default_factory=list)
