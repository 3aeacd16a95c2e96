"""Field types shared by the Framework and Prompt schemas."""

import re
import uuid
from typing import Annotated

from pydantic import AfterValidator, ConfigDict, JsonValue, StringConstraints

SLUG_PATTERN = r"^[a-z0-9][a-z0-9_-]*$"

_SLUG_RE = re.compile(SLUG_PATTERN)


def _check_uuid(value: str) -> str:
    try:
        uuid.UUID(value)
    except ValueError as e:
        raise ValueError(f"'{value}' is not a valid UUID") from e
    return value


def is_uuid(value: str) -> bool:
    """Return True when value parses as a UUID."""
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def is_slug(value: str) -> bool:
    return bool(_SLUG_RE.match(value))


# Kept as str so ids round-trip through YAML byte-for-byte
DocumentId = Annotated[str, AfterValidator(_check_uuid)]

Slug = Annotated[str, StringConstraints(pattern=SLUG_PATTERN)]

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]

# Free-form maps hold JSON-compatible values only (no YAML bytes, sets or dates)
JsonMap = dict[str, JsonValue]

# Documents reject unknown keys at every version
STRICT_DOCUMENT = ConfigDict(extra="forbid", populate_by_name=True)
