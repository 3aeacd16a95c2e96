"""Versioned schema registry with a forward migration chain.

Each document type (Framework, Prompt) owns one SchemaRegistry holding:
- one pydantic model per schema version
- one migration step per version transition (v -> v+1)

parse() detects the input version, validates it against that version's
model, then walks the chain up to the latest version, validating after
every step. Only the latest version is ever returned.

Steps are pure functions over plain dicts (wire names), so a step can
rename or restructure fields, not just stamp the new version number.
"""

import logging
from typing import Any, Callable, Generic, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from src.dsl.errors import SchemaError, UnsupportedVersionError
from src.dsl.serializer import dump_yaml_stable, load_yaml

logger = logging.getLogger(__name__)

# Documents written before the version field existed are version 1
DEFAULT_VERSION = 1

MigrationStep = Callable[[dict[str, Any]], dict[str, Any]]
LatestT = TypeVar("LatestT", bound=BaseModel)


def stamp_version(target: int) -> MigrationStep:
    """Build a migration step that only sets the version number."""

    def step(data: dict[str, Any]) -> dict[str, Any]:
        return {**data, "version": target}

    return step


class SchemaRegistry(Generic[LatestT]):
    """Schema versions and migration steps for one document type."""

    def __init__(
        self,
        kind: str,
        schemas: dict[int, type[BaseModel]],
        migrations: dict[int, MigrationStep],
    ):
        if not schemas:
            raise ValueError(f"{kind} registry needs at least one schema version")
        self.kind = kind
        self.schemas = dict(schemas)
        self.migrations = dict(migrations)
        self.latest = max(self.schemas)

    def latest_version(self) -> int:
        return self.latest

    def latest_schema(self) -> type[LatestT]:
        return self.schemas[self.latest]  # type: ignore[return-value]

    def decode(self, input: Any) -> dict[str, Any]:
        """Decode text input and check that the result is a mapping."""
        if isinstance(input, (bytes, bytearray)):
            try:
                input = input.decode("utf-8")
            except UnicodeDecodeError as e:
                raise SchemaError(f"{self.kind}: input is not valid UTF-8: {e}") from e
        if isinstance(input, str):
            try:
                input = load_yaml(input)
            except yaml.YAMLError as e:
                raise SchemaError(f"{self.kind}: input is not valid YAML/JSON: {e}") from e
        if isinstance(input, BaseModel):
            input = input.model_dump(by_alias=True, exclude_none=True)
        if not isinstance(input, dict):
            raise SchemaError(
                f"{self.kind}: expected a mapping, got {type(input).__name__}"
            )
        return dict(input)

    def detect_version(self, data: dict[str, Any]) -> int:
        version = data.get("version")
        if version is None:
            return DEFAULT_VERSION
        # bool is an int subclass; "version: true" is not a version
        if isinstance(version, bool) or not isinstance(version, int):
            raise SchemaError(f"{self.kind}: version must be an integer, got {version!r}")
        return version

    def validate(self, data: dict[str, Any], version: int) -> BaseModel:
        """Validate data against the schema of one specific version."""
        schema = self.schemas.get(version)
        if schema is None:
            raise UnsupportedVersionError(version, self.kind)
        try:
            return schema.model_validate({**data, "version": version})
        except ValidationError as e:
            raise SchemaError(
                f"{self.kind} v{version} validation failed: {e}",
                errors=e.errors(include_url=False),
            ) from e

    def parse(self, input: Any) -> LatestT:
        """Parse any supported input into a latest-version document.

        Raises:
            SchemaError: malformed text or a schema violation at any version
            UnsupportedVersionError: version newer than latest or without a step
        """
        data = self.decode(input)
        version = self.detect_version(data)

        if version > self.latest or version not in self.schemas:
            raise UnsupportedVersionError(version, self.kind)

        document = self.validate(data, version)
        while version < self.latest:
            step = self.migrations.get(version)
            if step is None:
                raise UnsupportedVersionError(version, self.kind)
            migrated = step(document.model_dump(by_alias=True, exclude_none=True))
            version += 1
            document = self.validate(migrated, version)
            logger.debug(f"Migrated {self.kind} to v{version}")

        return document  # type: ignore[return-value]

    def dump(self, document: LatestT) -> str:
        """Serialize a latest-version document to canonical YAML."""
        if not isinstance(document, self.latest_schema()):
            raise SchemaError(
                f"{self.kind}: only v{self.latest} documents can be dumped, "
                f"got {type(document).__name__}"
            )
        return dump_yaml_stable(document)
