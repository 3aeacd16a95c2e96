"""Framework schema registry - parse any supported version, dump the latest."""

from typing import Any

from src.dsl.versioning import SchemaRegistry, stamp_version
from src.frameworks.schemas import FrameworkDocument, FrameworkDslV1, FrameworkDslV2

FRAMEWORK_SCHEMAS = {
    1: FrameworkDslV1,
    2: FrameworkDslV2,
}

# v1 -> v2 changed nothing structurally
FRAMEWORK_MIGRATIONS = {
    1: stamp_version(2),
}

framework_registry: SchemaRegistry[FrameworkDocument] = SchemaRegistry(
    "framework",
    schemas=FRAMEWORK_SCHEMAS,
    migrations=FRAMEWORK_MIGRATIONS,
)


def parse_framework(input: Any) -> FrameworkDocument:
    """Parse YAML/JSON text or a decoded mapping into a latest-version Framework."""
    return framework_registry.parse(input)


def dump_framework(framework: FrameworkDocument) -> str:
    return framework_registry.dump(framework)


def get_latest_framework_version() -> int:
    return framework_registry.latest_version()
