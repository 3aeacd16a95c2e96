"""Prompt schema registry - parse any supported version, dump the latest."""

from typing import Any

from src.dsl.versioning import SchemaRegistry
from src.prompts.schemas import InputType, PromptDocument, PromptDslV1, PromptDslV2

PROMPT_SCHEMAS = {
    1: PromptDslV1,
    2: PromptDslV2,
}


def _migrate_v1_to_v2(data: dict[str, Any]) -> dict[str, Any]:
    """v1 ``variables`` become string-typed v2 ``inputs``."""
    migrated = {k: v for k, v in data.items() if k != "variables"}
    migrated["version"] = 2
    migrated["inputs"] = [
        {
            "name": var["name"],
            "type": InputType.STRING.value,
            "required": var.get("required", False),
            **{k: var[k] for k in ("description", "default") if var.get(k) is not None},
        }
        for var in data.get("variables") or []
    ]
    return migrated


PROMPT_MIGRATIONS = {
    1: _migrate_v1_to_v2,
}

prompt_registry: SchemaRegistry[PromptDocument] = SchemaRegistry(
    "prompt",
    schemas=PROMPT_SCHEMAS,
    migrations=PROMPT_MIGRATIONS,
)


def parse_prompt(input: Any) -> PromptDocument:
    """Parse YAML/JSON text or a decoded mapping into a latest-version Prompt."""
    return prompt_registry.parse(input)


def dump_prompt(prompt: PromptDocument) -> str:
    return prompt_registry.dump(prompt)


def get_latest_prompt_version() -> int:
    return prompt_registry.latest_version()
