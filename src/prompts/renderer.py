"""Fill a prompt template's ``{{name}}`` placeholders.

Values come from the caller first, then from each input's ``default``.
Placeholders with no value are left untouched so the result still shows
what is missing.
"""

import json
import re
from typing import Any, Optional

from src.prompts.schemas import PromptDocument

PLACEHOLDER_RE = re.compile(r"\{\{\s*([a-zA-Z0-9_.-]+)\s*\}\}")


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def find_placeholders(template: str) -> list[str]:
    """Placeholder names in order of first appearance."""
    seen: list[str] = []
    for match in PLACEHOLDER_RE.finditer(template):
        if match.group(1) not in seen:
            seen.append(match.group(1))
    return seen


def build_prompt(template: str, values: Optional[dict[str, Any]] = None) -> str:
    """Substitute every known placeholder in template."""
    if not values:
        return template

    def replace(match: re.Match) -> str:
        key = match.group(1)
        if key in values:
            return _format_value(values[key])
        return match.group(0)

    return PLACEHOLDER_RE.sub(replace, template)


def resolve_values(
    prompt: PromptDocument, provided: Optional[dict[str, Any]] = None
) -> dict[str, Any]:
    """Merge input defaults with caller-provided values (provided wins)."""
    values = {i.name: i.default for i in prompt.inputs if i.default is not None}
    values.update(provided or {})
    return values


def missing_required_inputs(
    prompt: PromptDocument, provided: Optional[dict[str, Any]] = None
) -> list[str]:
    values = resolve_values(prompt, provided)
    return [i.name for i in prompt.inputs if i.required and i.name not in values]


def compile_prompt(
    prompt: PromptDocument, variables: Optional[dict[str, Any]] = None
) -> str:
    """Render a prompt document's template with defaults and variables."""
    return build_prompt(prompt.template, resolve_values(prompt, variables))
