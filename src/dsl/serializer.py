"""YAML loading and canonical dumping for document payloads.

YAML is a superset of JSON, so one loader handles both text formats.

Canonical output rules:
- Model fields are emitted in schema declaration order
- Free-form mappings (metadata, enums, labels, ...) are emitted with sorted keys
- None-valued fields are omitted
Repeated dumps of equal documents are therefore byte-identical.
"""

from enum import Enum
from typing import Any

import yaml
from pydantic import BaseModel


def load_yaml(text: str) -> Any:
    """Decode YAML or JSON text. Raises yaml.YAMLError on malformed input."""
    return yaml.safe_load(text)


def _canonical_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return canonical_data(value)
    if isinstance(value, dict):
        return {str(k): _canonical_value(value[k]) for k in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [_canonical_value(v) for v in value]
    return value


def canonical_data(model: BaseModel) -> dict[str, Any]:
    """Convert a model into plain data with a fixed key order.

    Keys use the wire names (aliases) and follow field declaration order.
    """
    data: dict[str, Any] = {}
    for name, field in type(model).model_fields.items():
        value = getattr(model, name)
        if value is None:
            continue
        data[field.alias or name] = _canonical_value(value)
    return data


def dump_yaml_stable(data: Any) -> str:
    """Dump data to YAML, keeping the key order of the given mappings.

    BaseModel instances are converted with canonical_data() first.
    """
    if isinstance(data, BaseModel):
        data = canonical_data(data)
    return yaml.safe_dump(
        data,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=4096,
    )
