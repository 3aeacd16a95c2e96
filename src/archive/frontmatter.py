"""Front-matter Markdown codec for single documents.

File shape:

    ---
    <YAML: every document field except the body field>
    ---
    <body field, verbatim>

The codec only splits and joins text. Validation and migration happen when
the merged raw content is handed to the document's schema registry.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import yaml
from pydantic import BaseModel

from src.dsl.serializer import canonical_data, dump_yaml_stable, load_yaml

logger = logging.getLogger(__name__)

DELIMITER = "---"


@dataclass
class FrontMatter:
    """A decoded front-matter file."""

    data: dict[str, Any]
    body: str

    def merge_body(self, body_field: str) -> dict[str, Any]:
        """Raw document content: front matter plus the body under body_field."""
        return {**self.data, body_field: self.body}


def _is_blank(line: str) -> bool:
    return line in ("", "\r")


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line


def to_text(document: BaseModel, body_field: str) -> str:
    """Encode a document as front-matter Markdown."""
    data = canonical_data(document)
    body = data.pop(body_field, "")
    if not isinstance(body, str):
        body = str(body)
    # A body starting with a blank line would lose it to the separator rule
    if body.startswith(("\n", "\r\n")):
        body = "\n" + body
    # safe_dump always ends with a newline, so the closing delimiter starts a line
    return f"{DELIMITER}\n{dump_yaml_stable(data)}{DELIMITER}\n{body}"


def from_text(text: str) -> Optional[FrontMatter]:
    """Split front-matter Markdown into its YAML mapping and body.

    Delimiter lines may end in ``\\n`` or ``\\r\\n``; the body keeps its own
    line endings verbatim.

    Returns None when the text is not a front-matter document: missing
    delimiters, undecodable YAML, or YAML that is not a mapping.
    """
    lines = text.split("\n")
    if _strip_cr(lines[0]) != DELIMITER:
        return None

    close_index = next(
        (i for i in range(1, len(lines)) if _strip_cr(lines[i]) == DELIMITER),
        None,
    )
    if close_index is None:
        return None

    block = "\n".join(_strip_cr(line) for line in lines[1:close_index])
    body_lines = lines[close_index + 1:]
    # One blank separator line after the block is not part of the body
    if len(body_lines) > 1 and _is_blank(body_lines[0]):
        body_lines = body_lines[1:]
    body = "\n".join(body_lines)

    try:
        data = load_yaml(block) if block.strip() else {}
    except yaml.YAMLError as e:
        logger.debug(f"Front matter is not valid YAML: {e}")
        return None

    if not isinstance(data, dict):
        return None

    return FrontMatter(data=data, body=body)
