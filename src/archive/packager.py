"""Zip archive packing and file discovery.

Archive layout (root-level entries):
    framework-<uuid>.md         one per Framework (full exports only)
    <uuid>.md                   one per Prompt (prompt-<uuid>.md is also read)
    manifest.json               [{"id", "order", "shared"}, ...] for the Prompts

Discovery matches on basenames, so directory prefixes inside the zip are
ignored. Candidate files are enumerated in descending natural filename
order; importers dedupe with "first wins" against that order.
"""

import io
import json
import logging
import posixpath
import re
import zipfile
import zlib
from typing import Optional

from pydantic import ValidationError

from src.archive.frontmatter import to_text
from src.archive.schemas import Collection, ManifestEntry, PromptEntry
from src.dsl.errors import ImportFormatError
from src.dsl.fields import is_uuid
from src.frameworks.schemas import FRAMEWORK_BODY_FIELD
from src.prompts.schemas import PROMPT_BODY_FIELD

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"

_FRAMEWORK_FILE_RE = re.compile(r"^framework-(?P<id>.+)\.md$", re.IGNORECASE)
_PROMPT_FILE_RE = re.compile(r"^(?:prompt-)?(?P<id>.+)\.md$", re.IGNORECASE)
_DIGITS_RE = re.compile(r"(\d+)")


def framework_filename(framework_id: str) -> str:
    return f"framework-{framework_id}.md"


def prompt_filename(prompt_id: str) -> str:
    return f"{prompt_id}.md"


# ── Export ───────────────────────────────────────────────


def _prompts_in_scope(
    collection: Collection, prompt_ids: Optional[list[str]]
) -> list[PromptEntry]:
    if prompt_ids is None:
        return list(collection.prompts)
    wanted = set(prompt_ids)
    return [p for p in collection.prompts if p.id in wanted]


def build_manifest(
    prompts: list[PromptEntry], renumber: bool = False
) -> list[ManifestEntry]:
    """Manifest entries for prompts.

    With renumber, orders become 1..N by ascending existing order
    (ties keep collection order).
    """
    if not renumber:
        return [ManifestEntry(id=p.id, order=p.order, shared=p.shared) for p in prompts]
    ranked = sorted(prompts, key=lambda p: p.order)
    return [
        ManifestEntry(id=p.id, order=i, shared=p.shared)
        for i, p in enumerate(ranked, start=1)
    ]


def export_archive(
    collection: Collection, prompt_ids: Optional[list[str]] = None
) -> bytes:
    """Pack a collection into zip bytes.

    Args:
        collection: The live collection
        prompt_ids: Diff export - only these prompts, no frameworks, and
            manifest orders renumbered 1..N. None exports everything.

    Returns:
        Raw bytes of a zip archive
    """
    is_diff = prompt_ids is not None
    prompts = _prompts_in_scope(collection, prompt_ids)
    buffer = io.BytesIO()

    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        if not is_diff:
            for fw in collection.frameworks:
                zf.writestr(
                    framework_filename(fw.id),
                    to_text(fw.content, FRAMEWORK_BODY_FIELD),
                )

        for prompt in prompts:
            zf.writestr(
                prompt_filename(prompt.id),
                to_text(prompt.content, PROMPT_BODY_FIELD),
            )

        manifest = build_manifest(prompts, renumber=is_diff)
        zf.writestr(
            MANIFEST_FILENAME,
            json.dumps([m.model_dump() for m in manifest], ensure_ascii=False, indent=2),
        )

    frameworks_written = 0 if is_diff else len(collection.frameworks)
    logger.info(
        f"Exported archive ({'diff' if is_diff else 'full'}): "
        f"{frameworks_written} frameworks, {len(prompts)} prompts"
    )
    return buffer.getvalue()


# ── Import-side discovery ────────────────────────────────


def open_archive(data: bytes) -> zipfile.ZipFile:
    """Open zip bytes, raising ImportFormatError when they are not a zip."""
    try:
        return zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, OSError) as e:
        raise ImportFormatError(f"Archive is not a readable zip file: {e}") from e


def _basename(name: str) -> str:
    return posixpath.basename(name.replace("\\", "/"))


def _natural_key(name: str) -> list:
    return [
        (0, int(part), "") if part.isdigit() else (1, 0, part.casefold())
        for part in _DIGITS_RE.split(name)
        if part
    ]


def enumeration_order(names: list[str]) -> list[str]:
    """Descending natural order on basenames, full name as tie-break."""
    return sorted(
        names,
        key=lambda n: (_natural_key(_basename(n)), n),
        reverse=True,
    )


def _file_entries(zf: zipfile.ZipFile) -> list[str]:
    # A zip may repeat a name; count each name once
    return list(dict.fromkeys(info.filename for info in zf.infolist() if not info.is_dir()))


def framework_id_from_name(name: str) -> Optional[str]:
    """Document id when name is a framework file, else None."""
    match = _FRAMEWORK_FILE_RE.match(_basename(name))
    if match and is_uuid(match.group("id")):
        return match.group("id")
    return None


def prompt_id_from_name(name: str) -> Optional[str]:
    """Document id when name is a prompt file, else None."""
    if _FRAMEWORK_FILE_RE.match(_basename(name)):
        return None
    match = _PROMPT_FILE_RE.match(_basename(name))
    if match and is_uuid(match.group("id")):
        return match.group("id")
    return None


def find_framework_files(zf: zipfile.ZipFile) -> list[str]:
    """Framework entry names in enumeration order."""
    return enumeration_order(
        [n for n in _file_entries(zf) if framework_id_from_name(n) is not None]
    )


def find_prompt_files(zf: zipfile.ZipFile) -> list[str]:
    """Prompt entry names in enumeration order."""
    return enumeration_order(
        [n for n in _file_entries(zf) if prompt_id_from_name(n) is not None]
    )


def read_text(zf: zipfile.ZipFile, name: str) -> str:
    return zf.read(name).decode("utf-8-sig")


def read_manifest(zf: zipfile.ZipFile) -> Optional[list[ManifestEntry]]:
    """Manifest entries, or None when absent or unreadable."""
    name = next(
        (n for n in _file_entries(zf) if _basename(n) == MANIFEST_FILENAME),
        None,
    )
    if name is None:
        return None

    try:
        raw = json.loads(read_text(zf, name))
    except (UnicodeDecodeError, json.JSONDecodeError, zipfile.BadZipFile, zlib.error) as e:
        logger.warning(f"Ignoring unreadable manifest {name}: {e}")
        return None

    if not isinstance(raw, list):
        logger.warning(f"Ignoring manifest {name}: expected a JSON array")
        return None

    try:
        return [ManifestEntry.model_validate(item) for item in raw]
    except ValidationError as e:
        logger.warning(f"Ignoring manifest {name}: {e}")
        return None
