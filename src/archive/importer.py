"""Merge an archive into the live collection.

Two policies:

- Full (replace): Frameworks in the archive replace the stored ones (only
  when at least one parsed), Prompts are replaced wholesale, and the last
  imported Framework becomes the default.
- Diff (additive): Framework files are ignored; Prompts whose id already
  exists are skipped so existing entries are never overwritten; new
  Prompts are ordered after the existing ones.

Error handling:
- a malformed document file is logged and skipped (the rest still imports)
- an unreadable archive (ImportFormatError) or a plan quota breach
  (QuotaExceededError) aborts before anything is written

Everything up to the single save_collection() call is in-memory work, so an
aborted import leaves storage untouched.
"""

import logging
import zipfile
import zlib
from typing import Any, Optional

from pydantic import BaseModel

from src.archive.frontmatter import from_text
from src.archive.packager import (
    find_framework_files,
    find_prompt_files,
    open_archive,
    read_manifest,
    read_text,
)
from src.archive.quota import check_quota
from src.archive.schemas import (
    FrameworkEntry,
    ImportMode,
    ImportResult,
    ManifestEntry,
    PromptEntry,
    utc_now_iso,
)
from src.dsl.errors import DocumentError
from src.dsl.versioning import SchemaRegistry
from src.frameworks.registry import framework_registry
from src.frameworks.schemas import FRAMEWORK_BODY_FIELD, FrameworkDocument
from src.persistence.storage import StorageService
from src.prompts.registry import prompt_registry
from src.prompts.schemas import PROMPT_BODY_FIELD, PromptDocument

logger = logging.getLogger(__name__)

# Defaults applied to imported prompt entries the manifest does not describe
IMPORT_DEFAULTS: dict[str, Any] = {
    "shared": True,
}

# Wire name of the prompt's weak framework reference
FRAMEWORK_REF_KEY = "frameworkRef"

# Corrupt, encrypted or non-UTF-8 entries
_ENTRY_READ_ERRORS = (
    UnicodeDecodeError,
    zipfile.BadZipFile,
    zlib.error,
    OSError,
    RuntimeError,
    NotImplementedError,
)


def _parse_document_file(
    zf: zipfile.ZipFile,
    name: str,
    registry: SchemaRegistry,
    body_field: str,
    overrides: Optional[dict[str, Any]] = None,
) -> Optional[BaseModel]:
    """Parse one archive entry; None (logged) when it is not a valid document."""
    try:
        text = read_text(zf, name)
    except _ENTRY_READ_ERRORS as e:
        logger.warning(f"Skipping {name}: cannot read entry: {e}")
        return None

    front_matter = from_text(text)
    if front_matter is None:
        logger.warning(f"Skipping {name}: not a front-matter document")
        return None

    raw = front_matter.merge_body(body_field)
    if overrides:
        if FRAMEWORK_REF_KEY in overrides:
            raw.pop("framework_ref", None)
        raw.update(overrides)

    try:
        return registry.parse(raw)
    except DocumentError as e:
        logger.warning(f"Skipping {name}: {e}")
        return None


def _collect_documents(
    zf: zipfile.ZipFile,
    names: list[str],
    registry: SchemaRegistry,
    body_field: str,
    result: ImportResult,
    overrides: Optional[dict[str, Any]] = None,
    existing_ids: Optional[set[str]] = None,
) -> list[Any]:
    """Parse names in order, dropping failures and repeated ids (first wins)."""
    documents: list[Any] = []
    seen: set[str] = set(existing_ids or ())

    for name in names:
        doc = _parse_document_file(zf, name, registry, body_field, overrides)
        if doc is None:
            result.skipped_files.append(name)
            continue
        if doc.id in seen:
            logger.info(f"Skipping {name}: id {doc.id} already imported or present")
            result.duplicate_ids.append(doc.id)
            continue
        seen.add(doc.id)
        documents.append(doc)

    return documents


def assign_full_order(
    prompts: list[PromptDocument], manifest: Optional[list[ManifestEntry]]
) -> list[tuple[PromptDocument, int, bool]]:
    """(prompt, order, shared) for a full import.

    Manifest-described prompts keep the manifest's order and shared flag;
    the rest are appended after the highest manifest order. Without a
    manifest, orders are 1..N in enumeration order.
    """
    if manifest is None:
        return [
            (p, i, IMPORT_DEFAULTS["shared"]) for i, p in enumerate(prompts, start=1)
        ]

    by_id = {m.id: m for m in manifest}
    listed_orders = [by_id[p.id].order for p in prompts if p.id in by_id]
    next_order = max(listed_orders, default=0)

    assigned = []
    for p in prompts:
        entry = by_id.get(p.id)
        if entry is not None:
            assigned.append((p, entry.order, entry.shared))
        else:
            next_order += 1
            assigned.append((p, next_order, IMPORT_DEFAULTS["shared"]))
    return assigned


def assign_diff_order(
    prompts: list[PromptDocument],
    manifest: Optional[list[ManifestEntry]],
    offset: int,
) -> list[tuple[PromptDocument, int, bool]]:
    """(prompt, order, shared) for a diff import, continuing after offset.

    Manifest-described prompts keep their relative manifest order
    (renumbered 1..k before the offset is added); others follow them in
    enumeration order.
    """
    if manifest is None:
        return [
            (p, offset + i, IMPORT_DEFAULTS["shared"])
            for i, p in enumerate(prompts, start=1)
        ]

    by_id = {m.id: m for m in manifest}
    listed = [p for p in prompts if p.id in by_id]
    unlisted = [p for p in prompts if p.id not in by_id]
    # sorted() is stable: equal manifest orders keep enumeration order
    listed.sort(key=lambda p: by_id[p.id].order)

    assigned = [
        (p, offset + i, by_id[p.id].shared) for i, p in enumerate(listed, start=1)
    ]
    base = offset + len(listed)
    assigned.extend(
        (p, base + i, IMPORT_DEFAULTS["shared"]) for i, p in enumerate(unlisted, start=1)
    )
    return assigned


class ArchiveImporter:
    """Imports archives into the collection held by a StorageService."""

    def __init__(self, storage: StorageService):
        self.storage = storage

    async def import_archive(
        self, data: bytes, plan: str, is_diff: bool = False
    ) -> ImportResult:
        """Import zip bytes under the full or diff policy.

        Args:
            data: Raw archive bytes
            plan: Plan tier consulted by the quota check
            is_diff: Additive import (new prompts only) instead of full replace

        Returns:
            ImportResult with counts, skipped files and dropped duplicates

        Raises:
            ImportFormatError: data is not a readable zip archive
            QuotaExceededError: more candidate prompts than the plan allows
        """
        zf = open_archive(data)
        with zf:
            if is_diff:
                return await self._import_diff(zf, plan)
            return await self._import_full(zf, plan)

    async def _import_full(self, zf: zipfile.ZipFile, plan: str) -> ImportResult:
        result = ImportResult(mode=ImportMode.FULL)
        current = await self.storage.get_collection()

        framework_files = find_framework_files(zf)
        frameworks: list[FrameworkDocument] = _collect_documents(
            zf, framework_files, framework_registry, FRAMEWORK_BODY_FIELD, result
        )

        # The last framework pushed becomes the default
        default_framework_id = (
            frameworks[-1].id if frameworks else current.settings.default_framework_id
        )

        prompt_files = find_prompt_files(zf)
        check_quota(plan, len(prompt_files))

        prompts: list[PromptDocument] = _collect_documents(
            zf,
            prompt_files,
            prompt_registry,
            PROMPT_BODY_FIELD,
            result,
            overrides=self._framework_ref_override(default_framework_id),
        )

        manifest = read_manifest(zf)
        if manifest is None:
            logger.info("No usable manifest, ordering prompts by file enumeration")
        ordered = assign_full_order(prompts, manifest)

        now = utc_now_iso()
        new_collection = current.model_copy(deep=True)
        if frameworks:
            new_collection.frameworks = [
                FrameworkEntry(id=fw.id, content=fw, order=i, created_at=now, updated_at=now)
                for i, fw in enumerate(frameworks, start=1)
            ]
            new_collection.settings.default_framework_id = default_framework_id
        new_collection.prompts = [
            PromptEntry(
                id=p.id, content=p, order=order, shared=shared, created_at=now, updated_at=now
            )
            for p, order, shared in ordered
        ]

        await self.storage.save_collection(new_collection)

        # The previously selected prompt may no longer exist
        selection = await self.storage.get_selection_state()
        if selection is not None:
            selection.selected_prompt_id = ""
            await self.storage.save_selection_state(selection)

        result.frameworks_imported = len(frameworks)
        result.prompts_imported = len(prompts)
        result.default_framework_id = default_framework_id or None
        logger.info(
            f"Full import: {result.frameworks_imported} frameworks, "
            f"{result.prompts_imported} prompts, {len(result.skipped_files)} skipped"
        )
        return result

    async def _import_diff(self, zf: zipfile.ZipFile, plan: str) -> ImportResult:
        result = ImportResult(mode=ImportMode.DIFF)
        current = await self.storage.get_collection()
        default_framework_id = current.settings.default_framework_id

        prompt_files = find_prompt_files(zf)
        # Quota counts candidates before existing ids are skipped
        check_quota(plan, len(prompt_files))

        prompts: list[PromptDocument] = _collect_documents(
            zf,
            prompt_files,
            prompt_registry,
            PROMPT_BODY_FIELD,
            result,
            overrides=self._framework_ref_override(default_framework_id),
            existing_ids={p.id for p in current.prompts},
        )

        offset = max((p.order for p in current.prompts), default=0)
        ordered = assign_diff_order(prompts, read_manifest(zf), offset)

        now = utc_now_iso()
        new_collection = current.model_copy(deep=True)
        new_collection.prompts.extend(
            PromptEntry(
                id=p.id, content=p, order=order, shared=shared, created_at=now, updated_at=now
            )
            for p, order, shared in ordered
        )

        await self.storage.save_collection(new_collection)

        result.prompts_imported = len(prompts)
        result.default_framework_id = default_framework_id or None
        logger.info(
            f"Diff import: {result.prompts_imported} new prompts, "
            f"{len(result.duplicate_ids)} existing or duplicate, "
            f"{len(result.skipped_files)} skipped"
        )
        return result

    @staticmethod
    def _framework_ref_override(default_framework_id: str) -> Optional[dict[str, Any]]:
        if not default_framework_id:
            return None
        return {FRAMEWORK_REF_KEY: default_framework_id}
