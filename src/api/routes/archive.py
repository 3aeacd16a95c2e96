"""API routes for archive export and import.

Import and export share one lock: two concurrent imports would each read
the same stored collection and the second save would drop the first.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import Response

from src import config
from src.archive.importer import ArchiveImporter
from src.archive.packager import export_archive
from src.archive.quota import prompt_limit
from src.archive.schemas import ImportResult
from src.dsl.errors import ArchiveError, ImportFormatError, QuotaExceededError
from src.persistence.storage import get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/archive", tags=["archive"])

_archive_lock = asyncio.Lock()

ARCHIVE_MEDIA_TYPE = "application/zip"


def _error_status(error: ArchiveError) -> int:
    if isinstance(error, QuotaExceededError):
        return 403
    if isinstance(error, ImportFormatError):
        return 400
    return 500


@router.get("/export")
async def export_collection(
    prompt_ids: Optional[list[str]] = Query(
        None,
        description="Diff export: only these prompts, no frameworks",
    ),
):
    """Download the collection (or a prompt subset) as a zip archive."""
    async with _archive_lock:
        collection = await get_storage().get_collection()
        data = export_archive(collection, prompt_ids=prompt_ids)

    filename = "promptops-diff.zip" if prompt_ids is not None else "promptops.zip"
    return Response(
        content=data,
        media_type=ARCHIVE_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=ImportResult)
async def import_collection(
    request: Request,
    diff: bool = Query(False, description="Add new prompts only, keep everything else"),
):
    """Import a zip archive sent as the raw request body."""
    data = await request.body()
    if not data:
        raise HTTPException(status_code=400, detail="Request body must be a zip archive")

    plan = config.PLAN
    try:
        prompt_limit(plan)
    except ValueError:
        logger.error(f"PROMPTOPS_PLAN is not a known plan tier: {plan}")
        raise HTTPException(status_code=500, detail="Plan tier is misconfigured")

    importer = ArchiveImporter(get_storage())
    try:
        async with _archive_lock:
            result = await importer.import_archive(data, plan=plan, is_diff=diff)
    except ArchiveError as e:
        logger.warning(f"Archive import failed: {e}")
        raise HTTPException(
            status_code=_error_status(e),
            detail={"message": e.user_message, "error": str(e)},
        )

    return result
