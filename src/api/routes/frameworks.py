"""API routes for Framework documents."""

import logging

from fastapi import APIRouter, HTTPException, Request

from src.archive.schemas import FrameworkEntry
from src.dsl.errors import DocumentError
from src.frameworks.registry import dump_framework, parse_framework
from src.frameworks.schemas import FrameworkSummary
from src.persistence.storage import get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/frameworks", tags=["frameworks"])


@router.get("", response_model=list[FrameworkSummary])
async def list_frameworks():
    """List stored frameworks in display order."""
    collection = await get_storage().get_collection()
    default_id = collection.settings.default_framework_id
    return [
        FrameworkSummary(
            id=f.id,
            name=f.content.name,
            slug=f.content.slug,
            order=f.order,
            is_default=f.id == default_id,
        )
        for f in sorted(collection.frameworks, key=lambda f: f.order)
    ]


@router.post("/parse")
async def parse_framework_text(request: Request):
    """Validate YAML/JSON text and return the latest-version document.

    Older versions are migrated; the canonical YAML is returned alongside.
    """
    text = (await request.body()).decode("utf-8", errors="replace")
    try:
        framework = parse_framework(text)
    except DocumentError as e:
        raise HTTPException(
            status_code=422,
            detail={"message": e.user_message, "error": str(e)},
        )
    return {
        "document": framework.model_dump(mode="json", by_alias=True, exclude_none=True),
        "yaml": dump_framework(framework),
    }


@router.get("/{framework_id}", response_model=FrameworkEntry)
async def get_framework(framework_id: str):
    """Get a stored framework by id."""
    collection = await get_storage().get_collection()
    framework = collection.get_framework(framework_id)
    if framework is None:
        raise HTTPException(
            status_code=404,
            detail=f"Framework '{framework_id}' not found",
        )
    return framework
