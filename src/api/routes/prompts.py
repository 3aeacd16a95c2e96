"""API routes for Prompt documents."""

import logging

from fastapi import APIRouter, HTTPException, Request

from src.archive.schemas import PromptEntry
from src.dsl.errors import DocumentError
from src.persistence.storage import get_storage
from src.prompts.registry import dump_prompt, parse_prompt
from src.prompts.renderer import compile_prompt, missing_required_inputs
from src.prompts.schemas import PromptSummary, RenderRequest, RenderResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/prompts", tags=["prompts"])


async def _get_or_404(prompt_id: str) -> PromptEntry:
    collection = await get_storage().get_collection()
    prompt = collection.get_prompt(prompt_id)
    if prompt is None:
        raise HTTPException(
            status_code=404,
            detail=f"Prompt '{prompt_id}' not found",
        )
    return prompt


@router.get("", response_model=list[PromptSummary])
async def list_prompts(shared_only: bool = False):
    """List stored prompts in display order."""
    collection = await get_storage().get_collection()
    prompts = sorted(collection.prompts, key=lambda p: p.order)
    if shared_only:
        prompts = [p for p in prompts if p.shared]
    return [
        PromptSummary(
            id=p.id,
            name=p.content.name,
            slug=p.content.slug,
            order=p.order,
            shared=p.shared,
            framework_ref=p.content.framework_ref,
            tags=p.content.tags,
            input_count=len(p.content.inputs),
        )
        for p in prompts
    ]


@router.post("/parse")
async def parse_prompt_text(request: Request):
    """Validate YAML/JSON text and return the latest-version document."""
    text = (await request.body()).decode("utf-8", errors="replace")
    try:
        prompt = parse_prompt(text)
    except DocumentError as e:
        raise HTTPException(
            status_code=422,
            detail={"message": e.user_message, "error": str(e)},
        )
    return {
        "document": prompt.model_dump(mode="json", by_alias=True, exclude_none=True),
        "yaml": dump_prompt(prompt),
    }


@router.get("/{prompt_id}", response_model=PromptEntry)
async def get_prompt(prompt_id: str):
    """Get a stored prompt by id."""
    return await _get_or_404(prompt_id)


@router.post("/{prompt_id}/render", response_model=RenderResponse)
async def render_prompt(prompt_id: str, body: RenderRequest):
    """Fill the prompt template with input defaults and the given variables."""
    entry = await _get_or_404(prompt_id)
    return RenderResponse(
        prompt_id=prompt_id,
        text=compile_prompt(entry.content, body.variables),
        missing_required=missing_required_inputs(entry.content, body.variables),
    )
