"""Prompt documents module."""

from src.prompts.registry import (
    dump_prompt,
    get_latest_prompt_version,
    parse_prompt,
    prompt_registry,
)
from src.prompts.renderer import build_prompt, compile_prompt
from src.prompts.schemas import (
    PROMPT_BODY_FIELD,
    InputType,
    PromptDocument,
    PromptDslV1,
    PromptDslV2,
    PromptInput,
    PromptSummary,
)

__all__ = [
    "PROMPT_BODY_FIELD",
    "InputType",
    "PromptDocument",
    "PromptDslV1",
    "PromptDslV2",
    "PromptInput",
    "PromptSummary",
    "build_prompt",
    "compile_prompt",
    "dump_prompt",
    "get_latest_prompt_version",
    "parse_prompt",
    "prompt_registry",
]
