#!/usr/bin/env python3
"""Export, import and validate PromptOps documents from the command line.

Works against the SQLite store at PROMPTOPS_STORAGE_PATH.

Usage:
    # Full export of every framework and prompt
    python scripts/archive_tool.py export backup.zip

    # Diff export of selected prompts
    python scripts/archive_tool.py export picks.zip --prompt-id <uuid> --prompt-id <uuid>

    # Replace the stored collection from an archive
    python scripts/archive_tool.py import backup.zip --plan pro

    # Add only new prompts from an archive
    python scripts/archive_tool.py import picks.zip --diff

    # Validate a single document (front-matter .md or YAML/JSON)
    python scripts/archive_tool.py validate prompt.md --kind prompt
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src import config
from src.archive.frontmatter import from_text
from src.archive.importer import ArchiveImporter
from src.archive.packager import export_archive
from src.dsl.errors import ArchiveError, DocumentError
from src.frameworks.registry import dump_framework, parse_framework
from src.frameworks.schemas import FRAMEWORK_BODY_FIELD
from src.persistence.storage import get_storage
from src.prompts.registry import dump_prompt, parse_prompt
from src.prompts.schemas import PROMPT_BODY_FIELD

logger = logging.getLogger("archive_tool")


async def cmd_export(args: argparse.Namespace) -> int:
    collection = await get_storage().get_collection()
    data = export_archive(collection, prompt_ids=args.prompt_id)
    Path(args.output).write_bytes(data)
    print(f"Wrote {len(data):,} bytes to {args.output}")
    return 0


async def cmd_import(args: argparse.Namespace) -> int:
    data = Path(args.archive).read_bytes()
    importer = ArchiveImporter(get_storage())
    try:
        result = await importer.import_archive(data, plan=args.plan, is_diff=args.diff)
    except ArchiveError as e:
        print(f"Error: {e.user_message}\n  {e}", file=sys.stderr)
        return 1
    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    text = Path(args.file).read_text(encoding="utf-8")
    is_prompt = args.kind == "prompt"
    body_field = PROMPT_BODY_FIELD if is_prompt else FRAMEWORK_BODY_FIELD

    front_matter = from_text(text)
    raw = front_matter.merge_body(body_field) if front_matter is not None else text

    try:
        if is_prompt:
            print(dump_prompt(parse_prompt(raw)), end="")
        else:
            print(dump_framework(parse_framework(raw)), end="")
    except DocumentError as e:
        print(f"Invalid {args.kind}: {e}", file=sys.stderr)
        return 1
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="PromptOps archive tool")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_export = sub.add_parser("export", help="Write the collection to a zip archive")
    p_export.add_argument("output", help="Output .zip path")
    p_export.add_argument(
        "--prompt-id",
        action="append",
        help="Diff export: include only this prompt (repeatable)",
    )

    p_import = sub.add_parser("import", help="Import a zip archive")
    p_import.add_argument("archive", help="Input .zip path")
    p_import.add_argument("--diff", action="store_true", help="Add new prompts only")
    p_import.add_argument(
        "--plan",
        default=config.PLAN,
        choices=["free", "pro", "team", "enterprise"],
        help=f"Plan tier for the quota check (default: {config.PLAN})",
    )

    p_validate = sub.add_parser("validate", help="Validate one document file")
    p_validate.add_argument("file", help="Front-matter .md, YAML or JSON file")
    p_validate.add_argument("--kind", choices=["prompt", "framework"], default="prompt")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "export":
        return asyncio.run(cmd_export(args))
    if args.command == "import":
        return asyncio.run(cmd_import(args))
    return cmd_validate(args)


if __name__ == "__main__":
    sys.exit(main())
