#!/usr/bin/env python3
"""Run the cloning pipeline against the configured model from the command line."""

import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.agents.architect_agent.data_handler import get_user_content
from src.agents.architect_agent.errors import ArchitectError
from src.agents.architect_agent.llm import build_model_client
from src.agents.architect_agent.orchestrator import generate_cloning_plan
from src.config import load_settings
from src.logging_utils import setup_logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate cloning instructions for a PPTX template.")
    parser.add_argument("template", type=Path, help="Path to a .pptx template")
    parser.add_argument("content", type=Path, help="User content file (.txt, .md or .pdf)")
    parser.add_argument("--language", choices=("en", "fr"), default=None)
    parser.add_argument("--output", type=Path, help="Write instructions JSON here instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    settings = load_settings()
    setup_logging(verbose=args.verbose)

    try:
        user_content = get_user_content(args.content)
    except (ArchitectError, FileNotFoundError) as exc:
        print(f"Could not read content: {exc}", file=sys.stderr)
        return 1
    if not args.template.is_file():
        print(f"Template not found: {args.template}", file=sys.stderr)
        return 1

    result = generate_cloning_plan(
        args.template.read_bytes(),
        user_content,
        client=build_model_client(settings),
        language=args.language,
        settings=settings,
    )
    if not result.success:
        print(json.dumps(result.error.to_dict(), indent=2, ensure_ascii=False), file=sys.stderr)
        return 2

    print(result.template_summary, file=sys.stderr)
    payload = json.dumps(result.instructions.model_dump(mode="json", exclude_unset=True), indent=2, ensure_ascii=False)
    if args.output:
        args.output.write_text(payload, encoding="utf-8")
        print(f"Wrote {args.output}", file=sys.stderr)
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
