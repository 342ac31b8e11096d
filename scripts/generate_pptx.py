#!/usr/bin/env python3
"""Build a PPTX from a template and a cloning instructions JSON file."""

import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.agents.architect_agent.orchestrator import generate_presentation_file
from src.config import load_settings
from src.logging_utils import setup_logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Clone template slides following cloning instructions.")
    parser.add_argument("template", type=Path, help="Path to the .pptx template")
    parser.add_argument("instructions", type=Path, help="Cloning instructions JSON")
    parser.add_argument("--output-dir", type=Path, default=Path("."), help="Directory for the generated file")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    settings = load_settings()
    setup_logging(verbose=args.verbose)

    for path in (args.template, args.instructions):
        if not path.is_file():
            print(f"File not found: {path}", file=sys.stderr)
            return 1

    result = generate_presentation_file(
        args.template.read_bytes(),
        args.instructions.read_text(encoding="utf-8"),
        settings=settings,
    )
    if not result.success:
        print(json.dumps(result.error.to_dict(), indent=2, ensure_ascii=False), file=sys.stderr)
        return 2

    args.output_dir.mkdir(parents=True, exist_ok=True)
    dest = args.output_dir / result.file_name
    dest.write_bytes(result.content)
    print(f"Wrote {dest}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
