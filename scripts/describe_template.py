import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv

from src.agents.architect_agent.errors import ArchitectError
from src.agents.template_introspection.service import format_template_for_prompt, load_template


def main():
    load_dotenv()
    parser = argparse.ArgumentParser(description="Parse a PPTX template and print what the model will see.")
    parser.add_argument("template", type=Path, help="Path to a .pptx template")
    parser.add_argument("--json", action="store_true", help="Print the full descriptor as JSON instead")
    args = parser.parse_args()

    if not args.template.is_file():
        print("Template not found:", args.template)
        sys.exit(1)
    try:
        descriptor = load_template(args.template.read_bytes())
    except ArchitectError as exc:
        print(f"Could not parse template: {exc}", file=sys.stderr)
        sys.exit(2)

    if args.json:
        print(json.dumps(descriptor.model_dump(mode="json"), indent=2))
    else:
        print(format_template_for_prompt(descriptor))


if __name__ == "__main__":
    main()
