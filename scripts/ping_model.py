#!/usr/bin/env python3
"""Quick CLI to sanity check connectivity with the configured model provider."""

from __future__ import annotations

import argparse
import sys
import time
from dataclasses import replace
from pathlib import Path

# Ensure project root is on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.agents.architect_agent.llm import ModelRequest, build_model_client
from src.config import SUPPORTED_PROVIDERS, load_settings


def main() -> int:
    parser = argparse.ArgumentParser(description="Ping the configured model with a simple prompt.")
    parser.add_argument("--provider", choices=SUPPORTED_PROVIDERS, help="Override ARCHITECT_PROVIDER")
    parser.add_argument(
        "--prompt",
        default="Say hello and identify yourself.",
        help="Text prompt to send to the model.",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help="Request timeout in seconds (default: ARCHITECT_REQUEST_TIMEOUT).",
    )
    args = parser.parse_args()

    settings = load_settings()
    overrides = {}
    if args.provider:
        overrides["provider"] = args.provider
    if args.timeout:
        overrides["request_timeout"] = args.timeout
    settings = replace(settings, **overrides)

    try:
        client = build_model_client(settings)
    except RuntimeError as exc:
        print(f"Client setup failed: {exc}", file=sys.stderr)
        return 1

    start = time.perf_counter()
    outcome = client.invoke(ModelRequest(system_prompt="You are a helpful assistant.", user_prompt=args.prompt))
    elapsed = time.perf_counter() - start

    print(f"Provider: {settings.provider}")
    print(f"Elapsed: {elapsed:.2f}s")
    if not outcome.ok:
        print(f"Generation failed ({outcome.status.value}): {outcome.error_message}", file=sys.stderr)
        return 1
    print("Response:\n")
    print(outcome.text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
