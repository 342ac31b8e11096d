"""Logging helpers shared by the web app and the CLI scripts."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logging(verbose: bool = False, log_path: Optional[Path] = None, level: Optional[str] = None) -> None:
    """Configure root logging once for the process."""
    if level:
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO
    else:
        resolved = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            handlers.append(logging.FileHandler(log_path, mode="a", encoding="utf-8"))
        except OSError as exc:
            print(
                f"[WARN] Failed to open log file at {log_path} ({exc}). Continuing without file logging.",
                file=sys.stderr,
            )
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


__all__ = ["setup_logging"]
