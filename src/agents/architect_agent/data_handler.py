"""Utilities for preparing user content and uploaded template payloads."""

from __future__ import annotations

import base64
import binascii
import logging
import re
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

import fitz  # PyMuPDF

from .errors import InvalidInputError

logger = logging.getLogger(__name__)

_TEXT_EXTENSIONS = {".txt", ".md", ".markdown"}
_DATA_URL_PREFIX = re.compile(r"^data:[\w.+\-/]+;base64,", re.IGNORECASE)


@contextmanager
def scoped_workspace(prefix: str = "architect-", root: Optional[str] = None) -> Iterator[Path]:
    """Yield a private temporary directory that is removed on every exit path."""

    if root:
        Path(root).mkdir(parents=True, exist_ok=True)
    workdir = Path(tempfile.mkdtemp(prefix=prefix, dir=root))
    try:
        yield workdir
    finally:
        shutil.rmtree(workdir, ignore_errors=True)
        logger.debug("Removed workspace %s", workdir)


def _extract_pdf_text(path: Path) -> str:
    """Read a PDF file via PyMuPDF (fitz) and return concatenated text."""

    text_chunks: list[str] = []
    with fitz.open(path) as doc:
        for page in doc:
            text_chunks.append(page.get_text("text"))
    return "\n".join(chunk.strip() for chunk in text_chunks if chunk.strip())


def get_user_content(file_path: Union[str, Path]) -> str:
    """Return the textual content supplied by the user.

    Accepts plain-text formats or PDF files and normalises the output into a
    single string suitable for prompting an LLM.
    """

    path = Path(file_path)
    if not path.exists() or not path.is_file():
        raise FileNotFoundError(f"User file not found: {file_path}")

    suffix = path.suffix.lower()
    if suffix == ".pdf":
        content = _extract_pdf_text(path)
    elif suffix in _TEXT_EXTENSIONS:
        content = path.read_text(encoding="utf-8", errors="ignore")
    else:
        raise InvalidInputError(f"Unsupported file type: {suffix}")

    content = content.strip()
    if not content:
        raise InvalidInputError("Uploaded file did not contain any readable text.")

    logger.debug("Loaded user content from %s (%.0f chars)", file_path, len(content))
    return content


def strip_data_url(payload: str) -> str:
    """Drop a leading ``data:<mime>;base64,`` header, if any."""

    return _DATA_URL_PREFIX.sub("", payload.strip(), count=1)


def decode_base64_payload(payload: str) -> bytes:
    """Decode a base64 string or data URL into raw bytes."""

    if not payload or not payload.strip():
        raise InvalidInputError("Empty base64 payload")
    try:
        return base64.b64decode(strip_data_url(payload), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidInputError(f"Payload is not valid base64: {exc}") from exc


__all__ = [
    "decode_base64_payload",
    "get_user_content",
    "scoped_workspace",
    "strip_data_url",
]
