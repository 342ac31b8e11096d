from __future__ import annotations

import logging
from typing import Optional, Union

from src.agents.architect_agent.data_handler import decode_base64_payload
from src.agents.architect_agent.errors import InvalidInputError

from .extractor import parse_template
from .schemas import TemplateDescriptor

logger = logging.getLogger(__name__)


def load_template(payload: Union[bytes, str, None], *, max_bytes: Optional[int] = None) -> TemplateDescriptor:
    """Decode (if needed), size-check and parse an uploaded template.

    ``payload`` is either the raw PPTX bytes or a base64 string / data URL as
    sent by browser clients.
    """
    if payload is None or (isinstance(payload, (bytes, str)) and not payload):
        raise InvalidInputError("No PPTX template provided")
    file_bytes = decode_base64_payload(payload) if isinstance(payload, str) else payload
    if max_bytes is not None and len(file_bytes) > max_bytes:
        raise InvalidInputError(
            f"Template is too large ({len(file_bytes)} bytes, max {max_bytes} bytes)"
        )
    return parse_template(file_bytes)


def format_template_for_prompt(data: TemplateDescriptor) -> str:
    """Flatten a template descriptor into the compact text embedded in prompts."""
    slide_lines = "\n".join(
        f'- Slide {s.index}: category="{s.category.value}", layout="{s.layout_name}", '
        f"has_title={str(s.has_title).lower()}, has_body={str(s.has_body).lower()}, "
        f"placeholders={len(s.text_placeholders)}"
        for s in data.slides
    )
    palette = data.color_palette
    fonts = data.fonts
    return (
        "Template Analysis:\n"
        f"- Total Slides: {data.total_slides}\n"
        "\n"
        "Slides:\n"
        f"{slide_lines}\n"
        "\n"
        "Color Palette:\n"
        f"- Primary: {palette.primary}\n"
        f"- Secondary: {palette.secondary}\n"
        f"- Accent: {palette.accent}\n"
        f"- Background: {palette.background}\n"
        f"- Text: {palette.text}\n"
        "\n"
        "Fonts:\n"
        f"- Primary: {fonts.primary.name} ({fonts.primary.usage})\n"
        f"- Secondary: {fonts.secondary.name} ({fonts.secondary.usage})"
    )


def summarize_template(data: TemplateDescriptor) -> str:
    return f"Template: {data.total_slides} slides parsed"


__all__ = ["format_template_for_prompt", "load_template", "summarize_template"]
