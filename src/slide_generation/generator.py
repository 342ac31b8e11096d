"""Build a new PPTX from a template and reconciled cloning instructions."""

from __future__ import annotations

import io
import logging

from pptx import Presentation

from src.agents.architect_agent.errors import GenerationError
from src.agents.architect_agent.models import CloningInstructions

from .cloning import duplicate_slide, find_text_targets, remove_slide, replace_text

logger = logging.getLogger(__name__)


def generate_pptx_from_instructions(template_bytes: bytes, instructions: CloningInstructions) -> bytes:
    """Clone the referenced template slides in order and substitute their text.

    The original template slides are removed from the output, so the result
    holds exactly one slide per instruction. Callers must reconcile the
    instructions against the template before calling this.
    """

    if not instructions.slides:
        raise GenerationError("Cloning instructions contain no slides")
    try:
        prs = Presentation(io.BytesIO(template_bytes))
    except Exception as exc:
        raise GenerationError(f"Unable to open PPTX template: {exc}") from exc

    originals = list(prs.slides)
    original_ids = list(prs.slides._sldIdLst)

    for instruction in instructions.slides:
        index = instruction.template_slide_reference.index
        if not 0 <= index < len(originals):
            raise GenerationError(
                f"Template slide {index} does not exist (template has {len(originals)} slides)"
            )
        clone = duplicate_slide(prs, originals[index])
        title_shape, body_shape = find_text_targets(clone)
        if title_shape is not None:
            replace_text(title_shape.text_frame, instruction.title)
        if body_shape is not None:
            replace_text(body_shape.text_frame, instruction.content)
        logger.debug(
            "Slide %d cloned from template slide %d (title=%s, body=%s)",
            instruction.slide_number,
            index,
            title_shape is not None,
            body_shape is not None,
        )

    for slide_id in original_ids:
        remove_slide(prs, slide_id)

    buffer = io.BytesIO()
    prs.save(buffer)
    logger.info("Generated PPTX with %d slides", len(instructions.slides))
    return buffer.getvalue()


__all__ = ["generate_pptx_from_instructions"]
