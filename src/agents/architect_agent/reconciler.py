"""Check slide references in validated output against the real template."""

from __future__ import annotations

import logging

from .errors import InvalidInputError, ReferenceOutOfBoundsError
from .models import CloningInstructions, PresentationPlan

logger = logging.getLogger(__name__)


def _check_upper(upper: int, what: str) -> None:
    if isinstance(upper, bool) or not isinstance(upper, int) or upper <= 0:
        raise InvalidInputError(f"{what} must be a positive integer, got {upper!r}")


def _check_index(index: int, upper: int, slide_number: int, field: str) -> None:
    if 0 <= index < upper:
        return
    raise ReferenceOutOfBoundsError(
        f"Slide {slide_number} references {field} {index}, valid range is [0, {upper})",
        index=index,
        upper=upper,
        slide_number=slide_number,
    )


def reconcile_cloning_instructions(instructions: CloningInstructions, total_slides: int) -> CloningInstructions:
    """Ensure every cloned slide points at an existing template slide.

    ``total_slides`` must come from the parsed template, never from the
    model's own ``structure.total_slides``. Returns ``instructions`` unchanged.
    """

    _check_upper(total_slides, "total_slides")
    for slide in instructions.slides:
        _check_index(slide.template_slide_reference.index, total_slides, slide.slide_number, "template slide")
    logger.debug("All %d cloned slides reference template slides in [0, %d)", len(instructions.slides), total_slides)
    return instructions


def reconcile_presentation_plan(plan: PresentationPlan, image_count: int) -> PresentationPlan:
    _check_upper(image_count, "image_count")
    for slide in plan.slides:
        _check_index(slide.reference_image_index, image_count, slide.slide_number, "template image")
    return plan


__all__ = ["reconcile_cloning_instructions", "reconcile_presentation_plan"]
