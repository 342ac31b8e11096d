from .cloning import duplicate_slide, find_text_targets, remove_slide, replace_text
from .generator import generate_pptx_from_instructions

__all__ = [
    "duplicate_slide",
    "find_text_targets",
    "generate_pptx_from_instructions",
    "remove_slide",
    "replace_text",
]
