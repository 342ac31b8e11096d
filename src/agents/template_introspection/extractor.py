from __future__ import annotations

import io
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE, PP_PLACEHOLDER
from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.oxml import parse_xml
from pptx.oxml.ns import qn

from src.agents.architect_agent.errors import TemplateParseError

from .schemas import (
    PlaceholderKind,
    SlideCategory,
    TemplateDescriptor,
    TemplateFont,
    TemplateFonts,
    TemplatePalette,
    TemplateSlideInfo,
    TextPlaceholder,
)

logger = logging.getLogger(__name__)

DEFAULT_PALETTE: Dict[str, str] = {
    "primary": "#1E3A8A",
    "secondary": "#3B82F6",
    "accent": "#F59E0B",
    "background": "#FFFFFF",
    "text": "#1F2937",
}
DEFAULT_FONT = "Arial"
TITLE_FONT_USAGE = "Headings"
BODY_FONT_USAGE = "Body text"

# palette role -> theme colour slot
_PALETTE_SLOTS: Tuple[Tuple[str, str], ...] = (
    ("primary", "dk2"),
    ("secondary", "accent1"),
    ("accent", "accent2"),
    ("background", "lt1"),
    ("text", "dk1"),
)

_CONCLUSION_KEYWORDS = ("merci", "thank", "conclusion", "contact")
_COMPARISON_KEYWORDS = ("vs", "comparison")
_SECTION_MAX_CHARS = 100

_TITLE_TYPES = {PP_PLACEHOLDER.TITLE, PP_PLACEHOLDER.CENTER_TITLE, PP_PLACEHOLDER.VERTICAL_TITLE}
_SUBTITLE_TYPES = {PP_PLACEHOLDER.SUBTITLE}
_BODY_TYPES = {
    PP_PLACEHOLDER.BODY,
    PP_PLACEHOLDER.OBJECT,
    PP_PLACEHOLDER.VERTICAL_BODY,
    PP_PLACEHOLDER.VERTICAL_OBJECT,
}
_SKIPPED_TYPES = {PP_PLACEHOLDER.DATE, PP_PLACEHOLDER.FOOTER, PP_PLACEHOLDER.SLIDE_NUMBER}


def classify_slide(
    slide_text: str,
    has_title: bool,
    has_body: bool,
    slide_index: int,
    total_slides: int,
) -> SlideCategory:
    """Assign a category to a slide; the first matching rule wins.

    Rule order: position, then keywords, then structure. Reordering changes
    the category of later slides, so keep it as is.
    """
    lower_text = slide_text.lower()

    if slide_index == 0:
        return SlideCategory.TITLE

    if slide_index == total_slides - 1:
        if any(keyword in lower_text for keyword in _CONCLUSION_KEYWORDS):
            return SlideCategory.CONCLUSION

    if has_title and not has_body and len(slide_text) < _SECTION_MAX_CHARS:
        return SlideCategory.SECTION

    if any(keyword in lower_text for keyword in _COMPARISON_KEYWORDS):
        return SlideCategory.TWO_COLUMN

    if has_body:
        return SlideCategory.CONTENT

    if not slide_text.strip():
        return SlideCategory.BLANK

    return SlideCategory.OTHER


def _iter_text_shapes(shapes: Iterable) -> Iterable:
    for shape in shapes:
        if shape.shape_type == MSO_SHAPE_TYPE.GROUP:
            yield from _iter_text_shapes(shape.shapes)
            continue
        if not shape.has_text_frame:
            continue
        if shape.is_placeholder and shape.placeholder_format.type in _SKIPPED_TYPES:
            continue
        yield shape


def _placeholder_kind(shape) -> Optional[PlaceholderKind]:
    if not shape.is_placeholder:
        return None
    ph_type = shape.placeholder_format.type
    if ph_type in _TITLE_TYPES:
        return PlaceholderKind.TITLE
    if ph_type in _SUBTITLE_TYPES:
        return PlaceholderKind.SUBTITLE
    if ph_type in _BODY_TYPES:
        return PlaceholderKind.BODY
    return PlaceholderKind.OTHER


def extract_placeholders(slide) -> List[TextPlaceholder]:
    """List the non-empty text zones of a slide in shape order."""
    placeholders: List[TextPlaceholder] = []
    has_title = False
    for shape in _iter_text_shapes(slide.shapes):
        text = shape.text_frame.text.strip()
        if not text:
            continue
        kind = _placeholder_kind(shape)
        if kind is None or kind is PlaceholderKind.OTHER:
            # free text boxes: first one stands in for the title when there is none
            kind = PlaceholderKind.TITLE if not has_title and not placeholders else PlaceholderKind.BODY
        if kind is PlaceholderKind.TITLE:
            has_title = True
        placeholders.append(TextPlaceholder(type=kind, text=text, index=len(placeholders)))
    return placeholders


def _theme_element(prs):
    try:
        theme_part = prs.slide_master.part.part_related_by(RT.THEME)
    except KeyError:
        return None
    return parse_xml(theme_part.blob)


def _color_value(slot) -> Optional[str]:
    srgb = slot.find(qn("a:srgbClr"))
    if srgb is not None and srgb.get("val"):
        return f"#{srgb.get('val').upper()}"
    sys_clr = slot.find(qn("a:sysClr"))
    if sys_clr is not None and sys_clr.get("lastClr"):
        return f"#{sys_clr.get('lastClr').upper()}"
    return None


def extract_palette(theme) -> TemplatePalette:
    colors = dict(DEFAULT_PALETTE)
    scheme = None
    if theme is not None:
        scheme = theme.find(f"{qn('a:themeElements')}/{qn('a:clrScheme')}")
    if scheme is not None:
        for role, slot_name in _PALETTE_SLOTS:
            slot = scheme.find(qn(f"a:{slot_name}"))
            value = _color_value(slot) if slot is not None else None
            if value and len(value) == 7:
                colors[role] = value
    return TemplatePalette(**colors)


def extract_fonts(theme) -> TemplateFonts:
    major = minor = None
    if theme is not None:
        scheme = theme.find(f"{qn('a:themeElements')}/{qn('a:fontScheme')}")
        if scheme is not None:
            major_latin = scheme.find(f"{qn('a:majorFont')}/{qn('a:latin')}")
            minor_latin = scheme.find(f"{qn('a:minorFont')}/{qn('a:latin')}")
            major = major_latin.get("typeface") if major_latin is not None else None
            minor = minor_latin.get("typeface") if minor_latin is not None else None
    return TemplateFonts(
        primary=TemplateFont(name=major or DEFAULT_FONT, usage=TITLE_FONT_USAGE),
        secondary=TemplateFont(name=minor or DEFAULT_FONT, usage=BODY_FONT_USAGE),
    )


def parse_template(file_bytes: bytes) -> TemplateDescriptor:
    """Parse a PPTX template held in memory into a :class:`TemplateDescriptor`."""
    if not file_bytes:
        raise TemplateParseError("Template file is empty")
    try:
        prs = Presentation(io.BytesIO(file_bytes))
    except Exception as exc:
        raise TemplateParseError(f"Unable to open PPTX template: {exc}") from exc

    slides = list(prs.slides)
    if not slides:
        raise TemplateParseError("No slides found in PPTX file")

    total_slides = len(slides)
    infos: List[TemplateSlideInfo] = []
    for index, slide in enumerate(slides):
        placeholders = extract_placeholders(slide)
        has_title = any(p.type is PlaceholderKind.TITLE for p in placeholders)
        has_body = any(p.type is PlaceholderKind.BODY for p in placeholders)
        raw_text = " ".join(p.text for p in placeholders)
        infos.append(
            TemplateSlideInfo(
                index=index,
                layout_name=slide.slide_layout.name or f"Slide {index + 1}",
                category=classify_slide(raw_text, has_title, has_body, index, total_slides),
                has_title=has_title,
                has_body=has_body,
                text_placeholders=placeholders,
                raw_text=raw_text,
            )
        )

    theme = _theme_element(prs)
    descriptor = TemplateDescriptor(
        total_slides=total_slides,
        slides=infos,
        color_palette=extract_palette(theme),
        fonts=extract_fonts(theme),
    )
    logger.debug("Parsed template with %d slides", total_slides)
    return descriptor


__all__ = [
    "DEFAULT_PALETTE",
    "classify_slide",
    "extract_fonts",
    "extract_palette",
    "extract_placeholders",
    "parse_template",
]
