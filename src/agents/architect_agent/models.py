"""Pydantic models shared by the prompt composer and the response validator.

These classes are the only definition of the JSON contract the model must
honour: ``prompts.render_schema`` turns them into the schema text embedded in
prompts and ``validator`` checks responses against them.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr


class SlideLayoutType(str, Enum):
    TITLE = "title"
    TITLE_CONTENT = "title_content"
    BULLET_POINTS = "bullet_points"
    IMAGE_TEXT = "image_text"
    TWO_COLUMNS = "two_columns"
    QUOTE = "quote"
    SECTION_HEADER = "section_header"
    BLANK = "blank"


class FontWeight(str, Enum):
    BOLD = "bold"
    NORMAL = "normal"


# ---- Plan mode ----


class Modification(BaseModel):
    """One precise edit to apply on the reference template slide."""

    target_element: StrictStr = Field(description="visual element of the template to change, e.g. 'Main title'")
    action: StrictStr = Field(description="precise action, e.g. 'Replace the text'")
    value: StrictStr = Field(description="new value or content to insert")
    style_details: Optional[StrictStr] = Field(default=None, description="font, size or colour details")


class SlideContent(BaseModel):
    title: StrictStr = Field(description="slide title")
    body: List[StrictStr] = Field(description="paragraphs or bullet points, markdown allowed")
    modifications: Optional[List[Modification]] = Field(default=None)
    visual_notes: Optional[StrictStr] = Field(default=None, description="visual notes for the user")


class FontSuggestions(BaseModel):
    primary: Optional[StrictStr] = Field(default=None, description="e.g. 'Playfair Display'")
    secondary: Optional[StrictStr] = Field(default=None, description="e.g. 'Lato'")
    sizes: Optional[StrictStr] = Field(default=None, description="e.g. 'H1: 48px, Body: 16px'")


class SlideInstruction(BaseModel):
    slide_number: StrictInt = Field(gt=0)
    layout_type: SlideLayoutType
    reference_image_index: StrictInt = Field(ge=0, description="0-based index of the template image to imitate")
    content_to_use: SlideContent
    design_instructions: StrictStr = Field(description="overall design instructions")
    font_suggestions: Optional[FontSuggestions] = Field(default=None)


class PresentationPlan(BaseModel):
    """Plan mode answer: human-readable instructions for every slide."""

    presentation_title: StrictStr = Field(description="suggested presentation title")
    total_slides: StrictInt = Field(gt=0)
    style_notes: Optional[StrictStr] = Field(default=None, description="notes on the detected style")
    slides: List[SlideInstruction]


# ---- Cloning mode ----


class FontSpec(BaseModel):
    name: StrictStr = Field(description="font name taken from the template data")
    size: Union[StrictInt, StrictFloat] = Field(description="size in points")
    color: StrictStr = Field(description="hex colour")
    weight: Optional[FontWeight] = Field(default=None)


class SlideDesign(BaseModel):
    background_color: StrictStr = Field(description="hex colour taken from the template data")
    title_font: FontSpec
    body_font: FontSpec


class TemplateSlideReference(BaseModel):
    index: StrictInt = Field(ge=0, description="0-based index of the template slide to clone")
    reason: StrictStr = Field(description="why this template slide fits")


class ClonedSlideInstruction(BaseModel):
    slide_number: StrictInt = Field(gt=0)
    title: StrictStr = Field(description="slide title")
    content: StrictStr = Field(description="detailed slide text")
    template_slide_reference: TemplateSlideReference
    design: SlideDesign


class ColorPalette(BaseModel):
    primary: StrictStr = Field(description="hex")
    secondary: StrictStr = Field(description="hex")
    accent: StrictStr = Field(description="hex")
    background: StrictStr = Field(description="hex")
    text: StrictStr = Field(description="hex")


class FontInfo(BaseModel):
    name: StrictStr = Field(description="font name from the template")
    usage: StrictStr = Field(description="where the font is used")


class FontPair(BaseModel):
    primary: FontInfo
    secondary: FontInfo


class DeckStructure(BaseModel):
    total_slides: StrictInt = Field(gt=0)
    story_flow: StrictStr = Field(description="narrative thread of the deck")


class CloningInstructions(BaseModel):
    """Cloning mode answer: which template slide to duplicate for each new slide."""

    structure: DeckStructure
    slides: List[ClonedSlideInstruction]
    color_palette: ColorPalette
    fonts: FontPair


__all__ = [
    "ClonedSlideInstruction",
    "CloningInstructions",
    "ColorPalette",
    "DeckStructure",
    "FontInfo",
    "FontPair",
    "FontSpec",
    "FontSuggestions",
    "FontWeight",
    "Modification",
    "PresentationPlan",
    "SlideContent",
    "SlideDesign",
    "SlideInstruction",
    "SlideLayoutType",
    "TemplateSlideReference",
]
