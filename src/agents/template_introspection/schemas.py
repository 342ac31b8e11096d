from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator

_HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class SlideCategory(str, Enum):
    TITLE = "title"
    CONTENT = "content"
    SECTION = "section"
    CONCLUSION = "conclusion"
    TWO_COLUMN = "two_column"
    BLANK = "blank"
    OTHER = "other"


class PlaceholderKind(str, Enum):
    TITLE = "title"
    BODY = "body"
    SUBTITLE = "subtitle"
    OTHER = "other"


class TextPlaceholder(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: PlaceholderKind
    text: str
    index: int = Field(ge=0, description="Position of the text zone within its slide")


class TemplateSlideInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0, description="0-based slide index in the template")
    layout_name: str
    category: SlideCategory
    has_title: bool
    has_body: bool
    text_placeholders: List[TextPlaceholder] = Field(default_factory=list)
    raw_text: str = ""


class TemplatePalette(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: str = Field(pattern=_HEX_COLOR)
    secondary: str = Field(pattern=_HEX_COLOR)
    accent: str = Field(pattern=_HEX_COLOR)
    background: str = Field(pattern=_HEX_COLOR)
    text: str = Field(pattern=_HEX_COLOR)


class TemplateFont(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    usage: str


class TemplateFonts(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: TemplateFont
    secondary: TemplateFont


class TemplateDescriptor(BaseModel):
    """Read-only summary of one uploaded template, built once per upload."""

    model_config = ConfigDict(frozen=True)

    total_slides: int = Field(gt=0)
    slides: List[TemplateSlideInfo]
    color_palette: TemplatePalette
    fonts: TemplateFonts

    @model_validator(mode="after")
    def _check_slide_indices(self) -> "TemplateDescriptor":
        if len(self.slides) != self.total_slides:
            raise ValueError(
                f"total_slides={self.total_slides} but {len(self.slides)} slides were described"
            )
        indices = [slide.index for slide in self.slides]
        if indices != list(range(self.total_slides)):
            raise ValueError("slide indices must be unique, ordered and contiguous from 0")
        return self
