"""
Pytest configuration and shared fixtures.
"""

import io
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from pptx import Presentation

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.agents.architect_agent.llm import ModelOutcome, ModelRequest  # noqa: E402
from src.config import Settings  # noqa: E402

USER_CONTENT = (
    "Our quarterly results show revenue growth of 12 percent, lower costs and "
    "two new enterprise customers. Next quarter we focus on hiring."
)
IMAGE_DATA_URL = "data:image/png;base64,ZmFrZS1wbmc="


def _add_slide(prs, layout_index: int, title: str, body: Optional[str] = None):
    slide = prs.slides.add_slide(prs.slide_layouts[layout_index])
    slide.shapes.title.text = title
    if body is not None:
        slide.placeholders[1].text = body
    return slide


def build_sample_pptx() -> bytes:
    """Five slides: title, content, section, comparison, thank-you."""
    prs = Presentation()
    _add_slide(prs, 0, "Quarterly Review", "Finance team")
    _add_slide(prs, 1, "Revenue growth", "Revenue grew 12%\nCosts fell")
    _add_slide(prs, 2, "Part two")
    _add_slide(prs, 1, "Old vs new approach", "Old: manual\nNew: automated")
    _add_slide(prs, 5, "Thank you")
    buffer = io.BytesIO()
    prs.save(buffer)
    return buffer.getvalue()


@pytest.fixture(scope="session")
def sample_pptx_bytes() -> bytes:
    return build_sample_pptx()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def user_content() -> str:
    return USER_CONTENT


def make_plan_payload(reference_indices: List[int]) -> Dict[str, Any]:
    return {
        "presentation_title": "Quarterly Review",
        "total_slides": len(reference_indices),
        "style_notes": "Dark blue headings on white",
        "slides": [
            {
                "slide_number": number,
                "layout_type": "title_content",
                "reference_image_index": index,
                "content_to_use": {
                    "title": f"Slide {number}",
                    "body": ["- first point", "- second point"],
                    "modifications": [
                        {
                            "target_element": "Main title",
                            "action": "Replace the text",
                            "value": f"Slide {number}",
                        }
                    ],
                },
                "design_instructions": "Keep the template spacing",
            }
            for number, index in enumerate(reference_indices, start=1)
        ],
    }


def make_cloning_payload(reference_indices: List[int]) -> Dict[str, Any]:
    font = {"name": "Calibri", "size": 32, "color": "#1F497D", "weight": "bold"}
    return {
        "structure": {"total_slides": len(reference_indices), "story_flow": "Intro, results, outlook"},
        "slides": [
            {
                "slide_number": number,
                "title": f"New slide {number}",
                "content": "First point\n- Second point",
                "template_slide_reference": {"index": index, "reason": "matching layout"},
                "design": {
                    "background_color": "#FFFFFF",
                    "title_font": font,
                    "body_font": {"name": "Calibri", "size": 18.5, "color": "#000000"},
                },
            }
            for number, index in enumerate(reference_indices, start=1)
        ],
        "color_palette": {
            "primary": "#1F497D",
            "secondary": "#4F81BD",
            "accent": "#C0504D",
            "background": "#FFFFFF",
            "text": "#000000",
        },
        "fonts": {
            "primary": {"name": "Calibri", "usage": "Headings"},
            "secondary": {"name": "Calibri", "usage": "Body text"},
        },
    }


@pytest.fixture
def plan_payload():
    return make_plan_payload


@pytest.fixture
def cloning_payload():
    return make_cloning_payload


class FakeModelClient:
    """Scripted model client that records every request it receives."""

    def __init__(self, text: str = "", outcome: Optional[ModelOutcome] = None, exc: Optional[BaseException] = None):
        self.outcome = outcome or ModelOutcome.success(text)
        self.exc = exc
        self.requests: List[ModelRequest] = []

    @classmethod
    def returning_json(cls, payload: Dict[str, Any], fenced: bool = False) -> "FakeModelClient":
        text = json.dumps(payload)
        if fenced:
            text = f"Here is the plan:\n```json\n{text}\n```"
        return cls(text=text)

    def invoke(self, request: ModelRequest) -> ModelOutcome:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return self.outcome


@pytest.fixture
def fake_client():
    return FakeModelClient
