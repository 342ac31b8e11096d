"""Turn free-form model text into validated plan / cloning models."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import InvalidResponseError, SchemaViolationError
from .models import CloningInstructions, PresentationPlan

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)

ModelT = TypeVar("ModelT", bound=BaseModel)


def unwrap_fenced_json(text: str) -> str:
    """Strip Markdown fences from model output to leave raw JSON.

    Only the first fenced block is kept; anything after it is discarded.
    """

    match = _FENCED_BLOCK.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def parse_json_payload(text: str) -> Any:
    cleaned = unwrap_fenced_json(text or "")
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise InvalidResponseError(f"Response is not valid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})") from exc


def _format_location(loc) -> str:
    parts = []
    for item in loc:
        if isinstance(item, int):
            parts.append(f"[{item}]")
        elif parts:
            parts.append(f".{item}")
        else:
            parts.append(str(item))
    return "".join(parts) or "<root>"


def _validate(model: Type[ModelT], payload: Any, mode: str) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = _format_location(first.get("loc", ()))
        logger.debug("%s payload rejected with %d violation(s)", mode, exc.error_count())
        raise SchemaViolationError(f"{location}: {first.get('msg')}", location=location, mode=mode) from exc


def validate_plan_payload(payload: Any) -> PresentationPlan:
    return _validate(PresentationPlan, payload, "plan")


def validate_cloning_payload(payload: Any) -> CloningInstructions:
    return _validate(CloningInstructions, payload, "cloning")


def validate_plan_response(text: str) -> PresentationPlan:
    """Parse model text and check it against the presentation plan schema."""

    return validate_plan_payload(parse_json_payload(text))


def validate_cloning_response(text: str) -> CloningInstructions:
    """Parse model text and check it against the cloning instructions schema."""

    return validate_cloning_payload(parse_json_payload(text))


__all__ = [
    "parse_json_payload",
    "unwrap_fenced_json",
    "validate_cloning_payload",
    "validate_cloning_response",
    "validate_plan_payload",
    "validate_plan_response",
]
