"""Core orchestration logic for the plan, cloning and generation pipelines.

Every public function here returns a result object and never raises: any
failure along the way is turned into exactly one :class:`PipelineError`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from src.agents.template_introspection.schemas import TemplateDescriptor
from src.agents.template_introspection.service import load_template, summarize_template
from src.config import SUPPORTED_LANGUAGES, Settings
from src.slide_generation.generator import generate_pptx_from_instructions

from .data_handler import decode_base64_payload
from .errors import (
    ArchitectError,
    ErrorKind,
    GenerationError,
    InvalidInputError,
    InvalidResponseError,
    PipelineError,
    UpstreamError,
)
from .llm import ModelClient, ModelImage, ModelOutcome, ModelRequest, OutcomeStatus, classify_exception
from .models import CloningInstructions, PresentationPlan
from .prompts import CLONING_MODE, PLAN_MODE, compose_cloning_prompt, compose_plan_prompt
from .reconciler import reconcile_cloning_instructions, reconcile_presentation_plan
from .validator import validate_cloning_payload, validate_cloning_response, validate_plan_response

logger = logging.getLogger(__name__)

Generator = Callable[[bytes, CloningInstructions], bytes]

_OUTCOME_KINDS = {
    OutcomeStatus.TIMEOUT: ErrorKind.UPSTREAM_TIMEOUT,
    OutcomeStatus.RATE_LIMITED: ErrorKind.UPSTREAM_RATE_LIMITED,
    OutcomeStatus.TRANSPORT_ERROR: ErrorKind.UNKNOWN,
}


class PipelineState(str, Enum):
    IDLE = "idle"
    COMPOSING = "composing"
    AWAITING_MODEL = "awaiting_model"
    VALIDATING = "validating"
    RECONCILING = "reconciling"
    GENERATING = "generating"
    DONE = "done"


@dataclass
class PipelineResult:
    success: bool
    mode: str
    plan: Optional[PresentationPlan] = None
    instructions: Optional[CloningInstructions] = None
    template: Optional[TemplateDescriptor] = None
    template_summary: Optional[str] = None
    error: Optional[PipelineError] = None
    states: List[PipelineState] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": self.success, "mode": self.mode}
        if self.plan is not None:
            payload["plan"] = self.plan.model_dump(mode="json", exclude_unset=True)
        if self.instructions is not None:
            payload["instructions"] = self.instructions.model_dump(mode="json", exclude_unset=True)
        if self.template is not None:
            payload["template"] = self.template.model_dump(mode="json")
        if self.template_summary:
            payload["template_summary"] = self.template_summary
        if self.error is not None:
            payload["error"] = self.error.to_dict()
        return payload


@dataclass
class GenerationResult:
    success: bool
    content: Optional[bytes] = None
    file_name: Optional[str] = None
    error: Optional[PipelineError] = None
    states: List[PipelineState] = field(default_factory=list)


class _Trace:
    """Records state transitions for one pipeline invocation."""

    def __init__(self, mode: str) -> None:
        self.mode = mode
        self.states: List[PipelineState] = [PipelineState.IDLE]

    def enter(self, state: PipelineState) -> None:
        logger.debug("[%s] %s -> %s", self.mode, self.states[-1].value, state.value)
        self.states.append(state)


def generated_file_name(day: Optional[date] = None) -> str:
    return f"presentation-generated-{(day or date.today()).isoformat()}.pptx"


def _resolve_language(language: Optional[str], settings: Settings) -> str:
    if language is not None and not isinstance(language, str):
        raise InvalidInputError(f"Language must be a string, got {type(language).__name__}")
    resolved = (language or settings.language).lower()
    if resolved not in SUPPORTED_LANGUAGES:
        raise InvalidInputError(
            f"Unsupported language '{language}'. Expected one of {', '.join(SUPPORTED_LANGUAGES)}"
        )
    return resolved


def _check_user_content(user_content: Optional[str], settings: Settings) -> str:
    if not isinstance(user_content, str):
        raise InvalidInputError("User content is required")
    content = user_content.strip()
    if len(content) < settings.min_content_chars:
        raise InvalidInputError(
            f"User content is too short ({len(content)} chars, min {settings.min_content_chars})"
        )
    if len(content) > settings.max_content_chars:
        raise InvalidInputError(
            f"User content is too long ({len(content)} chars, max {settings.max_content_chars})"
        )
    return content


def _to_image(item: Union[ModelImage, bytes, str]) -> ModelImage:
    if isinstance(item, ModelImage):
        return item
    if isinstance(item, (bytes, bytearray)):
        return ModelImage(mime_type="image/png", data=bytes(item))
    return ModelImage.from_base64(item)


def _call_model(client: ModelClient, request: ModelRequest) -> str:
    """Invoke the client and return its text, raising on any failure outcome."""

    try:
        outcome = client.invoke(request)
    except json.JSONDecodeError as exc:
        raise InvalidResponseError(f"Model response is not valid JSON: {exc}") from exc
    except Exception as exc:
        status = classify_exception(exc)
        if status is None:
            raise
        outcome = ModelOutcome.failure(status, str(exc))

    if not outcome.ok:
        raise UpstreamError(
            outcome.error_message or outcome.status.value,
            kind=_OUTCOME_KINDS[outcome.status],
        )
    return outcome.text


def _to_pipeline_error(exc: Exception, language: str, mode: str) -> PipelineError:
    if isinstance(exc, ArchitectError):
        logger.warning("[%s] pipeline failed (%s): %s", mode, exc.kind.value, exc)
    else:
        logger.exception("[%s] pipeline failed unexpectedly", mode)
    return PipelineError.from_exception(exc, language=language)


def generate_presentation_plan(
    template_images: Optional[Sequence[Union[ModelImage, bytes, str]]],
    user_content: Optional[str],
    *,
    client: ModelClient,
    language: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> PipelineResult:
    """Plan mode: ask the model for human-readable instructions per slide."""

    settings = settings or Settings()
    trace = _Trace(PLAN_MODE)
    lang = settings.language
    try:
        lang = _resolve_language(language, settings)
        content = _check_user_content(user_content, settings)
        if not template_images:
            raise InvalidInputError("At least one template image is required")
        images = tuple(_to_image(item) for item in template_images)

        trace.enter(PipelineState.COMPOSING)
        prompt = compose_plan_prompt(content, len(images), lang)

        trace.enter(PipelineState.AWAITING_MODEL)
        text = _call_model(client, ModelRequest(prompt.system, prompt.user, images))

        trace.enter(PipelineState.VALIDATING)
        plan = validate_plan_response(text)

        trace.enter(PipelineState.RECONCILING)
        reconcile_presentation_plan(plan, len(images))

        trace.enter(PipelineState.DONE)
    except Exception as exc:
        return PipelineResult(
            success=False,
            mode=PLAN_MODE,
            error=_to_pipeline_error(exc, lang, PLAN_MODE),
            states=trace.states,
        )

    logger.info("Generated presentation plan with %d slides", len(plan.slides))
    return PipelineResult(success=True, mode=PLAN_MODE, plan=plan, states=trace.states)


def generate_cloning_plan(
    template: Union[TemplateDescriptor, bytes, str, None],
    user_content: Optional[str],
    *,
    client: ModelClient,
    language: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> PipelineResult:
    """Cloning mode: ask which template slide to duplicate for each new slide.

    ``template`` is either an already parsed descriptor or the PPTX file
    itself (raw bytes, base64 or data URL).
    """

    settings = settings or Settings()
    trace = _Trace(CLONING_MODE)
    lang = settings.language
    descriptor: Optional[TemplateDescriptor] = None
    try:
        lang = _resolve_language(language, settings)
        content = _check_user_content(user_content, settings)
        if isinstance(template, TemplateDescriptor):
            descriptor = template
        else:
            descriptor = load_template(template, max_bytes=settings.max_template_bytes)

        trace.enter(PipelineState.COMPOSING)
        prompt = compose_cloning_prompt(descriptor, content, lang)

        trace.enter(PipelineState.AWAITING_MODEL)
        text = _call_model(client, ModelRequest(prompt.system, prompt.user))

        trace.enter(PipelineState.VALIDATING)
        instructions = validate_cloning_response(text)

        trace.enter(PipelineState.RECONCILING)
        reconcile_cloning_instructions(instructions, descriptor.total_slides)

        trace.enter(PipelineState.DONE)
    except Exception as exc:
        return PipelineResult(
            success=False,
            mode=CLONING_MODE,
            template=descriptor,
            template_summary=summarize_template(descriptor) if descriptor else None,
            error=_to_pipeline_error(exc, lang, CLONING_MODE),
            states=trace.states,
        )

    logger.info("Generated cloning instructions with %d slides", len(instructions.slides))
    return PipelineResult(
        success=True,
        mode=CLONING_MODE,
        instructions=instructions,
        template=descriptor,
        template_summary=summarize_template(descriptor),
        states=trace.states,
    )


def generate_presentation_file(
    template: Union[bytes, str, None],
    instructions: Union[CloningInstructions, Mapping[str, Any], str, None],
    *,
    generator: Generator = generate_pptx_from_instructions,
    language: Optional[str] = None,
    settings: Optional[Settings] = None,
    day: Optional[date] = None,
) -> GenerationResult:
    """Validate, reconcile and hand cloning instructions to the PPTX generator.

    The generator is only called once the instructions passed reconciliation
    against the template that is actually being cloned.
    """

    settings = settings or Settings()
    trace = _Trace("generate")
    lang = settings.language
    try:
        lang = _resolve_language(language, settings)
        if not instructions:
            raise InvalidInputError("Cloning instructions are required")
        if template is None or not template:
            raise InvalidInputError("No PPTX template provided")
        template_bytes = decode_base64_payload(template) if isinstance(template, str) else bytes(template)

        trace.enter(PipelineState.VALIDATING)
        if isinstance(instructions, CloningInstructions):
            validated = instructions
        elif isinstance(instructions, str):
            validated = validate_cloning_response(instructions)
        else:
            validated = validate_cloning_payload(instructions)
        descriptor = load_template(template_bytes, max_bytes=settings.max_template_bytes)

        trace.enter(PipelineState.RECONCILING)
        reconcile_cloning_instructions(validated, descriptor.total_slides)

        trace.enter(PipelineState.GENERATING)
        try:
            content = generator(template_bytes, validated)
        except ArchitectError:
            raise
        except Exception as exc:
            raise GenerationError(f"PPTX generation failed: {exc}") from exc

        trace.enter(PipelineState.DONE)
    except Exception as exc:
        return GenerationResult(
            success=False,
            error=_to_pipeline_error(exc, lang, "generate"),
            states=trace.states,
        )

    return GenerationResult(
        success=True,
        content=content,
        file_name=generated_file_name(day),
        states=trace.states,
    )


__all__ = [
    "GenerationResult",
    "PipelineResult",
    "PipelineState",
    "generate_cloning_plan",
    "generate_presentation_file",
    "generate_presentation_plan",
    "generated_file_name",
]
