"""Model invocation boundary: provider clients returning tagged outcomes."""

from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Protocol, Tuple

import anthropic
import google.generativeai as genai
import openai
from google.api_core import exceptions as google_exceptions

from src.config import Settings

from .data_handler import decode_base64_payload
from .errors import InvalidInputError

logger = logging.getLogger(__name__)

_DATA_URL_MIME = re.compile(r"^data:([\w.+\-/]+);base64,", re.IGNORECASE)
_DEFAULT_IMAGE_MIME = "image/png"


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class ModelImage:
    mime_type: str
    data: bytes

    @classmethod
    def from_base64(cls, payload: str) -> "ModelImage":
        """Build an image from a base64 string or a ``data:image/...`` URL."""
        if not isinstance(payload, str):
            raise InvalidInputError("Template images must be base64 strings")
        match = _DATA_URL_MIME.match(payload.strip())
        mime_type = match.group(1).lower() if match else _DEFAULT_IMAGE_MIME
        return cls(mime_type=mime_type, data=decode_base64_payload(payload))

    def as_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


@dataclass(frozen=True)
class ModelRequest:
    system_prompt: str
    user_prompt: str
    images: Tuple[ModelImage, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ModelOutcome:
    """Tagged result of one model call; ``text`` is only set on success."""

    status: OutcomeStatus
    text: str = ""
    error_message: Optional[str] = None

    @classmethod
    def success(cls, text: str) -> "ModelOutcome":
        return cls(status=OutcomeStatus.SUCCESS, text=text)

    @classmethod
    def failure(cls, status: OutcomeStatus, message: str) -> "ModelOutcome":
        if status is OutcomeStatus.SUCCESS:
            raise ValueError("failure outcome needs a non-success status")
        return cls(status=status, error_message=message)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


class ModelClient(Protocol):
    def invoke(self, request: ModelRequest) -> ModelOutcome:
        ...


_TIMEOUT_ERRORS = (
    openai.APITimeoutError,
    anthropic.APITimeoutError,
    google_exceptions.DeadlineExceeded,
    TimeoutError,
)
_RATE_LIMIT_ERRORS = (
    openai.RateLimitError,
    anthropic.RateLimitError,
    google_exceptions.ResourceExhausted,
    google_exceptions.TooManyRequests,
)
_TRANSPORT_ERRORS = (
    openai.APIConnectionError,
    anthropic.APIConnectionError,
    google_exceptions.ServiceUnavailable,
    ConnectionError,
)


def classify_exception(exc: BaseException, *, match_message: bool = True) -> Optional[OutcomeStatus]:
    """Map an exception raised by a provider SDK to an outcome status.

    SDK exception types are checked first. With ``match_message`` anything
    else falls back to a message check (``timeout`` / ``rate``); ``None``
    means unclassified.
    """

    # openai's timeout error subclasses its connection error, so timeouts go first
    if isinstance(exc, _TIMEOUT_ERRORS):
        return OutcomeStatus.TIMEOUT
    if isinstance(exc, _RATE_LIMIT_ERRORS):
        return OutcomeStatus.RATE_LIMITED
    if isinstance(exc, _TRANSPORT_ERRORS):
        return OutcomeStatus.TRANSPORT_ERROR
    if not match_message:
        return None

    message = str(exc).lower()
    if "timeout" in message or "timed out" in message:
        return OutcomeStatus.TIMEOUT
    if "rate" in message:
        return OutcomeStatus.RATE_LIMITED
    return None


def _failure_from(exc: Exception, provider: str) -> ModelOutcome:
    status = classify_exception(exc, match_message=False) or OutcomeStatus.TRANSPORT_ERROR
    logger.warning("%s invocation failed (%s): %s", provider, status.value, exc)
    return ModelOutcome.failure(status, str(exc) or exc.__class__.__name__)


class GeminiClient:
    def __init__(self, api_key: str, model_name: str, *, timeout: int = 120, max_output_tokens: int = 8192) -> None:
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.timeout = timeout
        self.max_output_tokens = max_output_tokens

    def invoke(self, request: ModelRequest) -> ModelOutcome:
        model = genai.GenerativeModel(self.model_name, system_instruction=request.system_prompt)
        parts: List[Any] = [{"mime_type": image.mime_type, "data": image.data} for image in request.images]
        parts.append(request.user_prompt)
        try:
            response = model.generate_content(
                parts,
                generation_config={"max_output_tokens": self.max_output_tokens},
                request_options={"timeout": self.timeout},
            )
            text = response.text or ""
        except Exception as exc:
            return _failure_from(exc, "Gemini")
        return ModelOutcome.success(text.strip())


class OpenAIClient:
    def __init__(self, api_key: str, model_name: str, *, timeout: int = 120, max_output_tokens: int = 8192) -> None:
        self._client = openai.OpenAI(api_key=api_key, timeout=timeout)
        self.model_name = model_name
        self.max_output_tokens = max_output_tokens

    def invoke(self, request: ModelRequest) -> ModelOutcome:
        content: List[dict] = [
            {
                "type": "image_url",
                "image_url": {"url": f"data:{image.mime_type};base64,{image.as_base64()}"},
            }
            for image in request.images
        ]
        content.append({"type": "text", "text": request.user_prompt})
        try:
            response = self._client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": request.system_prompt},
                    {"role": "user", "content": content},
                ],
                max_tokens=self.max_output_tokens,
                response_format={"type": "json_object"},
            )
        except Exception as exc:
            return _failure_from(exc, "OpenAI")

        message = response.choices[0].message
        text = message.content
        if isinstance(text, list):
            text = "".join(getattr(part, "text", "") for part in text)
        return ModelOutcome.success((text or "").strip())


class AnthropicClient:
    def __init__(self, api_key: str, model_name: str, *, timeout: int = 120, max_output_tokens: int = 8192) -> None:
        self._client = anthropic.Anthropic(api_key=api_key, timeout=timeout)
        self.model_name = model_name
        self.max_output_tokens = max_output_tokens

    def invoke(self, request: ModelRequest) -> ModelOutcome:
        content: List[dict] = [
            {
                "type": "image",
                "source": {"type": "base64", "media_type": image.mime_type, "data": image.as_base64()},
            }
            for image in request.images
        ]
        content.append({"type": "text", "text": request.user_prompt})
        try:
            response = self._client.messages.create(
                model=self.model_name,
                max_tokens=self.max_output_tokens,
                system=request.system_prompt,
                messages=[{"role": "user", "content": content}],
            )
        except Exception as exc:
            return _failure_from(exc, "Anthropic")

        text = "".join(block.text for block in response.content if getattr(block, "type", None) == "text")
        return ModelOutcome.success(text.strip())


def build_model_client(settings: Settings) -> ModelClient:
    """Construct the client for ``settings.provider``."""

    options = {"timeout": settings.request_timeout, "max_output_tokens": settings.max_output_tokens}
    if settings.provider == "openai":
        if not settings.openai_api_key:
            raise RuntimeError("OPENAI_API_KEY must be set to call OpenAI models.")
        return OpenAIClient(settings.openai_api_key, settings.openai_model, **options)
    if settings.provider == "anthropic":
        if not settings.anthropic_api_key:
            raise RuntimeError("ANTHROPIC_API_KEY must be set to call Anthropic models.")
        return AnthropicClient(settings.anthropic_api_key, settings.anthropic_model, **options)
    if not settings.google_api_key:
        raise RuntimeError("GOOGLE_API_KEY must be set to call Gemini.")
    return GeminiClient(settings.google_api_key, settings.gemini_model, **options)


__all__ = [
    "AnthropicClient",
    "GeminiClient",
    "ModelClient",
    "ModelImage",
    "ModelOutcome",
    "ModelRequest",
    "OpenAIClient",
    "OutcomeStatus",
    "build_model_client",
    "classify_exception",
]
