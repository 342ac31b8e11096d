"""Error taxonomy shared by every stage of the slide architect pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid-input"
    TEMPLATE_INVALID = "template-invalid"
    UPSTREAM_INVALID_RESPONSE = "upstream-invalid-response"
    UPSTREAM_SCHEMA_VIOLATION = "upstream-schema-violation"
    UPSTREAM_TIMEOUT = "upstream-timeout"
    UPSTREAM_RATE_LIMITED = "upstream-rate-limited"
    REFERENCE_OUT_OF_BOUNDS = "reference-out-of-bounds"
    GENERATION_FAILURE = "generation-failure"
    UNKNOWN = "unknown"


_MESSAGES: Dict[str, Dict[ErrorKind, str]] = {
    "en": {
        ErrorKind.INVALID_INPUT: "The request is missing required input.",
        ErrorKind.TEMPLATE_INVALID: "The template file could not be read.",
        ErrorKind.UPSTREAM_INVALID_RESPONSE: "The AI response is not valid JSON.",
        ErrorKind.UPSTREAM_SCHEMA_VIOLATION: "The AI response does not match the expected structure.",
        ErrorKind.UPSTREAM_TIMEOUT: "The analysis took too long. Please try again.",
        ErrorKind.UPSTREAM_RATE_LIMITED: "Too many requests. Please wait a few minutes.",
        ErrorKind.REFERENCE_OUT_OF_BOUNDS: "The AI referenced a template slide that does not exist.",
        ErrorKind.GENERATION_FAILURE: "The presentation file could not be generated.",
        ErrorKind.UNKNOWN: "An unexpected error occurred.",
    },
    "fr": {
        ErrorKind.INVALID_INPUT: "Des données obligatoires sont manquantes.",
        ErrorKind.TEMPLATE_INVALID: "Erreur lors de l'analyse du fichier template.",
        ErrorKind.UPSTREAM_INVALID_RESPONSE: "La réponse de l'IA n'est pas un JSON valide.",
        ErrorKind.UPSTREAM_SCHEMA_VIOLATION: "La réponse de l'IA ne respecte pas la structure attendue.",
        ErrorKind.UPSTREAM_TIMEOUT: "L'analyse a pris trop de temps. Réessayez.",
        ErrorKind.UPSTREAM_RATE_LIMITED: "Trop de requêtes. Attendez quelques minutes.",
        ErrorKind.REFERENCE_OUT_OF_BOUNDS: "L'IA a référencé une slide du template qui n'existe pas.",
        ErrorKind.GENERATION_FAILURE: "Erreur lors de la génération du PPTX.",
        ErrorKind.UNKNOWN: "Une erreur s'est produite.",
    },
}


def user_message(kind: ErrorKind, language: str = "en") -> str:
    messages = _MESSAGES.get(language) or _MESSAGES["en"]
    return messages[kind]


class ArchitectError(Exception):
    """Base class for failures raised inside the pipeline stages."""

    kind: ErrorKind = ErrorKind.UNKNOWN


class InvalidInputError(ArchitectError, ValueError):
    kind = ErrorKind.INVALID_INPUT


class TemplateParseError(ArchitectError, ValueError):
    kind = ErrorKind.TEMPLATE_INVALID


class InvalidResponseError(ArchitectError, ValueError):
    kind = ErrorKind.UPSTREAM_INVALID_RESPONSE


class SchemaViolationError(ArchitectError, ValueError):
    kind = ErrorKind.UPSTREAM_SCHEMA_VIOLATION

    def __init__(self, message: str, *, location: str = "", mode: str = "") -> None:
        super().__init__(message)
        self.location = location
        self.mode = mode


class ReferenceOutOfBoundsError(ArchitectError, ValueError):
    kind = ErrorKind.REFERENCE_OUT_OF_BOUNDS

    def __init__(self, message: str, *, index: int, upper: int, slide_number: Optional[int] = None) -> None:
        super().__init__(message)
        self.index = index
        self.upper = upper
        self.slide_number = slide_number


class UpstreamError(ArchitectError):
    """A model call that came back as a failure outcome."""

    def __init__(self, message: str, *, kind: ErrorKind = ErrorKind.UNKNOWN) -> None:
        super().__init__(message)
        self.kind = kind


class GenerationError(ArchitectError, RuntimeError):
    kind = ErrorKind.GENERATION_FAILURE


@dataclass(frozen=True)
class PipelineError:
    """The single typed error value a pipeline invocation hands back."""

    kind: ErrorKind
    message: str
    details: Optional[str] = None

    @classmethod
    def from_kind(cls, kind: ErrorKind, details: Optional[str] = None, *, language: str = "en") -> "PipelineError":
        return cls(kind=kind, message=user_message(kind, language), details=details)

    @classmethod
    def from_exception(cls, exc: BaseException, *, language: str = "en") -> "PipelineError":
        kind = exc.kind if isinstance(exc, ArchitectError) else ErrorKind.UNKNOWN
        return cls.from_kind(kind, str(exc) or exc.__class__.__name__, language=language)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.kind.value, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


__all__ = [
    "ArchitectError",
    "ErrorKind",
    "GenerationError",
    "InvalidInputError",
    "InvalidResponseError",
    "PipelineError",
    "ReferenceOutOfBoundsError",
    "SchemaViolationError",
    "TemplateParseError",
    "UpstreamError",
    "user_message",
]
