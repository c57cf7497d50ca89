"""Warnings and the error taxonomy shared by every pipeline stage.

Errors carry structured data only (kind, message, details and the warnings
collected before the failure). Turning them into text for a terminal is the
caller's job, see ``curlconverter.cli.render_error``.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class WarningKind(str, Enum):
    DEPRECATED_FLAG = "deprecated-flag"
    UNKNOWN_FLAG = "unknown-flag"
    LOSSY_TRANSLATION = "lossy-translation"
    AMBIGUOUS_FLAG_COMBINATION = "ambiguous-flag-combination"


class ConversionWarning(BaseModel):
    """A non-fatal diagnostic about an imperfect translation step."""

    model_config = ConfigDict(frozen=True)

    kind: WarningKind
    message: str


def warn(kind: WarningKind, message: str) -> ConversionWarning:
    return ConversionWarning(kind=kind, message=message)


class CurlConverterError(Exception):
    """Base class for every error that aborts the conversion pipeline."""

    kind = "error"

    def __init__(self, message: str, *, details: dict | None = None, warnings: list[ConversionWarning] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.warnings: list[ConversionWarning] = list(warnings or [])

    def with_prior_warnings(self, prior: list[ConversionWarning]) -> "CurlConverterError":
        """Prepend warnings from earlier stages, keeping encounter order."""
        self.warnings = list(prior) + self.warnings
        return self


class ArgumentSyntaxError(CurlConverterError):
    """A flag or token could not be classified."""

    kind = "argument-syntax"


class UnsupportedLanguageError(CurlConverterError):
    """The requested --language key is not registered."""

    kind = "unsupported-language"


class RequestBuildError(CurlConverterError):
    """Missing or malformed URL, or an irreconcilable flag combination."""

    kind = "request-build"


class GenerationError(CurlConverterError):
    """A backend cannot express the request in its target idiom at all."""

    kind = "generation"
