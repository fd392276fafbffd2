"""Exception types raised by the compatibility engine."""

from models.schemas.assessment import ValidationErrorResult


class CompatibilityError(Exception):
    """Base class for engine errors."""


class AssessmentValidationError(CompatibilityError):
    """Input is missing required fields; the assessment cannot run.

    Carries a ValidationErrorResult so callers can report it without
    confusing it with a low score.
    """

    def __init__(self, errors: list[str], warnings: list[str] | None = None):
        self.result = ValidationErrorResult(errors=list(errors), warnings=list(warnings or []))
        super().__init__("; ".join(errors) or "validation failed")

    @property
    def errors(self) -> list[str]:
        return self.result.errors

    @property
    def warnings(self) -> list[str]:
        return self.result.warnings


class AssessmentUnavailableError(CompatibilityError):
    """Similarity is required by configuration but could not be obtained."""


class SimilarityUnavailableError(CompatibilityError):
    """The embedding provider failed, timed out, or is not configured."""


class RegistryError(CompatibilityError):
    """A technology registry violates its structural invariants."""
