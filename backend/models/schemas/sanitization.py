"""Sanitization pipeline output."""

from datetime import datetime

from pydantic import BaseModel, Field

from models.schemas.resume import SanitizedResume


class SanitizationMetrics(BaseModel):
    completeness: float = Field(default=0.0, ge=0.0, le=1.0)
    quality: float = Field(default=0.0, ge=0.0, le=1.0)
    consistency: float = Field(default=1.0, ge=0.0, le=1.0)


class SanitizationMetadata(BaseModel):
    stages_run: list[str] = []
    sanitized_at: datetime | None = None


class SanitizationResult(BaseModel):
    data: SanitizedResume = SanitizedResume()
    metadata: SanitizationMetadata = SanitizationMetadata()
    metrics: SanitizationMetrics = SanitizationMetrics()
    warnings: list[str] = []
    errors: list[str] = []  # non-empty blocks assessment

    @property
    def is_valid(self) -> bool:
        return not self.errors
