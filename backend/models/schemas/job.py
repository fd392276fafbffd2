"""Job-side contracts: the job under assessment and its classification."""

from enum import Enum

from pydantic import BaseModel, Field


class JobCategory(str, Enum):
    TECHNICAL = "TECHNICAL"
    MANAGEMENT = "MANAGEMENT"
    CREATIVE = "CREATIVE"
    GENERAL = "GENERAL"


class JobDetails(BaseModel):
    """A target job as supplied by the document layer."""
    job_title: str = ""
    company: str = ""
    job_description: str = ""
    required_skills: list[str] = []  # explicit requirements, merged with extracted ones


class JobClassification(BaseModel):
    category: JobCategory = JobCategory.GENERAL
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    matched_keywords: list[str] = []
    suggested_skills: list[str] = []

    model_config = {"frozen": True}
