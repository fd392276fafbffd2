"""Resume contracts: untrusted raw input and its sanitized form."""

from typing import Any

from pydantic import BaseModel


class RawResume(BaseModel):
    """Resume sections as they arrive from the document layer.

    Nothing here is trusted; every field is optional and loosely typed
    until sanitize_resume() turns it into a SanitizedResume.
    """
    title: str | None = None
    personal_details: dict[str, Any] = {}
    work_experience: list[dict[str, Any]] = []
    skills: str | list[str] | None = None
    projects: list[dict[str, Any]] = []
    education: list[dict[str, Any]] = []


class PersonalDetails(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    summary: str = ""


class WorkExperience(BaseModel):
    job_title: str = ""
    company: str = ""
    start_date: str = ""  # YYYY-MM-DD or empty
    end_date: str = ""  # empty means current
    description: str = ""
    achievements: list[str] = []


class Project(BaseModel):
    name: str = ""
    description: str = ""
    technologies: list[str] = []


class SanitizedResume(BaseModel):
    title: str = ""
    personal_details: PersonalDetails = PersonalDetails()
    work_experience: list[WorkExperience] = []
    skills: list[str] = []
    projects: list[Project] = []

    model_config = {"frozen": True}

    def experience_text(self) -> str:
        """All descriptions and achievements joined, for density and evidence checks."""
        parts: list[str] = []
        for exp in self.work_experience:
            parts.append(exp.job_title)
            parts.append(exp.description)
            parts.extend(exp.achievements)
        return "\n".join(p for p in parts if p)

    def full_text(self) -> str:
        """Title, summary, skills, experience and projects as one document."""
        parts = [
            self.title,
            self.personal_details.summary,
            ", ".join(self.skills),
            self.experience_text(),
            *(f"{p.name}: {p.description}" for p in self.projects),
        ]
        return "\n".join(p for p in parts if p)
