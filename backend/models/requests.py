from pydantic import BaseModel, Field

from models.schemas.job import JobDetails
from models.schemas.resume import RawResume


class CompatibilityRequest(BaseModel):
    resume: RawResume
    job: JobDetails


class SanitizeRequest(BaseModel):
    resume: RawResume = Field(..., description="Raw resume sections to clean and score")
