"""Technology relationship map entries."""

from pydantic import BaseModel, Field


class TechGroup(BaseModel):
    """A primary technology and the skills that partially substitute for it."""
    primary: str
    related: tuple[str, ...] = ()
    compensation: float = Field(default=0.5, ge=0.0, le=1.0)
    context: tuple[str, ...] = ()

    model_config = {"frozen": True}

    @property
    def members(self) -> tuple[str, ...]:
        return (self.primary, *self.related)


class GroupLocation(BaseModel):
    """Where a skill was found in the registry."""
    domain: str
    subcategory: str
    group: TechGroup

    model_config = {"frozen": True}
