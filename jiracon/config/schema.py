"""Pydantic models for YAML configuration validation.

These mirror jiracon/types.py structures but accept loose YAML input
(e.g., type: "Kanban") and coerce it to the correct enums.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from jiracon.types import ProjectType


class AccountYAML(BaseModel):
    """Credentials block of config.yml."""

    base_url: str = ""
    username: str = ""
    password: str = ""

    @field_validator("base_url")
    @classmethod
    def strip_slash(cls, v: str) -> str:
        return v.rstrip("/")


class RosterEntry(BaseModel):
    id: str
    key: str
    name: str


class PreferencesYAML(BaseModel):
    page_size: Optional[int] = None
    assignee_roster: list[RosterEntry] = Field(default_factory=list)


class ConfigYAML(BaseModel):
    """Root schema for config.yml."""
    account: AccountYAML = Field(default_factory=AccountYAML)
    preferences: PreferencesYAML = Field(default_factory=PreferencesYAML)


class ProjectYAML(BaseModel):
    """A saved project entry in data.yml."""

    id: str
    key: str
    name: str
    type: ProjectType = ProjectType.SCRUM

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v):
        if isinstance(v, str):
            return ProjectType(v.lower())
        return v


class DataYAML(BaseModel):
    """Root schema for data.yml."""
    projects: list[ProjectYAML] = Field(default_factory=list)
