"""All shared types, enums, and type aliases. Everything imports from here."""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ── Enums ──────────────────────────────────────────────────────────────

class FieldType(str, Enum):
    NUMBER = "number"
    STRING = "string"
    DATETIME = "datetime"
    DATE = "date"
    USER = "user"
    PRIORITY = "priority"
    VERSION = "version"
    ISSUETYPE = "issuetype"
    RESOLUTION = "resolution"

# Types entered (or reduced to) a plain scalar
PRIMITIVE_TYPES = frozenset({FieldType.NUMBER, FieldType.STRING, FieldType.DATETIME, FieldType.DATE})

class ProjectType(str, Enum):
    SCRUM = "scrum"     # active issues = open sprints
    KANBAN = "kanban"   # active issues = whole project

class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


# ── Input schema (tagged variant) ──────────────────────────────────────

class InputSchemaBase(BaseModel):
    """Shape shared by every resolved field input."""
    model_config = ConfigDict(frozen=True)

    name: str
    type: FieldType
    multiple: bool = False
    allowed_values: Optional[list[Any]] = None
    auto_complete_url: Optional[str] = None

class PrimitiveInput(InputSchemaBase):
    """Free entry: text, number or date prompt."""
    source: Literal["primitive"] = "primitive"

class AllowedValuesInput(InputSchemaBase):
    """Selection from the static list Jira sent with the metadata."""
    source: Literal["allowed_values"] = "allowed_values"
    allowed_values: list[Any]

class AutoCompleteInput(InputSchemaBase):
    """Selection from a remote search endpoint."""
    source: Literal["auto_complete"] = "auto_complete"
    auto_complete_url: str

InputSchema = Annotated[
    Union[PrimitiveInput, AllowedValuesInput, AutoCompleteInput],
    Field(discriminator="source"),
]


# ── Jira records ───────────────────────────────────────────────────────

class Project(BaseModel):
    id: str
    key: str
    name: str
    type: ProjectType = ProjectType.SCRUM

class Issue(BaseModel):
    id: str
    key: str
    summary: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)

class FieldRef(BaseModel):
    """An editable field as offered in the field picker."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str

class Version(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    archived: bool = False
    released: bool = False


# ── Bulk requests ──────────────────────────────────────────────────────

class BulkRequest(BaseModel):
    """One gateway call inside a batch."""
    method: HttpMethod = HttpMethod.GET
    path: str                                   # may contain :placeholders
    params: dict[str, Any] = Field(default_factory=dict)

class BulkOutcome(BaseModel):
    """Settled result of one batch item."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    ok: bool
    result: Any = None
    error: Optional[Exception] = None

    @property
    def message(self) -> str:
        return str(self.error) if self.error is not None else ""
