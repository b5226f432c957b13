"""jiracon — guided Jira workflows in the terminal.

Usage:
    from jiracon import Workflow, END, generate_input_schema

    flow = Workflow(MyStep, name="demo")
    flow.register(MyStep.FIRST, first)
    run = await flow.run(state)
"""

from jiracon.types import (
    FieldType, ProjectType, HttpMethod, PrimitiveInput, AllowedValuesInput,
    AutoCompleteInput, InputSchema, Project, Issue, FieldRef, Version,
    BulkRequest, BulkOutcome,
)
from jiracon.exceptions import (
    JiraconError, GatewayError, TransportError, RemoteError, WorkflowError,
    UnknownStepError, WorkflowValidationError, WorkflowStateError,
    FieldValueError, UnsupportedFieldError, NoAvailableValuesError,
    FieldValidationError, PromptCancelledError, ConfigError,
)
from jiracon.workflows import END, RunStatus, Workflow, WorkflowRun
from jiracon.input.schema import generate_input_schema, is_supported_field
from jiracon.version import __version__

__all__ = [
    "FieldType", "ProjectType", "HttpMethod", "PrimitiveInput", "AllowedValuesInput",
    "AutoCompleteInput", "InputSchema", "Project", "Issue", "FieldRef", "Version",
    "BulkRequest", "BulkOutcome",
    "JiraconError", "GatewayError", "TransportError", "RemoteError", "WorkflowError",
    "UnknownStepError", "WorkflowValidationError", "WorkflowStateError",
    "FieldValueError", "UnsupportedFieldError", "NoAvailableValuesError",
    "FieldValidationError", "PromptCancelledError", "ConfigError",
    "Workflow", "WorkflowRun", "RunStatus", "END",
    "generate_input_schema", "is_supported_field",
    "__version__",
]
