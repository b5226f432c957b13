"""Typed exception hierarchy. Every error jiracon can raise."""


class JiraconError(Exception):
    """Base exception for all jiracon errors."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}


# ── Request gateway ──────────────────────────────────────────────────────────


class GatewayError(JiraconError):
    """A single Jira API call failed."""
    def __init__(self, message: str, method: str = "", path: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.method = method
        self.path = path


class TransportError(GatewayError):
    """The request never produced an HTTP response (DNS, connect, timeout)."""
    pass


class RemoteError(GatewayError):
    """Jira answered with a status outside 200-299."""
    def __init__(self, message: str, status_code: int = 0, body=None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.body = body


# ── Workflows ────────────────────────────────────────────────────────────────


class WorkflowError(JiraconError):
    """Base exception for all workflow-related errors."""
    pass


class UnknownStepError(WorkflowError):
    """A step identifier is not part of the workflow's step set."""
    def __init__(self, message: str, step=None, **kwargs):
        super().__init__(message, **kwargs)
        self.step = step


class WorkflowValidationError(WorkflowError):
    """Workflow definition is incomplete (steps declared but never registered)."""
    def __init__(self, message: str, violations: list = None, **kwargs):
        super().__init__(message, **kwargs)
        self.violations = violations or []


class WorkflowStateError(WorkflowError):
    """Invalid control transition, e.g. a step advancing twice."""
    pass


# ── Field input ──────────────────────────────────────────────────────────────


class FieldValueError(JiraconError):
    """A field value could not be obtained."""
    def __init__(self, message: str, field_name: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.field_name = field_name


class UnsupportedFieldError(FieldValueError):
    """The field's edit metadata cannot be turned into an input."""
    pass


class NoAvailableValuesError(FieldValueError):
    """The field offers an allowed-values list, but it is empty."""
    pass


class FieldValidationError(FieldValueError):
    """User input does not match the field type."""
    pass


class PromptCancelledError(JiraconError):
    """The user aborted a prompt (Ctrl-C)."""
    pass


class ConfigError(JiraconError):
    """Configuration file is missing, unreadable or invalid."""
    def __init__(self, message: str, path: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.path = path
