"""jiracon.api — Jira request gateway, bulk fan-out, and typed resources."""

from .bulk import BulkOrchestrator
from .gateway import RequestGateway
from .jira import JiraService

__all__ = ["RequestGateway", "BulkOrchestrator", "JiraService"]
