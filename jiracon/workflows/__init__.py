"""jiracon.workflows — named-step workflow engine."""

from .engine import END, RunStatus, Workflow, WorkflowRun

__all__ = ["Workflow", "WorkflowRun", "RunStatus", "END"]
