from jiracon.callbacks.base import BaseCallback, WorkflowCallback
from jiracon.callbacks.logging import LoggingCallback

__all__ = ["BaseCallback", "WorkflowCallback", "LoggingCallback"]
