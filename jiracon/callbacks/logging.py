"""Structured JSON logging callback for workflow lifecycle events."""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from jiracon.callbacks.base import BaseCallback

logger = logging.getLogger("jiracon.audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class LoggingCallback(BaseCallback):
    """Emits one JSON log line per lifecycle event.

    Each line carries ``event``, ``ts`` and the workflow name. Step starts
    are DEBUG (the bulk-edit loop produces many), errors are ERROR, the rest
    INFO. Logger name: jiracon.audit.

        flow = Workflow(AppStep, callbacks=[LoggingCallback()])
    """

    async def on_workflow_start(self, workflow: str, start: str, **kwargs: Any) -> None:
        logger.info(json.dumps({
            "event": "workflow_start",
            "ts": _now(),
            "workflow": workflow,
            "start": start,
        }))

    async def on_step_start(self, workflow: str, step: str, **kwargs: Any) -> None:
        logger.debug(json.dumps({
            "event": "step_start",
            "ts": _now(),
            "workflow": workflow,
            "step": step,
        }))

    async def on_step_complete(self, workflow: str, step: str, transition: str, **kwargs: Any) -> None:
        logger.info(json.dumps({
            "event": "step_complete",
            "ts": _now(),
            "workflow": workflow,
            "step": step,
            "transition": transition,
        }))

    async def on_workflow_complete(self, workflow: str, status: str, steps: int, **kwargs: Any) -> None:
        logger.info(json.dumps({
            "event": "workflow_complete",
            "ts": _now(),
            "workflow": workflow,
            "status": status,
            "steps": steps,
        }))

    async def on_error(self, workflow: str, step: str, error: Exception, **kwargs: Any) -> None:
        logger.error(json.dumps({
            "event": "workflow_error",
            "ts": _now(),
            "workflow": workflow,
            "step": step,
            "error_type": type(error).__name__ if error is not None else "",
            "error": str(error) if error is not None else "",
        }))
