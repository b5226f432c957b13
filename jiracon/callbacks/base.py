"""Base callback protocol for workflow lifecycle hooks.

Callbacks are called at key points of a workflow run. Implement this
protocol to observe or instrument jiracon without modifying core logic.

Usage:
    class MyCallback(BaseCallback):
        async def on_step_start(self, workflow, step, **kw):
            print(f"{workflow} → {step}")

    flow = Workflow(EditIssuesStep, callbacks=[MyCallback()])
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class WorkflowCallback(Protocol):
    """Protocol defining hooks for workflow lifecycle events.

    All methods are optional — implement only the hooks you need.
    All methods are async; the engine awaits each registered callback in order.
    """

    async def on_workflow_start(self, workflow: str, start: str, **kwargs: Any) -> None:
        """Called before the first step of a run."""
        ...

    async def on_step_start(self, workflow: str, step: str, **kwargs: Any) -> None:
        ...

    async def on_step_complete(self, workflow: str, step: str, transition: str, **kwargs: Any) -> None:
        """Called after a step returned; transition is "advance", "jump:<step>" or "end"."""
        ...

    async def on_workflow_complete(self, workflow: str, status: str, steps: int, **kwargs: Any) -> None:
        """Called when a run completes or halts."""
        ...

    async def on_error(self, workflow: str, step: str, error: Exception, **kwargs: Any) -> None:
        """Called when a step raised; fires before the failure handler."""
        ...


class BaseCallback:
    """Concrete base with no-op implementations of all hooks.

    Subclass this instead of implementing the Protocol directly. Instances
    are callable as ``await cb(event, data)``, which is what the engine uses.
    """

    async def __call__(self, event: str, data: dict) -> None:
        workflow = data.get("workflow", "")
        if event == "workflow_started":
            await self.on_workflow_start(workflow, data.get("start", ""))
        elif event == "step_started":
            await self.on_step_start(workflow, data.get("step", ""))
        elif event == "step_completed":
            await self.on_step_complete(workflow, data.get("step", ""), data.get("transition", ""))
        elif event in ("workflow_completed", "workflow_halted"):
            await self.on_workflow_complete(workflow, data.get("status", ""), data.get("steps", 0))
        elif event == "workflow_failed":
            await self.on_error(workflow, data.get("step", ""), data.get("error"))

    async def on_workflow_start(self, workflow: str, start: str, **kwargs: Any) -> None:
        pass

    async def on_step_start(self, workflow: str, step: str, **kwargs: Any) -> None:
        pass

    async def on_step_complete(self, workflow: str, step: str, transition: str, **kwargs: Any) -> None:
        pass

    async def on_workflow_complete(self, workflow: str, status: str, steps: int, **kwargs: Any) -> None:
        pass

    async def on_error(self, workflow: str, step: str, error: Exception, **kwargs: Any) -> None:
        pass
