"""
Workflow — named-step engine that threads one state object through a run.

Steps are registered in order; each handler receives the state and two
continuations::

    async def pick_project(state, advance, jump):
        state.project = await prompts.select_item(...)
        advance()                    # next step in registration order
        # or: jump(AppStep.MAIN)     # any registered step
        # or: jump(END)              # finish the run

The engine runs steps strictly one at a time. Continuations only record the
transition; the engine applies it after the handler returns, so loops built
from jumps never deepen the Python stack.

Step identifiers are members of an Enum passed to the constructor, which
lets the engine reject unknown registrations and jump targets, and refuse
to run while any declared step has no handler. Plain strings are accepted
when no Enum is given.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Hashable, Optional, TypeVar, Union

from jiracon.exceptions import UnknownStepError, WorkflowStateError, WorkflowValidationError

logger = logging.getLogger(__name__)

S = TypeVar("S")


class _End:
    """Jump target that finishes the run (the sink)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "END"


END = _End()

StepId = Hashable
Handler = Callable[[Any, Callable[[], None], Callable[[Any], None]], Union[Awaitable[None], None]]
FailureHandler = Callable[[BaseException, Any], Union[Awaitable[None], None]]
DoneHandler = Callable[[Any], Union[Awaitable[None], None]]


class RunStatus(str, Enum):
    COMPLETED = "completed"   # advanced past the last step or jumped to END
    HALTED = "halted"         # a step returned without advancing or jumping
    FAILED = "failed"         # a step raised; the failure handler took over


@dataclass
class WorkflowRun:
    """Outcome of Workflow.run()."""
    status: RunStatus
    state: Any
    error: Optional[BaseException] = None
    trace: list = field(default_factory=list)   # executed step ids, in order

    @property
    def completed(self) -> bool:
        return self.status == RunStatus.COMPLETED


_ADVANCE = object()


class _Transition:
    """Continuations handed to one step execution."""

    def __init__(self, workflow: "Workflow", step: StepId):
        self._workflow = workflow
        self._step = step
        self.target: Any = None

    def _set(self, target: Any) -> None:
        if self.target is not None:
            raise WorkflowStateError(
                f"Step {_label(self._step)!r} already chose its next step",
                details={"step": _label(self._step)},
            )
        self.target = target

    def advance(self) -> None:
        self._set(_ADVANCE)

    def jump(self, step: StepId) -> None:
        if step is not END:
            self._workflow._check_known(step)
        self._set(step)

    def describe(self) -> str:
        if self.target is _ADVANCE:
            return "advance"
        if self.target is END:
            return "end"
        return f"jump:{_label(self.target)}"


def _label(step: Any) -> str:
    if isinstance(step, Enum):
        return str(step.value)
    return str(step)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Workflow(Generic[S]):
    """
    Ordered set of named steps sharing one mutable state per run.

    Args:
        steps:     Optional Enum class closing the set of step identifiers.
        name:      Workflow name used in logs and lifecycle events.
        callbacks: Async callables ``cb(event, data)`` (see jiracon.callbacks).
    """

    def __init__(
        self,
        steps: Optional[type[Enum]] = None,
        name: str = "workflow",
        callbacks: Optional[list] = None,
    ) -> None:
        self._steps = steps
        self.name = name
        self._callbacks = list(callbacks or [])
        self._handlers: dict[StepId, Handler] = {}
        self._failure_handler: Optional[FailureHandler] = None
        self._done_handler: Optional[DoneHandler] = None

    # ── Registration ──────────────────────────────────────────────────────────

    def register(self, step: StepId, handler: Handler) -> "Workflow[S]":
        """Add a step. Re-registering keeps the position and replaces the handler."""
        self._check_declared(step)
        self._handlers[step] = handler
        return self

    def on_failure(self, handler: FailureHandler) -> "Workflow[S]":
        self._failure_handler = handler
        return self

    def on_done(self, handler: DoneHandler) -> "Workflow[S]":
        self._done_handler = handler
        return self

    @property
    def order(self) -> list:
        return list(self._handlers)

    def _check_declared(self, step: StepId) -> None:
        if step is END:
            raise UnknownStepError("END cannot be registered as a step", step=step)
        if self._steps is not None and not isinstance(step, self._steps):
            raise UnknownStepError(
                f"{step!r} is not a {self._steps.__name__} member", step=step,
            )

    def _check_known(self, step: StepId) -> None:
        self._check_declared(step)
        if step not in self._handlers:
            raise UnknownStepError(f"No step registered as {_label(step)!r}", step=step)

    def validate(self) -> list[str]:
        """Return problems that would prevent a run. Empty list means runnable."""
        errors: list[str] = []
        if not self._handlers:
            errors.append("Workflow has no steps.")
        if self._steps is not None:
            for member in self._steps:
                if member not in self._handlers:
                    errors.append(f"Step {member.name} has no handler.")
        return errors

    # ── Execution ─────────────────────────────────────────────────────────────

    async def run(self, state: S, start: Optional[StepId] = None) -> WorkflowRun:
        """Execute steps from ``start`` (default: first registered) until the run ends.

        Raises:
            WorkflowValidationError: declared steps are missing handlers.
            UnknownStepError:        ``start`` is not a registered step.
            Exception:               whatever a step raised, when no failure
                                     handler is registered.
        """
        errors = self.validate()
        if errors:
            raise WorkflowValidationError(
                f"Workflow {self.name!r} is incomplete", violations=errors,
            )

        order = self.order
        current = order[0] if start is None else start
        self._check_known(current)

        trace: list = []
        await self._emit("workflow_started", {"start": _label(current)})

        while True:
            handler = self._handlers[current]
            transition = _Transition(self, current)
            trace.append(current)
            await self._emit("step_started", {"step": _label(current)})

            try:
                await _maybe_await(handler(state, transition.advance, transition.jump))
            except Exception as exc:
                logger.debug("Workflow %s failed in step %s: %s", self.name, _label(current), exc)
                await self._emit("workflow_failed", {"step": _label(current), "error": exc})
                if self._failure_handler is None:
                    raise
                await _maybe_await(self._failure_handler(exc, state))
                return WorkflowRun(RunStatus.FAILED, state, error=exc, trace=trace)

            if transition.target is None:
                logger.warning(
                    "Workflow %s halted: step %s neither advanced nor jumped",
                    self.name, _label(current),
                )
                await self._emit("workflow_halted", {"status": RunStatus.HALTED.value, "steps": len(trace)})
                return WorkflowRun(RunStatus.HALTED, state, trace=trace)

            await self._emit("step_completed", {"step": _label(current), "transition": transition.describe()})

            if transition.target is _ADVANCE:
                index = order.index(current) + 1
                current = order[index] if index < len(order) else END
            else:
                current = transition.target

            if current is END:
                if self._done_handler is not None:
                    await _maybe_await(self._done_handler(state))
                await self._emit("workflow_completed", {"status": RunStatus.COMPLETED.value, "steps": len(trace)})
                return WorkflowRun(RunStatus.COMPLETED, state, trace=trace)

    async def _emit(self, event: str, data: dict) -> None:
        payload = {"workflow": self.name, **data}
        for cb in self._callbacks:
            try:
                await cb(event, payload)
            except Exception as exc:
                logger.warning("Callback %r failed on %s: %s", cb, event, exc)
