"""@task decorator for registering project tasks offered in the console menu.

Usage:
    @task(name="Edit Issues", summary="Edit issues fields")
    async def edit_issues(project: Project, services: TaskServices) -> Any:
        ...

Tasks are collected at import time, in import order.
"""

import functools
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from rich.console import Console

from jiracon.types import Project

TaskFn = Callable[[Project, "TaskServices"], Awaitable[Any]]


@dataclass
class TaskServices:
    """Collaborators handed to every task."""
    jira: Any                       # JiraService
    prompts: Any                    # Prompts
    fields: Any                     # FieldValueResolver
    console: Console
    assignee_roster: list[dict] = field(default_factory=list)
    callbacks: list = field(default_factory=list)


@dataclass(frozen=True)
class RegisteredTask:
    name: str
    summary: str
    run: TaskFn


# Global registry for decorated tasks — collected at import time
_registered_tasks: dict[str, RegisteredTask] = {}


def task(name: str = None, summary: str = None):
    """Decorator to register a coroutine function as a console task.

    Args:
        name:    Menu title (defaults to the function name in title case)
        summary: Menu hint (defaults to the first docstring line)
    """
    def decorator(func: TaskFn) -> TaskFn:
        task_name = name or func.__name__.replace("_", " ").title()
        task_summary = summary or (func.__doc__ or "").strip().split("\n")[0]

        @functools.wraps(func)
        async def wrapper(project: Project, services: TaskServices) -> Any:
            return await func(project, services)

        _registered_tasks[task_name] = RegisteredTask(task_name, task_summary, wrapper)
        wrapper._jiracon_task = _registered_tasks[task_name]
        return wrapper

    return decorator


def get_tasks() -> list[RegisteredTask]:
    """Return all tasks registered via @task, in registration order."""
    return list(_registered_tasks.values())
