"""jiracon.tasks — project tasks offered after a project is selected.

Importing this package registers the built-in tasks.
"""

from jiracon.tasks.registry import RegisteredTask, TaskServices, get_tasks, task
from jiracon.tasks import edit_issues, create_version  # noqa: F401  registers the @task functions

__all__ = ["RegisteredTask", "TaskServices", "get_tasks", "task"]
