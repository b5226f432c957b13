"""
ConsoleApp — the top-level menu workflow.

    MAIN ─┬─ SELECT_PROJECT → SELECT_TASK → CONTINUE_CONFIRM ─┬─ (yes) SELECT_PROJECT
          │                                                   └─ (no)  END
          ├─ MANAGE_PROJECTS → MAIN
          └─ CONFIGURATIONS  → MAIN

A failing step prints the error and the console starts over at MAIN.
Cancelling the main menu ends the session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from rich.console import Console
from rich.markup import escape

from jiracon.config import ProjectStore, read_config_text, write_config_text
from jiracon.exceptions import ConfigError, JiraconError, PromptCancelledError
from jiracon.tasks import RegisteredTask, TaskServices, get_tasks
from jiracon.types import Project
from jiracon.workflows import END, RunStatus, Workflow, WorkflowRun

logger = logging.getLogger(__name__)


class AppStep(str, Enum):
    MAIN = "main"
    SELECT_PROJECT = "select_project"
    SELECT_TASK = "select_task"
    CONTINUE_CONFIRM = "continue_confirm"
    MANAGE_PROJECTS = "manage_projects"
    CONFIGURATIONS = "configurations"


@dataclass
class MenuEntry:
    title: str
    summary: str
    step: AppStep


MAIN_MENU = [
    MenuEntry("Select Project", "Select from the already added projects", AppStep.SELECT_PROJECT),
    MenuEntry("Manage Projects", "Add and remove projects", AppStep.MANAGE_PROJECTS),
    MenuEntry("Configurations and Preferences", "View and edit the configurations and preferences",
              AppStep.CONFIGURATIONS),
]


@dataclass
class AppState:
    project: Optional[Project] = None
    task: Optional[RegisteredTask] = None
    config_draft: Optional[str] = None      # editor text kept across invalid saves
    runs: int = 0
    errors: list[str] = field(default_factory=list)


class ConsoleApp:
    """
    Interactive session over injected services.

    Args:
        services:    Collaborators shared with the tasks.
        store:       Saved projects.
        config_file: config.yml opened by "Configurations and Preferences".
        tasks:       Tasks offered for a project (default: every @task).
    """

    def __init__(
        self,
        services: TaskServices,
        store: ProjectStore,
        config_file: Optional[Path] = None,
        tasks: Optional[list[RegisteredTask]] = None,
    ):
        self.services = services
        self.prompts = services.prompts
        self.console: Console = services.console
        self.store = store
        self.config_file = config_file
        self.tasks = tasks if tasks is not None else get_tasks()

        self.flow: Workflow[AppState] = Workflow(AppStep, name="console", callbacks=services.callbacks)
        self.flow.register(AppStep.MAIN, self.main)
        self.flow.register(AppStep.SELECT_PROJECT, self.select_project)
        self.flow.register(AppStep.SELECT_TASK, self.select_task)
        self.flow.register(AppStep.CONTINUE_CONFIRM, self.continue_confirm)
        self.flow.register(AppStep.MANAGE_PROJECTS, self.manage_projects)
        self.flow.register(AppStep.CONFIGURATIONS, self.configurations)
        self.flow.on_failure(self.handle_failure)

    async def run(self, state: Optional[AppState] = None) -> WorkflowRun:
        """Run until the user leaves; failures restart the session at MAIN."""
        state = state or AppState()
        while True:
            state.runs += 1
            result = await self.flow.run(state, start=AppStep.MAIN)
            if result.status != RunStatus.FAILED:
                return result

    async def handle_failure(self, error: BaseException, state: AppState) -> None:
        logger.error("Console step failed: %s", error, exc_info=not isinstance(error, JiraconError))
        state.errors.append(str(error))
        self.console.print(f"[red]{escape(str(error))}[/red]")

    # ── Steps ─────────────────────────────────────────────────────────────────

    async def main(self, state: AppState, advance, jump) -> None:
        try:
            entry = await self.prompts.select_item(MAIN_MENU, "Select", ["title"], ["summary"])
        except PromptCancelledError:
            jump(END)
            return
        jump(entry.step)

    async def select_project(self, state: AppState, advance, jump) -> None:
        projects = self.store.projects
        if not projects:
            self.console.print("[yellow]No projects yet, add some from Manage Projects[/yellow]")
            jump(AppStep.MAIN)
            return
        state.project = await self.prompts.select_item(projects, "Select a project", ["name"], ["key"])
        advance()

    async def select_task(self, state: AppState, advance, jump) -> None:
        state.task = await self.prompts.select_item(self.tasks, "Select a task", ["name"], ["summary"])
        try:
            await state.task.run(state.project, self.services)
        except JiraconError as exc:
            logger.warning("Task %s failed: %s", state.task.name, exc)
            state.errors.append(str(exc))
            self.console.print(f"[red]{escape(str(exc))}[/red]")
        advance()

    async def continue_confirm(self, state: AppState, advance, jump) -> None:
        if not await self.prompts.confirm("Do you want to continue"):
            jump(END)
            return
        self.console.clear()
        jump(AppStep.SELECT_PROJECT)

    async def manage_projects(self, state: AppState, advance, jump) -> None:
        """Check the projects to keep; the saved copies keep their board type."""
        remote = await self.services.jira.get_projects()
        saved = {p.key: p for p in self.store.projects}
        choices = [saved.get(p.key, p) for p in remote]
        selected = await self.prompts.select_item(
            choices, "Select a project", ["name"], ["key"],
            multiple=True, default=[p for p in choices if p.key in saved],
        )
        self.store.replace(selected)
        jump(AppStep.MAIN)

    async def configurations(self, state: AppState, advance, jump) -> None:
        if self.config_file is None:
            self.console.print("[yellow]No configuration file in use[/yellow]")
            jump(AppStep.MAIN)
            return

        content = state.config_draft if state.config_draft is not None else read_config_text(self.config_file)
        edited = await self.prompts.edit("Configurations and Preferences", content)
        try:
            parsed = write_config_text(self.config_file, edited)
        except ConfigError as exc:
            state.config_draft = edited
            self.console.print(f"[red]{escape(str(exc))}[/red]")
            jump(AppStep.CONFIGURATIONS)
            return

        state.config_draft = None
        self.console.print(f"[blue]{escape(yaml.safe_dump(parsed.model_dump(), sort_keys=False))}[/blue]")
        self.console.print("[dim]Account changes apply the next time jiracon starts.[/dim]")
        jump(AppStep.MAIN)
