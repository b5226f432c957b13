"""Create Version — add a release version to the project."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from rich.markup import escape

from jiracon.tasks.registry import TaskServices, task
from jiracon.types import Project
from jiracon.workflows import Workflow

logger = logging.getLogger(__name__)


class VersionStep(str, Enum):
    GET_LAST_VERSION = "get_last_version"
    ENTER_NAME_AND_DESCRIPTION = "enter_name_and_description"
    ENTER_START_DATE = "enter_start_date"
    ENTER_RELEASE_DATE = "enter_release_date"
    CREATE_VERSION = "create_version"


@dataclass
class VersionState:
    project: Project
    last_version_name: str = ""
    name: str = ""
    description: str = ""
    start_date: Optional[str] = None
    release_date: Optional[str] = None
    created: Optional[dict] = None


class CreateVersionWorkflow:
    def __init__(self, services: TaskServices):
        self.services = services
        self.flow: Workflow[VersionState] = Workflow(
            VersionStep, name="create_version", callbacks=services.callbacks,
        )
        self.flow.register(VersionStep.GET_LAST_VERSION, self.get_last_version)
        self.flow.register(VersionStep.ENTER_NAME_AND_DESCRIPTION, self.enter_name_and_description)
        self.flow.register(VersionStep.ENTER_START_DATE, self.enter_start_date)
        self.flow.register(VersionStep.ENTER_RELEASE_DATE, self.enter_release_date)
        self.flow.register(VersionStep.CREATE_VERSION, self.create_version)

    async def run(self, project: Project) -> VersionState:
        state = VersionState(project=project)
        await self.flow.run(state)
        return state

    async def get_last_version(self, state: VersionState, advance, jump) -> None:
        """Newest version name, offered as the starting point for the new one."""
        versions = await self.services.jira.get_versions(state.project.id)
        state.last_version_name = versions[0].name if versions else ""
        advance()

    async def enter_name_and_description(self, state: VersionState, advance, jump) -> None:
        answers = await self.services.prompts.enter_strings(
            ["name", "description"], [state.last_version_name],
        )
        name = (answers.get("name") or "").strip()
        if not name:
            self.services.console.print("[red]The name is a required field[/red]")
            jump(VersionStep.ENTER_NAME_AND_DESCRIPTION)
            return
        state.name = name
        state.description = answers.get("description") or ""
        advance()

    async def enter_start_date(self, state: VersionState, advance, jump) -> None:
        state.start_date = await self.services.prompts.select_date("Start Date")
        advance()

    async def enter_release_date(self, state: VersionState, advance, jump) -> None:
        state.release_date = await self.services.prompts.select_date("Release Date", state.start_date)
        advance()

    async def create_version(self, state: VersionState, advance, jump) -> None:
        state.created = await self.services.jira.create_version(
            state.project.id,
            state.name,
            description=state.description,
            start_date=state.start_date,
            release_date=state.release_date,
        )
        logger.info("Created version %s in project %s", state.name, state.project.key)
        self.services.console.print(f"[green]Version {escape(state.name)} created[/green]")
        advance()


@task(name="Create Version", summary="Create a new version")
async def create_version(project: Project, services: TaskServices) -> VersionState:
    """Create a new version"""
    return await CreateVersionWorkflow(services).run(project)
