"""
Edit Issues — set field values on several issues in one pass.

Flow:
  fetch active issues → pick issues → fetch their edit metadata (bulk)
  → union of editable fields → pick fields → for each field, for each issue:
  prompt (previous issue's value as default) → PUT every issue concurrently.

The field/issue cursors live on BulkEditState so the loop position is
observable (and testable) from the state alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from rich import box
from rich.markup import escape
from rich.table import Table

from jiracon.exceptions import FieldValidationError, NoAvailableValuesError
from jiracon.input.schema import is_supported_field
from jiracon.tasks.registry import TaskServices, task
from jiracon.types import BulkOutcome, FieldRef, Issue, Project
from jiracon.workflows import END, Workflow

logger = logging.getLogger(__name__)

# Offered from the local roster; the entered value is never submitted
ASSIGNEE_FIELD_NAME = "Assignee"


class EditIssuesStep(str, Enum):
    GET_ACTIVE_ISSUES = "get_active_issues"
    SELECT_ISSUES = "select_issues"
    GET_ISSUES_EDIT_META = "get_issues_edit_meta"
    GET_ISSUES_FIELDS = "get_issues_fields"
    SELECT_FIELDS = "select_fields"
    ADD_ISSUES_BODY = "add_issues_body"
    ENTER_FIELD_VALUES = "enter_field_values"
    UPDATE_ISSUES = "update_issues"


@dataclass
class BulkEditState:
    project: Project
    issues: list[Issue] = field(default_factory=list)
    selected_issues: list[Issue] = field(default_factory=list)
    edit_meta: dict[str, dict[str, Any]] = field(default_factory=dict)   # issue id → field id → meta
    fields: list[FieldRef] = field(default_factory=list)
    selected_fields: list[FieldRef] = field(default_factory=list)
    bodies: dict[str, dict[str, Any]] = field(default_factory=dict)      # issue id → field id → value
    outcomes: dict[str, BulkOutcome] = field(default_factory=dict)

    # ── loop cursors ──
    next_field_index: int = 0
    current_field: Optional[FieldRef] = None
    next_issue_index: int = 0
    current_issue: Optional[Issue] = None
    last_value: Any = None

    def reset_field_cursor(self) -> None:
        self.next_field_index = 0
        self.current_field = None
        self.last_value = None

    def pick_next_field(self) -> Optional[FieldRef]:
        """Move to the next selected field; None once all fields are done."""
        if self.next_field_index < len(self.selected_fields):
            self.current_field = self.selected_fields[self.next_field_index]
        else:
            self.current_field = None
        self.last_value = None
        self.next_field_index += 1
        return self.current_field

    def reset_issue_cursor(self) -> None:
        self.next_issue_index = 0
        self.current_issue = None

    def pick_next_issue(self) -> Optional[Issue]:
        if self.next_issue_index < len(self.selected_issues):
            self.current_issue = self.selected_issues[self.next_issue_index]
        else:
            self.current_issue = None
        self.next_issue_index += 1
        return self.current_issue


def union_supported_fields(
    issues: Iterable[Issue],
    edit_meta: Mapping[str, Mapping[str, Any]],
) -> list[FieldRef]:
    """Editable fields across issues, without duplicates, in first-seen order."""
    seen: dict[FieldRef, None] = {}
    for issue in issues:
        for field_id, meta in (edit_meta.get(issue.id) or {}).items():
            if not is_supported_field(meta):
                continue
            seen.setdefault(FieldRef(id=field_id, name=meta.get("name") or field_id), None)
    return list(seen)


class EditIssuesWorkflow:
    """Builds and runs the edit-issues workflow over injected services."""

    def __init__(self, services: TaskServices):
        self.services = services
        self.console = services.console
        self.flow: Workflow[BulkEditState] = Workflow(
            EditIssuesStep, name="edit_issues", callbacks=services.callbacks,
        )
        self.flow.register(EditIssuesStep.GET_ACTIVE_ISSUES, self.get_active_issues)
        self.flow.register(EditIssuesStep.SELECT_ISSUES, self.select_issues)
        self.flow.register(EditIssuesStep.GET_ISSUES_EDIT_META, self.get_issues_edit_meta)
        self.flow.register(EditIssuesStep.GET_ISSUES_FIELDS, self.get_issues_fields)
        self.flow.register(EditIssuesStep.SELECT_FIELDS, self.select_fields)
        self.flow.register(EditIssuesStep.ADD_ISSUES_BODY, self.add_issues_body)
        self.flow.register(EditIssuesStep.ENTER_FIELD_VALUES, self.enter_field_values)
        self.flow.register(EditIssuesStep.UPDATE_ISSUES, self.update_issues)

    async def run(self, project: Project) -> BulkEditState:
        state = BulkEditState(project=project)
        await self.flow.run(state)
        return state

    # ── Steps ─────────────────────────────────────────────────────────────────

    async def get_active_issues(self, state: BulkEditState, advance, jump) -> None:
        state.issues = await self.services.jira.get_active_issues(state.project.id, state.project.type)
        if not state.issues:
            self.console.print(f"[yellow]No active issues in {escape(state.project.name)}[/yellow]")
            jump(END)
            return
        advance()

    async def select_issues(self, state: BulkEditState, advance, jump) -> None:
        state.selected_issues = await self.services.prompts.select_item(
            state.issues, "Select issues", ["summary"], ["key"], multiple=True, allow_empty=False,
        )
        advance()

    async def get_issues_edit_meta(self, state: BulkEditState, advance, jump) -> None:
        state.edit_meta = await self.services.jira.get_edit_meta(state.selected_issues)
        advance()

    async def get_issues_fields(self, state: BulkEditState, advance, jump) -> None:
        state.fields = union_supported_fields(state.selected_issues, state.edit_meta)
        if not state.fields:
            self.console.print("[yellow]None of the selected issues has an editable field[/yellow]")
            jump(END)
            return
        advance()

    async def select_fields(self, state: BulkEditState, advance, jump) -> None:
        state.selected_fields = await self.services.prompts.select_item(
            state.fields, "Select fields", ["name"], ["id"], multiple=True, allow_empty=False,
        )
        advance()

    async def add_issues_body(self, state: BulkEditState, advance, jump) -> None:
        state.bodies = {issue.id: {} for issue in state.selected_issues}
        advance()

    async def enter_field_values(self, state: BulkEditState, advance, jump) -> None:
        """Fields outer, issues inner; one prompt per (field, issue)."""
        state.reset_field_cursor()
        while state.pick_next_field() is not None:
            state.reset_issue_cursor()
            while state.pick_next_issue() is not None:
                await self.enter_field_value(state)
        advance()

    async def enter_field_value(self, state: BulkEditState) -> None:
        field_ref, issue = state.current_field, state.current_issue
        name = field_ref.name.strip()
        meta = (state.edit_meta.get(issue.id) or {}).get(field_ref.id)

        if meta is None or not is_supported_field(meta):
            logger.warning("Field %s skipped for issue %s: not available", field_ref.id, issue.key)
            self.console.print(
                f"[red]The field {escape(name)} is not supported or not available for the issue "
                f"{escape(issue.summary)} ({escape(issue.key)})[/red]"
            )
            return

        self.console.print(
            f"Enter the field [blue]{escape(name)}[/blue] for the issue "
            f"[blue]{escape(issue.summary)}[/blue] ({escape(issue.key)})"
        )

        assignee = name == ASSIGNEE_FIELD_NAME
        if assignee:
            meta = {k: v for k, v in meta.items() if k != "autoCompleteUrl"}
            meta["allowedValues"] = list(self.services.assignee_roster)

        while True:
            try:
                value = await self.services.fields.resolve(meta, state.last_value)
            except NoAvailableValuesError:
                logger.warning("Field %s skipped for issue %s: no allowed values", field_ref.id, issue.key)
                self.console.print(f"[red]The field {escape(name)} has no available values, skipped[/red]")
                return
            except FieldValidationError as exc:
                logger.warning("Field %s rejected for issue %s: %s", field_ref.id, issue.key, exc)
                self.console.print(f"[red]{escape(str(exc))}[/red]")
                continue
            break

        if assignee:
            value = None

        state.last_value = value
        state.bodies[issue.id][field_ref.id] = value

    async def update_issues(self, state: BulkEditState, advance, jump) -> None:
        state.outcomes = await self.services.jira.update_issues(state.bodies)
        self.console.print(self._outcome_table(state))
        advance()

    def _outcome_table(self, state: BulkEditState) -> Table:
        table = Table(box=box.SIMPLE, show_header=True, header_style="bold dim", title="Updating issues")
        table.add_column("Issue", style="cyan", width=12)
        table.add_column("Summary")
        table.add_column("Result")
        for issue in state.selected_issues:
            outcome = state.outcomes.get(issue.id)
            if outcome is None:
                continue
            result = "[bold green]✓ updated[/bold green]" if outcome.ok else f"[bold red]✗ {escape(outcome.message)}[/bold red]"
            table.add_row(escape(issue.key), escape(issue.summary), result)
        return table


@task(name="Edit Issues", summary="Edit issues fields")
async def edit_issues(project: Project, services: TaskServices) -> BulkEditState:
    """Edit issues fields"""
    return await EditIssuesWorkflow(services).run(project)
