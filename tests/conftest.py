"""Test fixtures: scripted prompts, recording gateway, quiet console, sample metadata.

All tests should use these fixtures for consistency.
"""

import inspect
import io

import pytest
from rich.console import Console

from jiracon.api import BulkOrchestrator, JiraService
from jiracon.input import FieldValueResolver
from jiracon.tasks import TaskServices
from jiracon.types import Issue, Project, ProjectType


# ── Scripted prompts ──────────────────────────────────────────────────────────

class ACCEPT_DEFAULT:
    """Scripted answer meaning "press enter": the prompt returns its default."""


class FakePrompts:
    """Answers prompts from a script, in call order.

    A scripted answer may be:
      - a value, returned as is
      - ACCEPT_DEFAULT, returning the prompt's default
      - a callable, called with the listed items (select_item only)
      - an exception instance, raised from the prompt

    For enter_text, a validate callable is applied like the real prompt does:
    a rejected answer is recorded in ``rejections`` and the next scripted
    answer is tried.
    """

    def __init__(self, answers=None):
        self.answers = list(answers or [])
        self.calls: list[tuple] = []
        self.rejections: list[tuple] = []

    def script(self, *answers) -> "FakePrompts":
        self.answers.extend(answers)
        return self

    def _pop(self, method: str, message: str):
        if not self.answers:
            raise AssertionError(f"No scripted answer left for {method}({message!r})")
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)

    async def select_item(self, source, message, title_keys=None, summary_keys=None,
                          multiple=False, default=None, allow_empty=True):
        items = source
        if callable(source):
            items = source("")
            if inspect.isawaitable(items):
                items = await items
        items = list(items or [])
        self.calls.append(("select_item", message, {"items": items, "default": default, "multiple": multiple}))
        answer = self._pop("select_item", message)
        if answer is ACCEPT_DEFAULT:
            return default
        if callable(answer):
            return answer(items)
        return answer

    async def select_date(self, message, default=None):
        self.calls.append(("select_date", message, {"default": default}))
        answer = self._pop("select_date", message)
        return default if answer is ACCEPT_DEFAULT else answer

    async def enter_text(self, message, default=None, validate=None, convert=None):
        self.calls.append(("enter_text", message, {"default": default}))
        while True:
            answer = self._pop("enter_text", message)
            if answer is ACCEPT_DEFAULT:
                answer = "" if default is None else str(default)
            if validate is not None:
                verdict = validate(answer)
                if verdict is not True:
                    self.rejections.append((message, answer, verdict))
                    continue
            return convert(answer) if convert is not None else answer

    async def enter_strings(self, keys, defaults=None):
        self.calls.append(("enter_strings", ",".join(keys), {"defaults": list(defaults or [])}))
        return self._pop("enter_strings", ",".join(keys))

    async def confirm(self, message, default=True):
        self.calls.append(("confirm", message, {"default": default}))
        return self._pop("confirm", message)

    async def edit(self, message, content=""):
        self.calls.append(("edit", message, {"content": content}))
        answer = self._pop("edit", message)
        return content if answer is ACCEPT_DEFAULT else answer


# ── Recording gateway ─────────────────────────────────────────────────────────

class FakeGateway:
    """Stands in for RequestGateway.

    ``routes`` maps (METHOD, path template) to a value, an exception
    instance, or a callable ``fn(params)`` (sync or async) producing either.
    Every call is recorded in ``calls`` as (method, path, params).
    """

    def __init__(self, routes=None, base_url="https://jira.example.com"):
        self.routes = dict(routes or {})
        self.base_url = base_url
        self.calls: list[tuple] = []

    async def call(self, method, path, params=None, show_spinner=True):
        params = dict(params or {})
        self.calls.append((method.upper(), path, params))
        try:
            route = self.routes[(method.upper(), path)]
        except KeyError:
            raise AssertionError(f"Unexpected call {method} {path}") from None
        result = route(params) if callable(route) else route
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, BaseException):
            raise result
        return result

    async def get(self, path, params=None, show_spinner=True):
        return await self.call("GET", path, params, show_spinner)

    async def post(self, path, params=None, show_spinner=True):
        return await self.call("POST", path, params, show_spinner)

    async def put(self, path, params=None, show_spinner=True):
        return await self.call("PUT", path, params, show_spinner)

    async def delete(self, path, params=None, show_spinner=True):
        return await self.call("DELETE", path, params, show_spinner)


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def console():
    """Non-terminal console writing into a buffer; read it with console.file.getvalue()."""
    return Console(file=io.StringIO(), force_terminal=False, width=200)


@pytest.fixture
def fake_prompts():
    return FakePrompts()


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def accept_default():
    return ACCEPT_DEFAULT


@pytest.fixture
def assignee_roster():
    return [
        {"id": "admin", "key": "admin", "name": "Administrator"},
        {"id": "lead", "key": "lead", "name": "Project Lead"},
    ]


@pytest.fixture
def services(fake_gateway, fake_prompts, console, assignee_roster):
    """TaskServices wired to the fake gateway and scripted prompts."""
    bulk = BulkOrchestrator(fake_gateway, console=console)
    return TaskServices(
        jira=JiraService(fake_gateway, bulk),
        prompts=fake_prompts,
        fields=FieldValueResolver(fake_gateway, fake_prompts),
        console=console,
        assignee_roster=assignee_roster,
    )


@pytest.fixture
def scrum_project():
    return Project(id="10000", key="DEV", name="Development", type=ProjectType.SCRUM)


@pytest.fixture
def kanban_project():
    return Project(id="10001", key="OPS", name="Operations", type=ProjectType.KANBAN)


@pytest.fixture
def sample_issues():
    return [
        Issue(id="1001", key="DEV-1", summary="Login page"),
        Issue(id="1002", key="DEV-2", summary="Signup page"),
    ]


# ── Edit metadata samples ─────────────────────────────────────────────────────

@pytest.fixture
def story_points_meta():
    return {
        "name": "Story Points",
        "operations": ["set"],
        "schema": {
            "type": "number",
            "custom": "com.atlassian.jira.plugin.system.customfieldtypes:float",
            "customId": 10016,
        },
    }


@pytest.fixture
def summary_meta():
    return {"name": "Summary", "operations": ["set"], "schema": {"type": "string", "system": "summary"}}


@pytest.fixture
def priority_meta():
    return {
        "name": "Priority",
        "operations": ["set"],
        "schema": {"type": "priority", "system": "priority"},
        "allowedValues": [
            {"id": "1", "name": "Highest"},
            {"id": "2", "name": "High"},
            {"id": "3", "name": "Medium"},
        ],
    }


@pytest.fixture
def assignee_meta():
    return {
        "name": "Assignee",
        "operations": ["set"],
        "schema": {"type": "user", "system": "assignee"},
        "autoCompleteUrl": "https://jira.example.com/rest/api/2/user/assignable/search?issueKey=DEV-1&username=",
    }


@pytest.fixture
def watchers_meta():
    """Array of users with no way to list the users: unsupported."""
    return {"name": "Watchers", "operations": ["add", "remove"], "schema": {"type": "array", "items": "user"}}
