"""Create Version task: name validation loop, dates, payload."""

import pytest

from jiracon.api.jira import VERSION_PATH, VERSIONS_PATH
from jiracon.tasks import get_tasks
from jiracon.tasks.create_version import CreateVersionWorkflow, VersionStep


@pytest.fixture
def version_routes(fake_gateway):
    fake_gateway.routes[("GET", VERSIONS_PATH)] = [{"id": "1", "name": "1.0"}, {"id": "2", "name": "1.1"}]
    fake_gateway.routes[("POST", VERSION_PATH)] = lambda params: {"id": "3", **params}
    return fake_gateway


@pytest.mark.asyncio
async def test_creates_version_with_entered_values(services, version_routes, fake_prompts, console, scrum_project):
    fake_prompts.script(
        {"name": "1.2", "description": "Spring release"},
        "2024-03-01",
        "2024-03-29",
    )

    state = await CreateVersionWorkflow(services).run(scrum_project)

    assert state.last_version_name == "1.1"
    assert fake_prompts.calls[0][2]["defaults"] == ["1.1"]
    assert fake_prompts.calls[2][2]["default"] == "2024-03-01"
    post = version_routes.calls[-1]
    assert post[:2] == ("POST", VERSION_PATH)
    assert post[2] == {
        "projectId": 10000,
        "name": "1.2",
        "description": "Spring release",
        "startDate": "2024-03-01",
        "releaseDate": "2024-03-29",
    }
    assert state.created["id"] == "3"
    assert "Version 1.2 created" in console.file.getvalue()


@pytest.mark.asyncio
async def test_empty_name_asks_again(services, version_routes, fake_prompts, console, scrum_project):
    fake_prompts.script(
        {"name": "  ", "description": ""},
        {"name": "2.0", "description": ""},
        "2024-01-01",
        "2024-01-31",
    )

    state = await CreateVersionWorkflow(services).run(scrum_project)

    assert fake_prompts.count("enter_strings") == 2
    assert state.name == "2.0"
    assert "The name is a required field" in console.file.getvalue()
    assert "description" not in version_routes.calls[-1][2]


@pytest.mark.asyncio
async def test_project_without_versions_has_empty_name_default(services, fake_gateway, fake_prompts, scrum_project):
    fake_gateway.routes[("GET", VERSIONS_PATH)] = []
    fake_gateway.routes[("POST", VERSION_PATH)] = {}
    fake_prompts.script({"name": "0.1", "description": ""}, "2024-01-01", "2024-01-02")

    await CreateVersionWorkflow(services).run(scrum_project)

    assert fake_prompts.calls[0][2]["defaults"] == [""]


def test_every_step_has_a_handler(services):
    flow = CreateVersionWorkflow(services).flow
    assert flow.validate() == []
    assert flow.order == list(VersionStep)


def test_create_version_is_registered():
    names = [t.name for t in get_tasks()]
    assert names.index("Edit Issues") < names.index("Create Version")
