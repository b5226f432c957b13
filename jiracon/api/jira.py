"""Jira resources used by the console workflows, normalised into jiracon types."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from jiracon.types import BulkRequest, HttpMethod, Issue, Project, ProjectType, Version

PROJECTS_PATH = "/rest/api/2/project"
VERSIONS_PATH = "/rest/api/2/project/:projectIdOrKey/versions"
SEARCH_PATH = "/rest/api/2/search"
ISSUE_PATH = "/rest/api/2/issue/:issueIdOrKey"
EDIT_META_PATH = "/rest/api/2/issue/:issueIdOrKey/editmeta"
VERSION_PATH = "/rest/api/2/version"

ISSUE_FIELDS = "project,summary,description,status"


def active_issues_jql(project_id_or_key: str, project_type: ProjectType) -> str:
    """Scrum projects: issues of the open sprints. Kanban: every issue."""
    if project_type == ProjectType.SCRUM:
        return f"project = {project_id_or_key} AND sprint in openSprints()"
    return f"project = {project_id_or_key}"


class JiraService:
    """Typed access to the handful of endpoints jiracon needs.

    Args:
        gateway: RequestGateway
        bulk:    BulkOrchestrator bound to the same gateway
    """

    def __init__(self, gateway, bulk):
        self._gateway = gateway
        self._bulk = bulk

    async def get_projects(self) -> list[Project]:
        result = await self._gateway.get(PROJECTS_PATH)
        return [
            Project(id=str(p["id"]), key=p["key"], name=p["name"], type=ProjectType.SCRUM)
            for p in result or []
        ]

    async def get_versions(self, project_id_or_key: str) -> list[Version]:
        """Project versions, newest first."""
        result = await self._gateway.get(VERSIONS_PATH, {"projectIdOrKey": project_id_or_key})
        versions = [
            Version(
                id=str(v["id"]),
                name=v["name"],
                description=v.get("description"),
                archived=bool(v.get("archived", False)),
                released=bool(v.get("released", False)),
            )
            for v in result or []
        ]
        versions.reverse()
        return versions

    async def get_active_issues(self, project_id_or_key: str, project_type: ProjectType) -> list[Issue]:
        result = await self._gateway.get(SEARCH_PATH, {
            "jql": active_issues_jql(project_id_or_key, project_type),
            "fields": ISSUE_FIELDS,
        })
        issues = []
        for raw in (result or {}).get("issues", []):
            fields = raw.get("fields") or {}
            issues.append(Issue(
                id=str(raw["id"]),
                key=raw["key"],
                summary=fields.get("summary") or "",
                fields=fields,
            ))
        return issues

    async def get_edit_meta(self, issues: Iterable[Issue]) -> dict[str, dict[str, Any]]:
        """Edit metadata of several issues at once → {issue id: {field id: meta}}.

        Fails fast: one failed call fails the whole lookup.
        """
        requests = {
            issue.id: BulkRequest(method=HttpMethod.GET, path=EDIT_META_PATH, params={"issueIdOrKey": issue.id})
            for issue in issues
        }
        results = await self._bulk.execute(requests)
        return {issue_id: (result or {}).get("fields", {}) for issue_id, result in results.items()}

    async def update_issues(self, bodies: Mapping[str, dict[str, Any]]) -> dict:
        """PUT every body concurrently; returns BulkOutcome per issue id."""
        requests = {
            issue_id: BulkRequest(
                method=HttpMethod.PUT,
                path=ISSUE_PATH,
                params={"issueIdOrKey": issue_id, "fields": body},
            )
            for issue_id, body in bodies.items()
        }
        return await self._bulk.execute_settled(requests)

    async def create_version(
        self,
        project_id: str,
        name: str,
        description: Optional[str] = None,
        start_date: Optional[str] = None,
        release_date: Optional[str] = None,
    ) -> Any:
        payload: dict[str, Any] = {
            "projectId": int(project_id) if str(project_id).isdigit() else project_id,
            "name": name,
        }
        if description:
            payload["description"] = description
        if start_date:
            payload["startDate"] = start_date
        if release_date:
            payload["releaseDate"] = release_date
        return await self._gateway.post(VERSION_PATH, payload)

