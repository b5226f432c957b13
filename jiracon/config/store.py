"""YAML-backed list of the projects the user works with (data.yml)."""

import logging
from pathlib import Path
from typing import Iterable

import yaml

from jiracon.config.schema import DataYAML, ProjectYAML
from jiracon.exceptions import ConfigError
from jiracon.types import Project

logger = logging.getLogger(__name__)


class ProjectStore:
    """Saved projects, loaded once and written back on every mutation.

    Args:
        path: Location of data.yml. A missing file is an empty store; it is
              created on the first save.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._projects: list[Project] = []

    def load(self) -> "ProjectStore":
        if not self.path.exists():
            self._projects = []
            return self
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8"))
            data = DataYAML.model_validate(raw or {})
        except (yaml.YAMLError, ValueError) as exc:
            raise ConfigError(f"Cannot read {self.path}: {exc}", path=str(self.path)) from exc
        self._projects = [Project(**p.model_dump()) for p in data.projects]
        logger.debug("Loaded %d project(s) from %s", len(self._projects), self.path)
        return self

    @property
    def projects(self) -> list[Project]:
        return list(self._projects)

    def get(self, key: str) -> Project | None:
        return next((p for p in self._projects if p.key == key), None)

    def replace(self, projects: Iterable[Project]) -> None:
        self._projects = list(projects)
        self._save()

    def add(self, project: Project) -> None:
        self._projects = [p for p in self._projects if p.key != project.key] + [project]
        self._save()

    def remove(self, key: str) -> bool:
        before = len(self._projects)
        self._projects = [p for p in self._projects if p.key != key]
        if len(self._projects) == before:
            return False
        self._save()
        return True

    def _save(self) -> None:
        data = DataYAML(projects=[ProjectYAML(**p.model_dump()) for p in self._projects])
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            yaml.safe_dump(data.model_dump(mode="json"), sort_keys=False),
            encoding="utf-8",
        )
        logger.debug("Saved %d project(s) to %s", len(self._projects), self.path)
