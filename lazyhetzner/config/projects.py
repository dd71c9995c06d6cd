"""Saved Hetzner Cloud projects.

The config file is a small JSON document::

    {
      "projects": [{"name": "prod", "token": "..."}],
      "default_project": "prod"
    }

``AppConfig`` is immutable so the state machine can hold it directly; the
``with_project`` / ``without_project`` helpers return updated copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional


@dataclass(frozen=True)
class ProjectConfig:
    """A named API token."""

    name: str
    token: str

    def token_preview(self, length: int) -> str:
        if len(self.token) > length:
            return self.token[:length] + "..."
        return self.token


@dataclass(frozen=True)
class AppConfig:
    """All saved projects plus the default-project marker."""

    projects: tuple[ProjectConfig, ...] = field(default_factory=tuple)
    default_project: str = ""

    def get_project(self, name: str) -> Optional[ProjectConfig]:
        for project in self.projects:
            if project.name == name:
                return project
        return None

    def with_project(self, name: str, token: str) -> AppConfig:
        """Add a project, replacing any project with the same name.

        The first project saved becomes the default.
        """
        projects = tuple(p for p in self.projects if p.name != name)
        projects += (ProjectConfig(name=name, token=token),)
        default = self.default_project
        if len(projects) == 1:
            default = name
        return replace(self, projects=projects, default_project=default)

    def without_project(self, name: str) -> AppConfig:
        """Remove a project; the default moves to the first remaining one."""
        if self.get_project(name) is None:
            return self
        projects = tuple(p for p in self.projects if p.name != name)
        default = self.default_project
        if default == name:
            default = projects[0].name if projects else ""
        return replace(self, projects=projects, default_project=default)

    def to_dict(self) -> dict[str, Any]:
        return {
            "projects": [{"name": p.name, "token": p.token} for p in self.projects],
            "default_project": self.default_project,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        projects = tuple(
            ProjectConfig(name=str(p["name"]), token=str(p["token"]))
            for p in data.get("projects") or []
        )
        return cls(projects=projects, default_project=data.get("default_project") or "")
