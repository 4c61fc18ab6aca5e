"""Sentry API payloads.

Timestamps are kept as the ISO-8601 strings Sentry returns; the plugin only
passes them through to the host's outputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Project:
    id: str = ""
    slug: str = ""
    name: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> Project:
        return cls(id=str(d.get("id", "")), slug=d.get("slug", ""), name=d.get("name", ""))


@dataclass
class Organization:
    id: str = ""
    slug: str = ""
    name: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> Organization:
        return cls(id=str(d.get("id", "")), slug=d.get("slug", ""), name=d.get("name", ""))


@dataclass
class Release:
    """A Sentry release, unique per organization by ``version``."""

    version: str
    short_version: str = ""
    ref: str = ""
    url: str = ""
    date_created: str | None = None
    date_released: str | None = None
    projects: list[Project] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict) -> Release:
        return cls(
            version=d.get("version", ""),
            short_version=d.get("shortVersion") or "",
            ref=d.get("ref") or "",
            url=d.get("url") or "",
            date_created=d.get("dateCreated"),
            date_released=d.get("dateReleased"),
            projects=[Project.from_dict(p) for p in d.get("projects") or []],
        )


@dataclass
class Deploy:
    id: str = ""
    environment: str = ""
    name: str = ""
    date_started: str | None = None
    date_finished: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> Deploy:
        return cls(
            id=str(d.get("id", "")),
            environment=d.get("environment", ""),
            name=d.get("name") or "",
            date_started=d.get("dateStarted"),
            date_finished=d.get("dateFinished"),
        )


@dataclass
class CommitSpec:
    """A commit to associate with a release (Sentry's "set commits" payload)."""

    id: str
    repository: str
    message: str = ""
    author_name: str = ""
    author_email: str = ""
    timestamp: str = ""

    def to_dict(self) -> dict:
        d = {"id": self.id, "repository": self.repository}
        for key in ("message", "author_name", "author_email", "timestamp"):
            value = getattr(self, key)
            if value:
                d[key] = value
        return d
