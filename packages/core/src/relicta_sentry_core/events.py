"""Release event models handed to the plugin by the host."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ConventionalCommit:
    """One commit as parsed by the host's conventional-commit analyser."""

    hash: str
    description: str = ""
    type: str = ""
    scope: str = ""
    author: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> ConventionalCommit:
        return cls(
            hash=d.get("hash", ""),
            description=d.get("description", ""),
            type=d.get("type", ""),
            scope=d.get("scope", ""),
            author=d.get("author", ""),
        )


@dataclass(frozen=True)
class CategorizedChanges:
    features: list[ConventionalCommit] = field(default_factory=list)
    fixes: list[ConventionalCommit] = field(default_factory=list)
    breaking: list[ConventionalCommit] = field(default_factory=list)
    other: list[ConventionalCommit] = field(default_factory=list)

    def all_commits(self) -> list[ConventionalCommit]:
        """Every commit in category order: features, fixes, breaking, other."""
        return [*self.features, *self.fixes, *self.breaking, *self.other]

    @classmethod
    def from_dict(cls, d: dict) -> CategorizedChanges:
        def _commits(key: str) -> list[ConventionalCommit]:
            return [ConventionalCommit.from_dict(c) for c in d.get(key) or []]

        return cls(
            features=_commits("features"),
            fixes=_commits("fixes"),
            breaking=_commits("breaking"),
            other=_commits("other"),
        )


@dataclass(frozen=True)
class ReleaseContext:
    """The release being published.

    ``changes`` is None when the host did not analyse commits for this release.
    """

    version: str = ""
    tag_name: str = ""
    commit_sha: str = ""
    branch: str = ""
    changes: CategorizedChanges | None = None

    @classmethod
    def from_dict(cls, d: dict) -> ReleaseContext:
        changes = d.get("changes")
        return cls(
            version=d.get("version", ""),
            tag_name=d.get("tag_name", ""),
            commit_sha=d.get("commit_sha", ""),
            branch=d.get("branch", ""),
            changes=CategorizedChanges.from_dict(changes) if changes is not None else None,
        )
