from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from relicta_sentry_core.trackers.models import CommitSpec

if TYPE_CHECKING:
    from relicta_sentry_core.config import PluginConfig
    from relicta_sentry_core.events import ReleaseContext


def extract_commits(config: PluginConfig, release: ReleaseContext, now: datetime | None = None) -> list[CommitSpec]:
    """Map the release's categorized changes to Sentry commit specs.

    Order is features, fixes, breaking, other, each in the host's order.
    Every commit is stamped with the extraction time (``now``), not its
    original commit time.
    """
    if release.changes is None:
        return []

    repository = config.commit_repository
    timestamp = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H:%M:%SZ")

    return [
        CommitSpec(
            id=c.hash,
            repository=repository,
            message=c.description,
            author_name=c.author,
            timestamp=timestamp,
        )
        for c in release.changes.all_commits()
    ]
