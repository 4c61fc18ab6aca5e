"""Base tracker implementing the Template Method pattern.

The orchestrator only ever talks to a BaseTracker. Subclasses implement the
six raw remote operations; the create-or-fetch idempotence rule for releases
lives here so it is defined once:

    create_or_get_release() → create_release()
                            → get_release()   ← only if the create failed

Subclasses must raise SentryPluginError subclasses (TransportError,
RemoteAPIError) on failure and nothing else.
"""

from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from relicta_sentry_core.errors import CancelledError, SentryPluginError

if TYPE_CHECKING:
    from relicta_sentry_core.config import DeployConfig
    from relicta_sentry_core.trackers.models import CommitSpec, Deploy, Organization, Release

logger = logging.getLogger(__name__)


class ReleaseStatus(enum.Enum):
    CREATED = "created"
    ALREADY_EXISTED = "already_existed"


@dataclass
class ReleaseOutcome:
    """Result of create_or_get_release().

    ``create_error`` is the error the create call failed with when the
    release was recovered through the fallback fetch.
    """

    release: Release
    status: ReleaseStatus
    create_error: SentryPluginError | None = None

    @property
    def created(self) -> bool:
        return self.status is ReleaseStatus.CREATED


class BaseTracker(ABC):
    # ------------------------------------------------------------------ #
    # Abstract: implement in each tracker                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def get_organization(self) -> Organization:
        """Fetch the configured organization. Used as an authenticated ping."""

    @abstractmethod
    def create_release(self, version: str, projects: list[str]) -> Release:
        """Create a new release for ``projects``."""

    @abstractmethod
    def get_release(self, version: str) -> Release:
        """Fetch an existing release by version."""

    @abstractmethod
    def set_commits(self, version: str, commits: list[CommitSpec]) -> None:
        """Associate ``commits`` with the release."""

    @abstractmethod
    def create_deploy(self, version: str, deploy: DeployConfig) -> Deploy:
        """Record a deploy of the release. Every call creates a new deploy."""

    @abstractmethod
    def finalize_release(self, version: str) -> None:
        """Mark the release as released (sets its release timestamp to now)."""

    def close(self) -> None:
        """Release any resources held by the tracker.

        Optional. The default is a no-op so callers can always call close() safely.
        """

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def create_or_get_release(self, version: str, projects: list[str]) -> ReleaseOutcome:
        """Create the release, or return the existing one with the same version.

        Sentry gives no distinguishing error code for "already exists", so any
        create failure triggers the fallback fetch. If the fetch fails too, the
        create error is raised and the fetch error is only logged.
        Cancellation is re-raised immediately.
        """
        try:
            return ReleaseOutcome(self.create_release(version, projects), ReleaseStatus.CREATED)
        except CancelledError:
            raise
        except SentryPluginError as create_error:
            logger.warning("Creating release %s failed (%s); looking for an existing release", version, create_error)
            try:
                existing = self.get_release(version)
            except CancelledError:
                raise
            except SentryPluginError as get_error:
                logger.debug("Fallback fetch of release %s failed: %s", version, get_error)
                raise create_error from None
            return ReleaseOutcome(existing, ReleaseStatus.ALREADY_EXISTED, create_error=create_error)
