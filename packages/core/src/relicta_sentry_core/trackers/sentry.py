"""Sentry REST API client (``/api/0``) for release tracking."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from relicta_sentry_core.config import DEFAULT_URL
from relicta_sentry_core.errors import RemoteAPIError, TransportError
from relicta_sentry_core.trackers.base import BaseTracker
from relicta_sentry_core.trackers.models import Deploy, Organization, Release
from relicta_sentry_core.utils.cancel import CallContext

if TYPE_CHECKING:
    from relicta_sentry_core.config import DeployConfig, PluginConfig
    from relicta_sentry_core.trackers.models import CommitSpec

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0  # seconds
API_PREFIX = "/api/0"


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _escape(segment: str) -> str:
    """URL-encode a path segment. Release versions may contain '/' or '+'."""
    return quote(segment, safe="")


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return response.text


class SentryClient(BaseTracker):
    """Client for the Sentry web API.

    Every request carries ``Authorization: Bearer <token>``. Non-2xx answers
    raise RemoteAPIError; failures below HTTP raise TransportError.
    """

    def __init__(
        self,
        auth_token: str,
        org: str,
        base_url: str = DEFAULT_URL,
        timeout: float = DEFAULT_TIMEOUT,
        context: CallContext | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.org = org
        self.timeout = timeout
        self.context = context or CallContext()
        self._client = httpx.Client(
            base_url=(base_url or DEFAULT_URL).rstrip("/") + API_PREFIX,
            headers={
                "Authorization": f"Bearer {auth_token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )
        self.context.on_cancel(self._abort)

    @classmethod
    def from_config(cls, config: PluginConfig, context: CallContext | None = None) -> SentryClient:
        return cls(auth_token=config.auth_token, org=config.org, base_url=config.url, context=context)

    def close(self):
        self._client.close()

    def _abort(self):
        """Drop the connection of a request abandoned on cancellation. Runs on the cancelling thread."""
        try:
            self._client.close()
        except Exception as e:
            logger.debug("Closing Sentry client on cancellation failed: %s", e)

    def _request(self, method: str, path: str, body: Any = None) -> Any:
        """Make one API request and return the decoded JSON body (None if empty)."""
        self.context.raise_if_done()
        timeout = self.context.timeout_for(self.timeout)
        logger.debug("Sentry %s %s", method, path)
        try:
            response = self.context.run(lambda: self._client.request(method, path, json=body, timeout=timeout))
        except httpx.HTTPError as e:
            raise TransportError(f"failed to execute request: {e}") from e

        if response.status_code >= 400:
            raise RemoteAPIError(response.status_code, _error_detail(response))

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"failed to decode response: {e}") from e

    def _release_path(self, version: str, suffix: str = "") -> str:
        return f"/organizations/{self.org}/releases/{_escape(version)}/{suffix}"

    def get_organization(self) -> Organization:
        data = self._request("GET", f"/organizations/{self.org}/")
        return Organization.from_dict(data or {})

    def create_release(self, version: str, projects: list[str]) -> Release:
        payload = {
            "version": version,
            "projects": projects,
            "dateStarted": _now(),
        }
        data = self._request("POST", f"/organizations/{self.org}/releases/", payload)
        logger.info("Created Sentry release %s", version)
        return Release.from_dict(data or {"version": version})

    def get_release(self, version: str) -> Release:
        data = self._request("GET", self._release_path(version))
        return Release.from_dict(data or {"version": version})

    def set_commits(self, version: str, commits: list[CommitSpec]) -> None:
        payload = {"commits": [c.to_dict() for c in commits]}
        self._request("POST", self._release_path(version, "commits/"), payload)

    def create_deploy(self, version: str, deploy: DeployConfig) -> Deploy:
        now = _now()
        payload = {
            "environment": deploy.environment,
            "dateStarted": now,
            "dateFinished": now,
        }
        if deploy.name:
            payload["name"] = deploy.name
        data = self._request("POST", self._release_path(version, "deploys/"), payload)
        return Deploy.from_dict(data or {"environment": deploy.environment})

    def finalize_release(self, version: str) -> None:
        self._request("PUT", self._release_path(version), {"dateReleased": _now()})
