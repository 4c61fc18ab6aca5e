"""Relicta plugin facade: get_info / execute / validate.

This is the only surface the host calls. It parses the raw config map,
dispatches hooks to the orchestrator and turns every SentryPluginError into a
failed response, so no plugin error reaches the host as an exception.
"""

from __future__ import annotations

import enum
import importlib.metadata
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

from relicta_sentry_core import orchestrator
from relicta_sentry_core.config import parse_config
from relicta_sentry_core.errors import FieldError, SentryPluginError, TemplateError, ValidationError
from relicta_sentry_core.events import ReleaseContext
from relicta_sentry_core.trackers.sentry import SentryClient
from relicta_sentry_core.version import check_template

if TYPE_CHECKING:
    from relicta_sentry_core.config import PluginConfig
    from relicta_sentry_core.orchestrator import PhaseResult
    from relicta_sentry_core.trackers.base import BaseTracker
    from relicta_sentry_core.utils.cancel import CallContext

logger = logging.getLogger(__name__)

PLUGIN_NAME = "sentry"
DISTRIBUTION = "relicta-sentry"


def _plugin_version() -> str:
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0"


class Hook(str, enum.Enum):
    PRE_PUBLISH = "pre-publish"
    POST_PUBLISH = "post-publish"
    ON_ERROR = "on-error"


@dataclass(frozen=True)
class PluginInfo:
    name: str
    version: str
    description: str
    author: str
    hooks: tuple[Hook, ...]


@dataclass
class ExecuteRequest:
    hook: str
    config: dict = field(default_factory=dict)
    context: ReleaseContext = field(default_factory=ReleaseContext)
    dry_run: bool = False


@dataclass
class ExecuteResponse:
    success: bool
    message: str = ""
    error: str = ""
    outputs: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_phase(cls, result: PhaseResult) -> ExecuteResponse:
        return cls(success=result.success, message=result.message, error=result.error, outputs=result.outputs)


@dataclass
class ValidateResponse:
    errors: list[FieldError] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)


class ValidationBuilder:
    def __init__(self):
        self._errors: list[FieldError] = []

    def add_error(self, field_name: str, message: str) -> ValidationBuilder:
        self._errors.append(FieldError(field_name, message))
        return self

    def build(self) -> ValidateResponse:
        return ValidateResponse(errors=list(self._errors))


TrackerBuilder = Callable[["PluginConfig", Optional["CallContext"]], "BaseTracker"]


class SentryPlugin:
    """Sentry release tracking, deploy notifications and commit association.

    ``tracker_builder`` creates the tracker for live runs and for the remote
    validation check. Tests inject a stub; the default talks to Sentry.
    """

    def __init__(self, tracker_builder: TrackerBuilder = SentryClient.from_config):
        self._tracker_builder = tracker_builder

    def get_info(self) -> PluginInfo:
        return PluginInfo(
            name=PLUGIN_NAME,
            version=_plugin_version(),
            description="Sentry release tracking, deploy notifications, and commit association",
            author="Relicta",
            hooks=(Hook.PRE_PUBLISH, Hook.POST_PUBLISH, Hook.ON_ERROR),
        )

    def execute(self, request: ExecuteRequest, context: CallContext | None = None) -> ExecuteResponse:
        """Run the phase for ``request.hook``. Never raises SentryPluginError."""
        config = parse_config(request.config)

        def factory(cfg: PluginConfig) -> BaseTracker:
            return self._tracker_builder(cfg, context)

        hook = request.hook.value if isinstance(request.hook, Hook) else str(request.hook)
        logger.debug("Executing hook %s (dry_run=%s)", hook, request.dry_run)

        try:
            if hook == Hook.PRE_PUBLISH.value:
                result = orchestrator.pre_publish(config, request.context, factory, request.dry_run)
            elif hook == Hook.POST_PUBLISH.value:
                result = orchestrator.post_publish(config, request.context, factory, request.dry_run)
            elif hook == Hook.ON_ERROR.value:
                result = orchestrator.on_error(config, request.context, request.dry_run)
            else:
                return ExecuteResponse(success=True, message=f"Hook {hook} not implemented")
        except SentryPluginError as e:
            logger.error("Hook %s failed: %s", hook, e)
            return ExecuteResponse(success=False, error=str(e))

        return ExecuteResponse.from_phase(result)

    def validate(
        self,
        config: dict,
        context: CallContext | None = None,
        check_remote: bool = True,
    ) -> ValidateResponse:
        """Check the config map and, unless ``check_remote`` is False, the credentials.

        A missing auth token is reported alone: nothing else is checked.
        """
        vb = ValidationBuilder()
        cfg = parse_config(config)

        if not cfg.auth_token:
            vb.add_error("auth_token", "Sentry auth token is required")
            return vb.build()

        if not cfg.org:
            vb.add_error("org", "Sentry organization is required")

        if not cfg.get_projects():
            vb.add_error("project", "At least one project is required")

        if cfg.version_format:
            try:
                check_template(cfg.version_format)
            except TemplateError as e:
                vb.add_error("version_format", f"Invalid version format template: {e.reason}")

        if check_remote and cfg.org:
            tracker = self._tracker_builder(cfg, context)
            try:
                tracker.get_organization()
            except SentryPluginError as e:
                vb.add_error("auth_token", f"Failed to authenticate with Sentry: {e}")
            finally:
                tracker.close()

        return vb.build()
