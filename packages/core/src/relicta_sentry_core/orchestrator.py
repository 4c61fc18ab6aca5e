"""Release lifecycle orchestration.

Each host hook maps to one phase function here:

  pre-publish   render version → create release (or reuse an existing one)
  post-publish  render version → set commits → create deploy → finalize
  on-error      nothing yet; always succeeds

The version string is rendered once per phase and reused for every call in
that phase. Dry runs never construct a tracker.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from relicta_sentry_core.commits import extract_commits
from relicta_sentry_core.errors import SentryPluginError, TemplateError
from relicta_sentry_core.version import format_version

if TYPE_CHECKING:
    from relicta_sentry_core.config import PluginConfig
    from relicta_sentry_core.events import ReleaseContext
    from relicta_sentry_core.trackers.base import BaseTracker

logger = logging.getLogger(__name__)

TrackerFactory = Callable[["PluginConfig"], "BaseTracker"]

NO_ACTIONS = "No actions taken"


@dataclass
class StepOutcome:
    """Result of one best-effort post-publish step."""

    name: str
    ok: bool
    detail: str

    def to_dict(self) -> dict:
        return {"name": self.name, "ok": self.ok, "detail": self.detail}


@dataclass
class PhaseResult:
    success: bool
    message: str = ""
    error: str = ""
    outputs: dict = field(default_factory=dict)
    steps: list[StepOutcome] = field(default_factory=list)

    @property
    def warnings(self) -> list[StepOutcome]:
        return [s for s in self.steps if not s.ok]


def _template_failure(error: TemplateError) -> PhaseResult:
    logger.error("Cannot render release version: %s", error)
    return PhaseResult(success=False, error=f"Failed to format version: {error}")


def pre_publish(
    config: PluginConfig,
    release: ReleaseContext,
    tracker_factory: TrackerFactory,
    dry_run: bool = False,
) -> PhaseResult:
    """Create the Sentry release before the host publishes.

    An existing release with the same version counts as success. Only when
    both the create and the fallback fetch fail does the phase fail, and the
    reported error is the create error.
    """
    try:
        version = format_version(config.version_format, release)
    except TemplateError as e:
        return _template_failure(e)

    projects = config.get_projects()

    if dry_run:
        return PhaseResult(
            success=True,
            message=f"Would create Sentry release '{version}' for projects: {', '.join(projects)}",
            outputs={"version": version, "projects": projects},
        )

    tracker = tracker_factory(config)
    try:
        outcome = tracker.create_or_get_release(version, projects)
    except SentryPluginError as e:
        logger.error("Failed to create Sentry release %s: %s", version, e)
        return PhaseResult(success=False, error=f"Failed to create release: {e}")
    finally:
        tracker.close()

    if outcome.created:
        message = f"Created Sentry release: {outcome.release.version}"
    else:
        message = f"Using existing Sentry release: {outcome.release.version}"
    logger.info("%s", message)

    return PhaseResult(
        success=True,
        message=message,
        outputs={
            "version": outcome.release.version or version,
            "release_url": outcome.release.url,
            "date_created": outcome.release.date_created,
            "created": outcome.created,
        },
    )


def _run_step(name: str, action: str, fn: Callable[[], str]) -> StepOutcome:
    try:
        detail = fn()
    except SentryPluginError as e:
        logger.warning("Sentry step %s failed: %s", name, e)
        return StepOutcome(name=name, ok=False, detail=f"Warning: Failed to {action}: {e}")
    return StepOutcome(name=name, ok=True, detail=detail)


def post_publish(
    config: PluginConfig,
    release: ReleaseContext,
    tracker_factory: TrackerFactory,
    dry_run: bool = False,
) -> PhaseResult:
    """Associate commits, record a deploy and finalize the release.

    The three steps are independent and best-effort: a failing step is
    recorded as a warning and the next one still runs. The phase itself only
    fails when the version cannot be rendered.
    """
    try:
        version = format_version(config.version_format, release)
    except TemplateError as e:
        return _template_failure(e)

    if dry_run:
        planned = []
        if config.set_commits:
            planned.append("Would associate commits with release")
        if config.create_deploy:
            planned.append(f"Would create deploy for environment: {config.deploy.environment}")
        if config.finalize:
            planned.append("Would finalize release")
        return PhaseResult(
            success=True,
            message="; ".join(planned) or NO_ACTIONS,
            outputs={"version": version},
        )

    if not (config.set_commits or config.create_deploy or config.finalize):
        return PhaseResult(success=True, message=NO_ACTIONS, outputs={"version": version, "steps": []})

    steps: list[StepOutcome] = []
    tracker = tracker_factory(config)
    try:
        if config.set_commits:
            commits = extract_commits(config, release)
            if commits:

                def _set_commits() -> str:
                    tracker.set_commits(version, commits)
                    return f"Associated {len(commits)} commits"

                steps.append(_run_step("set_commits", "set commits", _set_commits))

        if config.create_deploy:

            def _create_deploy() -> str:
                deploy = tracker.create_deploy(version, config.deploy)
                return f"Created deploy: {deploy.environment or config.deploy.environment}"

            steps.append(_run_step("create_deploy", "create deploy", _create_deploy))

        if config.finalize:

            def _finalize() -> str:
                tracker.finalize_release(version)
                return "Finalized release"

            steps.append(_run_step("finalize", "finalize release", _finalize))
    finally:
        tracker.close()

    message = "; ".join(s.detail for s in steps) or NO_ACTIONS
    return PhaseResult(
        success=True,
        message=message,
        outputs={"version": version, "steps": [s.to_dict() for s in steps]},
        steps=steps,
    )


def on_error(config: PluginConfig, release: ReleaseContext, dry_run: bool = False) -> PhaseResult:
    """Hook for failed releases. Takes no Sentry action."""
    logger.info("Release %s failed; no Sentry action taken", release.version)
    return PhaseResult(success=True, message="Release failure noted (no Sentry action taken)")
