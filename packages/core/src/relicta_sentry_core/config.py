import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

import yaml

DEFAULT_URL = "https://sentry.io"
DEFAULT_VERSION_FORMAT = "{{ version }}"
DEFAULT_ENVIRONMENT = "production"
UNKNOWN_REPOSITORY = "unknown"

# Scalar keys that fall back to an environment variable when not set in config.
ENV_FALLBACKS = {
    "auth_token": "SENTRY_AUTH_TOKEN",
    "org": "SENTRY_ORG",
    "project": "SENTRY_PROJECT",
    "url": "SENTRY_URL",
}

DEFAULT_CONFIG: dict = {
    "version_format": DEFAULT_VERSION_FORMAT,
    "environment": DEFAULT_ENVIRONMENT,
    "set_commits": True,
    "create_deploy": True,
    "upload_sourcemaps": False,  # accepted for host compatibility; nothing uploads yet
    "finalize": True,
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class CommitsConfig:
    auto: bool = True
    repository: str = ""


@dataclass(frozen=True)
class DeployConfig:
    environment: str = DEFAULT_ENVIRONMENT
    name: str = ""


@dataclass(frozen=True)
class SourcemapsConfig:
    path: str = "./dist"
    url_prefix: str = "~/"
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PluginConfig:
    """Typed view of the plugin's config map. Built once per invocation by parse_config()."""

    auth_token: str = ""
    org: str = ""
    project: str = ""
    projects: list[str] = field(default_factory=list)
    url: str = DEFAULT_URL
    version_format: str = DEFAULT_VERSION_FORMAT
    environment: str = DEFAULT_ENVIRONMENT
    set_commits: bool = True
    commits: CommitsConfig = field(default_factory=CommitsConfig)
    create_deploy: bool = True
    deploy: DeployConfig = field(default_factory=DeployConfig)
    upload_sourcemaps: bool = False
    sourcemaps: SourcemapsConfig = field(default_factory=SourcemapsConfig)
    finalize: bool = True

    def get_projects(self) -> list[str]:
        """Return ``projects`` de-duplicated in order, with ``project`` appended if missing."""
        projects: list[str] = []
        for p in self.projects:
            if p not in projects:
                projects.append(p)
        if self.project and self.project not in projects:
            projects.append(self.project)
        return projects

    @property
    def commit_repository(self) -> str:
        return self.commits.repository or UNKNOWN_REPOSITORY


def _get_str(raw: Mapping, key: str, default: str = "", environ: Optional[Mapping] = None) -> str:
    value = raw.get(key)
    if value is None or value == "":
        env_var = ENV_FALLBACKS.get(key)
        if env_var and environ is not None:
            value = environ.get(env_var)
    if value is None or value == "":
        return default
    return str(value)


def _get_bool(raw: Mapping, key: str, default: bool) -> bool:
    value = raw.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return default


def _get_str_list(raw: Mapping, key: str) -> list[str]:
    value = raw.get(key)
    if not isinstance(value, (list, tuple)):
        return []
    return [v for v in value if isinstance(v, str)]


def parse_config(raw: Optional[Mapping], environ: Optional[Mapping] = None) -> PluginConfig:
    """Build a PluginConfig from the host's config map.

    Unset scalars listed in ENV_FALLBACKS are read from ``environ``
    (``os.environ`` when not given). Values of the wrong type are ignored
    rather than rejected; validate() reports what is actually missing.
    """
    raw = raw or {}
    if environ is None:
        environ = os.environ

    environment = _get_str(raw, "environment", DEFAULT_ENVIRONMENT)

    commits_raw = raw.get("commits")
    if isinstance(commits_raw, Mapping):
        commits = CommitsConfig(
            auto=_get_bool(commits_raw, "auto", True),
            repository=_get_str(commits_raw, "repository"),
        )
    else:
        commits = CommitsConfig()

    deploy_raw = raw.get("deploy")
    if isinstance(deploy_raw, Mapping):
        deploy = DeployConfig(
            environment=_get_str(deploy_raw, "environment", environment),
            name=_get_str(deploy_raw, "name"),
        )
    else:
        deploy = DeployConfig(environment=environment)

    sourcemaps_raw = raw.get("sourcemaps")
    if isinstance(sourcemaps_raw, Mapping):
        sourcemaps = SourcemapsConfig(
            path=_get_str(sourcemaps_raw, "path", "./dist"),
            url_prefix=_get_str(sourcemaps_raw, "url_prefix", "~/"),
            include=_get_str_list(sourcemaps_raw, "include"),
            exclude=_get_str_list(sourcemaps_raw, "exclude"),
        )
    else:
        sourcemaps = SourcemapsConfig()

    return PluginConfig(
        auth_token=_get_str(raw, "auth_token", environ=environ),
        org=_get_str(raw, "org", environ=environ),
        project=_get_str(raw, "project", environ=environ),
        projects=_get_str_list(raw, "projects"),
        url=_get_str(raw, "url", DEFAULT_URL, environ=environ),
        version_format=_get_str(raw, "version_format", DEFAULT_VERSION_FORMAT),
        environment=environment,
        set_commits=_get_bool(raw, "set_commits", True),
        commits=commits,
        create_deploy=_get_bool(raw, "create_deploy", True),
        deploy=deploy,
        upload_sourcemaps=_get_bool(raw, "upload_sourcemaps", False),
        sourcemaps=sourcemaps,
        finalize=_get_bool(raw, "finalize", True),
    )


def load_config(config_path: str = ".sentry-release.yml", overrides: Optional[dict] = None) -> dict:
    """
    Load the raw config map by merging (in order of precedence):
      1. Built-in defaults
      2. The YAML config file, if it exists
      3. Non-None overrides (CLI flags)

    Environment fallbacks are applied later, by parse_config().
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping, got {type(file_config).__name__}")
        config.update(file_config)

    if overrides:
        for key, value in overrides.items():
            if value is not None:
                config[key] = value

    return config
