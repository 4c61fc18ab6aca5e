"""Sentry auth token resolution with sentry-cli fallback.

Resolution order (stops at first success):
  1. ``auth_token`` in the config file, or SENTRY_AUTH_TOKEN (parse_config)
  2. ``[auth] token`` in ~/.sentryclirc (written by `sentry-cli login`)

Lets developers who already use sentry-cli run the plugin locally without
copying a token into the config file.
"""

from __future__ import annotations

import configparser
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def _sentryclirc_path() -> Path:
    return Path(os.environ.get("SENTRY_CLI_RC", Path.home() / ".sentryclirc"))


def resolve_auth_token(config: dict) -> str | None:
    """Return a Sentry auth token or None if no source provides one.

    Never raises. A malformed ~/.sentryclirc is logged and ignored.
    """
    token = config.get("auth_token") or os.environ.get("SENTRY_AUTH_TOKEN")
    if token:
        return token

    path = _sentryclirc_path()
    if not path.exists():
        return None

    parser = configparser.ConfigParser()
    try:
        parser.read(path)
    except configparser.Error as e:
        logger.warning("Ignoring unreadable %s: %s", path, e)
        return None

    rc_token = parser.get("auth", "token", fallback="").strip()
    if rc_token:
        logger.debug("Resolved Sentry token from %s.", path)
        return rc_token
    return None
