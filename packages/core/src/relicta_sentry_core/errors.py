"""Error taxonomy for the Sentry release plugin.

Every failure the plugin can produce is a SentryPluginError. The plugin
facade converts these into failed ExecuteResponses, so none of them ever
reaches the host as an unhandled exception.
"""

from __future__ import annotations

from dataclasses import dataclass


class SentryPluginError(Exception):
    """Base error for everything raised inside the plugin."""


class TemplateError(SentryPluginError):
    """The version_format template could not be parsed or rendered."""

    def __init__(self, template: str, reason: str):
        self.template = template
        self.reason = reason
        super().__init__(f"invalid version template {template!r}: {reason}")


class TransportError(SentryPluginError):
    """The request never produced an HTTP response (network, timeout, TLS)."""


class CancelledError(TransportError):
    """The invocation was cancelled or its deadline passed before the call finished."""


class RemoteAPIError(SentryPluginError):
    """Sentry answered with a non-2xx status.

    ``detail`` is the ``detail`` field of the JSON error body when Sentry sent
    one, otherwise the raw response body.
    """

    def __init__(self, status: int, detail: str):
        self.status = status
        self.detail = detail
        super().__init__(f"API error: {detail} (status {status})")


@dataclass(frozen=True)
class FieldError:
    """A single configuration problem, scoped to the offending config key."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationError(SentryPluginError):
    def __init__(self, errors: list[FieldError]):
        self.errors = errors
        super().__init__(f"Configuration validation failed: {'; '.join(str(e) for e in errors)}")
