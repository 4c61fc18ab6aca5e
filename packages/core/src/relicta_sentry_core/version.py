"""Rendering of the Sentry release version from the ``version_format`` template.

Templates are Jinja2, rendered in a sandbox with strict undefined handling,
and see exactly three fields::

    version    the release version, e.g. "1.2.3"
    tag_name   the git tag, e.g. "v1.2.3"
    short_sha  the first 7 characters of the release commit SHA

The dotted field style used in the host's own config files
(``{{.Version}}``, ``{{.TagName}}``, ``{{.ShortSHA}}``) is rewritten to the
fields above before parsing, anywhere inside a ``{{ }}`` or ``{% %}`` tag, so
``{{ "v" ~ .Version }}`` works too. Only the fields are translated: Go
template functions such as ``printf`` are not supported and fail with a
TemplateError. Use Jinja expressions and filters instead.

Any failure while parsing or rendering is raised as TemplateError.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from jinja2 import StrictUndefined, TemplateSyntaxError
from jinja2.sandbox import SandboxedEnvironment

from relicta_sentry_core.errors import TemplateError

if TYPE_CHECKING:
    from relicta_sentry_core.events import ReleaseContext

SHORT_SHA_LENGTH = 7

_DOTTED_FIELDS = {
    "Version": "version",
    "TagName": "tag_name",
    "ShortSHA": "short_sha",
}
_TAG_RE = re.compile(r"\{[{%].*?[}%]\}", re.DOTALL)
_DOTTED_RE = re.compile(r"(?<![\w)\]'\"])\.([A-Za-z_]\w*)")

_env = SandboxedEnvironment(undefined=StrictUndefined, autoescape=False, keep_trailing_newline=True)
_env.globals = {}


def short_sha(sha: str) -> str:
    return sha[:SHORT_SHA_LENGTH]


def _rewrite_field(match: re.Match) -> str:
    name = match.group(1)
    return _DOTTED_FIELDS.get(name, name)


def _normalize(template: str) -> str:
    return _TAG_RE.sub(lambda tag: _DOTTED_RE.sub(_rewrite_field, tag.group(0)), template)


def check_template(template: str) -> None:
    """Parse ``template`` without rendering it. Raises TemplateError on a syntax error."""
    try:
        _env.parse(_normalize(template))
    except TemplateSyntaxError as e:
        raise TemplateError(template, e.message or str(e)) from e


def format_version(template: str, release: ReleaseContext) -> str:
    try:
        compiled = _env.from_string(_normalize(template))
    except TemplateSyntaxError as e:
        raise TemplateError(template, e.message or str(e)) from e
    try:
        return compiled.render(
            version=release.version,
            tag_name=release.tag_name,
            short_sha=short_sha(release.commit_sha),
        )
    except Exception as e:
        # the template is user input; anything it raises is a template failure
        raise TemplateError(template, str(e) or type(e).__name__) from e
