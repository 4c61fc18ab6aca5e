"""Tests for release version templating."""

import pytest

from relicta_sentry_core.errors import TemplateError
from relicta_sentry_core.events import ReleaseContext
from relicta_sentry_core.version import check_template, format_version, short_sha

RELEASE = ReleaseContext(version="1.2.3", tag_name="v1.2.3", commit_sha="abc123def456789")


class TestShortSha:
    @pytest.mark.parametrize(
        "sha, expected",
        [
            ("abc123def456789", "abc123d"),
            ("abc", "abc"),
            ("", ""),
            ("1234567", "1234567"),
            ("12345678", "1234567"),
        ],
    )
    def test_truncates_to_seven_characters(self, sha, expected):
        assert short_sha(sha) == expected

    def test_length_is_exactly_seven_for_long_input(self):
        assert len(short_sha("f" * 40)) == 7


class TestFormatVersion:
    @pytest.mark.parametrize(
        "template, expected",
        [
            ("{{ version }}", "1.2.3"),
            ("v{{ version }}", "v1.2.3"),
            ("{{ tag_name }}", "v1.2.3"),
            ("{{ version }}-{{ short_sha }}", "1.2.3-abc123d"),
            ("release-{{ version }}-{{ short_sha }}", "release-1.2.3-abc123d"),
        ],
    )
    def test_renders_fields(self, template, expected):
        assert format_version(template, RELEASE) == expected

    @pytest.mark.parametrize(
        "template, expected",
        [
            ("{{.Version}}", "1.2.3"),
            ("v{{.Version}}", "v1.2.3"),
            ("{{.TagName}}", "v1.2.3"),
            ("{{ .Version }}-{{.ShortSHA}}", "1.2.3-abc123d"),
            ("{{ 'v' ~ .Version }}", "v1.2.3"),
            ("{{ .TagName | upper }}", "V1.2.3"),
            ("{{- .Version -}}", "1.2.3"),
            ("{% if .ShortSHA %}{{ .Version }}+{{ .ShortSHA }}{% endif %}", "1.2.3+abc123d"),
        ],
    )
    def test_accepts_dotted_host_fields(self, template, expected):
        assert format_version(template, RELEASE) == expected

    def test_plain_text_template_is_returned_as_is(self):
        assert format_version("static", RELEASE) == "static"

    def test_rendering_is_deterministic(self):
        template = "{{ version }}+{{ short_sha }}"
        assert format_version(template, RELEASE) == format_version(template, RELEASE)

    def test_unknown_field_raises_template_error(self):
        with pytest.raises(TemplateError):
            format_version("{{ branch }}", RELEASE)

    def test_unknown_dotted_field_raises_template_error(self):
        with pytest.raises(TemplateError):
            format_version("{{.Branch}}", RELEASE)

    def test_dotted_text_outside_tags_is_left_alone(self):
        assert format_version("release.Version-{{ .Version }}", RELEASE) == "release.Version-1.2.3"

    def test_go_template_functions_raise_template_error(self):
        with pytest.raises(TemplateError) as exc_info:
            format_version('{{ printf "%s" .Version }}', RELEASE)
        assert exc_info.value.template == '{{ printf "%s" .Version }}'

    @pytest.mark.parametrize(
        "template",
        [
            "{{ 1 / 0 }}",
            "{{ version[99] }}",
            "{{ {}['missing'] }}",
            "{{ version + 1 }}",
            "{{ version.__class__ }}",
        ],
    )
    def test_any_render_failure_is_template_error(self, template):
        with pytest.raises(TemplateError) as exc_info:
            format_version(template, RELEASE)
        assert exc_info.value.reason

    def test_unclosed_tag_raises_template_error(self):
        with pytest.raises(TemplateError) as exc_info:
            format_version("{{.Invalid", RELEASE)
        assert exc_info.value.template == "{{.Invalid"

    def test_template_error_is_not_transport_error(self):
        from relicta_sentry_core.errors import TransportError

        with pytest.raises(TemplateError) as exc_info:
            format_version("{{ version", RELEASE)
        assert not isinstance(exc_info.value, TransportError)


class TestCheckTemplate:
    def test_valid_template_passes(self):
        check_template("v{{ version }}-{{ short_sha }}")

    def test_dotted_template_passes(self):
        check_template("{{.Version}}")

    def test_syntax_error_raises(self):
        with pytest.raises(TemplateError):
            check_template("{{.Invalid")

    def test_unknown_field_only_fails_at_render_time(self):
        # parsing alone cannot know which names will be defined
        check_template("{{ nope }}")
