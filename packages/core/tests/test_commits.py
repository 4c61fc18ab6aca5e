"""Tests for commit extraction from release changes."""

from datetime import datetime, timezone

from relicta_sentry_core.commits import extract_commits
from relicta_sentry_core.config import CommitsConfig, PluginConfig
from relicta_sentry_core.events import CategorizedChanges, ConventionalCommit, ReleaseContext

NOW = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


def _release(**categories):
    return ReleaseContext(version="1.0.0", changes=CategorizedChanges(**categories))


def test_feature_and_fix_in_order():
    cfg = PluginConfig(commits=CommitsConfig(repository="org/repo"))
    release = _release(
        features=[ConventionalCommit(hash="abc123", type="feat", description="Add feature")],
        fixes=[ConventionalCommit(hash="def456", type="fix", description="Fix bug")],
    )

    commits = extract_commits(cfg, release, now=NOW)

    assert [c.id for c in commits] == ["abc123", "def456"]
    assert [c.message for c in commits] == ["Add feature", "Fix bug"]
    assert all(c.repository == "org/repo" for c in commits)


def test_category_order_is_features_fixes_breaking_other():
    release = _release(
        other=[ConventionalCommit(hash="o1")],
        breaking=[ConventionalCommit(hash="b1")],
        fixes=[ConventionalCommit(hash="x1"), ConventionalCommit(hash="x2")],
        features=[ConventionalCommit(hash="f1")],
    )
    commits = extract_commits(PluginConfig(), release, now=NOW)
    assert [c.id for c in commits] == ["f1", "x1", "x2", "b1", "o1"]


def test_repository_defaults_to_unknown():
    release = _release(features=[ConventionalCommit(hash="abc")])
    assert extract_commits(PluginConfig(), release, now=NOW)[0].repository == "unknown"


def test_no_changes_returns_empty_list():
    assert extract_commits(PluginConfig(), ReleaseContext(version="1.0.0"), now=NOW) == []


def test_empty_categories_return_empty_list():
    assert extract_commits(PluginConfig(), _release(), now=NOW) == []


def test_timestamp_is_extraction_time():
    release = _release(features=[ConventionalCommit(hash="a")], fixes=[ConventionalCommit(hash="b")])
    commits = extract_commits(PluginConfig(), release, now=NOW)
    assert {c.timestamp for c in commits} == {"2024-05-01T12:30:00Z"}


def test_timestamp_defaults_to_now():
    release = _release(features=[ConventionalCommit(hash="a")])
    before = datetime.now(timezone.utc).replace(microsecond=0)
    stamp = extract_commits(PluginConfig(), release)[0].timestamp
    parsed = datetime.strptime(stamp, "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=timezone.utc)
    assert parsed >= before


def test_author_carried_when_present():
    release = _release(features=[ConventionalCommit(hash="a", author="Jane Doe")])
    commit = extract_commits(PluginConfig(), release, now=NOW)[0]
    assert commit.author_name == "Jane Doe"
    assert commit.to_dict()["author_name"] == "Jane Doe"


def test_to_dict_omits_empty_optional_fields():
    release = _release(features=[ConventionalCommit(hash="a")])
    payload = extract_commits(PluginConfig(), release, now=NOW)[0].to_dict()
    assert payload == {"id": "a", "repository": "unknown", "timestamp": "2024-05-01T12:30:00Z"}
