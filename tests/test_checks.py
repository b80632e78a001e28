"""
Tests for applicability checks and path filters.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from reviewreminder.checks import (
    RequestChecks,
    expand_braces,
    has_paths_changes,
    is_under_review,
    path_matches,
)
from reviewreminder.config import UnapprovedSettings
from reviewreminder.testing import (
    create_merge_request,
    create_mock_approvals,
    create_mock_change,
    create_mock_discussion,
    create_mock_pipeline,
)
from reviewreminder.types.requests import Change

path_strategy = st.text(
    alphabet=st.characters(whitelist_categories=("L", "N"), whitelist_characters="-_./"),
    max_size=40,
)

ALL_CHECKS = RequestChecks(UnapprovedSettings(check_conflicts=True, check_pipeline=True))


@given(
    approvals_left=st.integers(min_value=0, max_value=5),
    has_conflicts=st.booleans(),
    unresolved=st.booleans(),
    pipeline_status=st.sampled_from(["failed", "success", "running"]),
)
@settings(max_examples=100)
def test_work_in_progress_is_never_applicable(
    approvals_left: int, has_conflicts: bool, unresolved: bool, pipeline_status: str
) -> None:
    """Draft merge requests are skipped whatever else is true about them."""
    request = create_merge_request(
        work_in_progress=True,
        has_conflicts=has_conflicts,
        approvals=create_mock_approvals(approvals_left),
        discussions=[create_mock_discussion(("alice", True, not unresolved))],
        pipelines=[create_mock_pipeline(pipeline_status)],
    )

    assert ALL_CHECKS.is_applicable(request) is False


@given(paths=st.lists(path_strategy, max_size=5))
@settings(max_examples=100)
def test_empty_path_filter_always_matches(paths: list[str]) -> None:
    """Without configured patterns every change set is relevant, even an empty one."""
    changes = [Change(path, path) for path in paths]

    assert has_paths_changes(changes, []) is True


@pytest.mark.parametrize(
    ("path", "pattern", "expected"),
    [
        ("src/app.py", "src/**", True),
        ("src/deep/nested/app.py", "src/**", True),
        ("src/deep/app.py", "src/**/*.py", True),
        ("src/app.py", "src/**/*.py", True),
        ("docs/readme.md", "*.md", False),
        ("readme.md", "*.md", True),
        ("docs/readme.md", "docs/*.md", True),
        ("docs/a/readme.md", "docs/*.md", False),
        ("x/y/readme.md", "**/*.md", True),
        ("app.py", "ap?.py", True),
        ("app.py", "app.js", False),
        ("a+b.txt", "a+b.txt", True),
        ("src/app.ts", "src/*.{js,ts}", True),
        ("src/app.py", "src/*.{js,ts}", False),
        ("lib/x.ts", "{src,lib}/**/*.{js,ts}", True),
        ("src/a.py", "src/[ab].py", True),
        ("src/c.py", "src/[ab].py", False),
        ("src/c.py", "src/[!ab].py", True),
        ("src/b.py", "src/[!ab].py", False),
        ("v3.txt", "v[0-9].txt", True),
        (".env", "*", False),
        (".env", ".*", True),
        ("config/.env", "config/*", False),
        ("config/.env", "**/.env", True),
        (".github/workflows/ci.yml", "**/*.yml", False),
        (".github/workflows/ci.yml", ".github/**", True),
        ("{x}.txt", "{x}.txt", True),
    ],
)
def test_path_matches(path: str, pattern: str, expected: bool) -> None:
    assert path_matches(path, pattern) is expected


def test_expand_braces() -> None:
    assert expand_braces("src/*.{js,ts}") == ["src/*.js", "src/*.ts"]
    assert expand_braces("{a,{b,c}}/x") == ["a/x", "b/x", "c/x"]
    assert expand_braces("{a}/{b,c}") == ["{a}/b", "{a}/c"]
    assert expand_braces("plain/path") == ["plain/path"]


def test_request_touching_brace_pattern_is_applicable() -> None:
    request = create_merge_request(
        approvals=create_mock_approvals(2),
        changes=[create_mock_change("web/app.tsx")],
        paths=["web/*.{ts,tsx}"],
    )

    assert ALL_CHECKS.is_applicable(request) is True


def test_renamed_file_matches_on_old_path() -> None:
    changes = [Change(old_path="legacy/api.py", new_path="src/api.py")]

    assert has_paths_changes(changes, ["legacy/**"])
    assert not has_paths_changes(changes, ["docs/**"])


def test_request_outside_path_filter_is_not_applicable() -> None:
    request = create_merge_request(
        approvals=create_mock_approvals(2),
        changes=[create_mock_change("src/app.py")],
        paths=["docs/**"],
    )

    assert ALL_CHECKS.is_applicable(request) is False


class TestApplicability:
    def test_unapproved(self) -> None:
        assert ALL_CHECKS.is_applicable(create_merge_request(approvals=create_mock_approvals(1)))

    def test_approved_without_anything_open(self) -> None:
        assert not ALL_CHECKS.is_applicable(create_merge_request(approvals=create_mock_approvals(0)))

    def test_approved_but_under_review(self) -> None:
        request = create_merge_request(
            approvals=create_mock_approvals(0),
            discussions=[create_mock_discussion(("alice", True, False))],
        )

        assert is_under_review(request)
        assert ALL_CHECKS.is_applicable(request)

    def test_conflicts_only_count_when_checked(self) -> None:
        request = create_merge_request(approvals=create_mock_approvals(0), has_conflicts=True)

        assert ALL_CHECKS.is_applicable(request)
        assert not RequestChecks(UnapprovedSettings()).is_applicable(request)

    def test_failed_pipeline_only_counts_when_checked(self) -> None:
        request = create_merge_request(
            approvals=create_mock_approvals(0),
            pipelines=[create_mock_pipeline("failed")],
        )

        assert ALL_CHECKS.is_applicable(request)
        assert not RequestChecks(UnapprovedSettings()).is_applicable(request)

    def test_missing_pipelines_never_count_as_failed(self) -> None:
        request = create_merge_request(approvals=create_mock_approvals(0), pipelines=[])

        assert ALL_CHECKS.has_failed_pipeline(request) is False
        assert ALL_CHECKS.is_applicable(request) is False

    def test_non_resolvable_notes_are_not_reviews(self) -> None:
        request = create_merge_request(discussions=[create_mock_discussion(("alice", False, False))])

        assert not is_under_review(request)
