"""
Pytest fixtures for review reminder testing.

Provides GitLab-shaped payload builders, mock collaborators and sample
configuration.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Generator

import pytest

from reviewreminder.config import Config
from reviewreminder.testing.mock import MockGitLabClient, MockMessenger
from reviewreminder.types.requests import MergeRequest, parse_merge_request, parse_project

FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# Payload builders
# ============================================================================


def iso(dt: datetime) -> str:
    """Format a datetime the way GitLab does."""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def create_mock_project(
    id: int = 1,
    name: str = "backend",
    web_url: str | None = None,
) -> dict[str, Any]:
    return {"id": id, "name": name, "web_url": web_url or f"https://gitlab.example.com/team/{name}"}


def create_mock_request(
    iid: int = 1,
    title: str = "Add feature",
    author: str = "bob",
    updated_at: datetime | None = None,
    work_in_progress: bool = False,
    has_conflicts: bool = False,
    project_id: int = 1,
) -> dict[str, Any]:
    """Create an open merge request payload as listed by GitLab."""
    return {
        "id": 1000 + iid,
        "iid": iid,
        "project_id": project_id,
        "title": title,
        "web_url": f"https://gitlab.example.com/team/backend/-/merge_requests/{iid}",
        "author": {"username": author},
        "updated_at": iso(updated_at or FIXED_NOW - timedelta(hours=3)),
        "work_in_progress": work_in_progress,
        "has_conflicts": has_conflicts,
    }


def create_mock_approvals(approvals_left: int = 1, approved_by: list[str] | None = None) -> dict[str, Any]:
    return {
        "approvals_left": approvals_left,
        "approved_by": [{"user": {"username": name}} for name in approved_by or []],
    }


def create_mock_change(
    new_path: str = "src/app.py",
    old_path: str | None = None,
    diff: str = "@@ -1,2 +1,3 @@\n context\n-old line\n+new line\n+another line\n",
) -> dict[str, Any]:
    return {"old_path": old_path or new_path, "new_path": new_path, "diff": diff}


def create_mock_discussion(*notes: tuple[str, bool, bool]) -> dict[str, Any]:
    """
    Create a discussion from ``(username, resolvable, resolved)`` tuples.

    The first tuple is the note that opened the thread.
    """
    return {
        "id": "d" + "".join(note[0] for note in notes),
        "notes": [
            {"author": {"username": username}, "resolvable": resolvable, "resolved": resolved}
            for username, resolvable, resolved in notes
        ],
    }


def create_mock_pipeline(status: str = "success", id: int = 1) -> dict[str, Any]:
    return {"id": id, "status": status}


def create_merge_request(
    approvals: dict[str, Any] | None = None,
    changes: list[dict[str, Any]] | None = None,
    discussions: list[dict[str, Any]] | None = None,
    pipelines: list[dict[str, Any]] | None = None,
    paths: list[str] | None = None,
    project: dict[str, Any] | None = None,
    **request_fields: Any,
) -> MergeRequest:
    """Create a parsed MergeRequest without going through the aggregator."""
    data = {
        **create_mock_request(**request_fields),
        **(approvals if approvals is not None else create_mock_approvals()),
        "changes": changes if changes is not None else [create_mock_change()],
        "discussions": discussions or [],
        "pipelines": pipelines or [],
    }
    return parse_merge_request(data, parse_project(project or create_mock_project(), paths))


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def mock_gitlab() -> Generator[MockGitLabClient, None, None]:
    """
    Provide a MockGitLabClient with one registered project (id 1).

    Example:
        ```python
        def test_my_feature(mock_gitlab):
            mock_gitlab.add_request(1, create_mock_request(iid=3))
        ```
    """
    client = MockGitLabClient()
    client.add_project(create_mock_project())
    yield client
    client.reset()


@pytest.fixture
def mock_messenger() -> MockMessenger:
    return MockMessenger()


@pytest.fixture
def base_config() -> Config:
    """Configuration with one project and markdown output."""
    return Config.from_dict({
        "gitlab": {"url": "https://gitlab.example.com", "token": "test-token", "projects": [{"id": 1}]},
        "messenger": {"url": "https://chat.example.com/hooks/abc", "markup": "markdown"},
    })


@pytest.fixture
def sample_request() -> MergeRequest:
    """An unapproved request with no threads."""
    return create_merge_request(iid=5, title="Fix login", approvals=create_mock_approvals(2))


@pytest.fixture
def under_review_request() -> MergeRequest:
    """A request with one unresolved thread opened by alice."""
    return create_merge_request(
        iid=6,
        title="Refactor cache",
        approvals=create_mock_approvals(1),
        discussions=[create_mock_discussion(("alice", True, False))],
    )
