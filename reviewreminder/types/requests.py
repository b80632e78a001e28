"""Merge request-related data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class User:
    """GitLab user reference."""

    username: str


@dataclass
class Note:
    """One note (comment) inside a discussion."""

    author: User
    resolvable: bool = False
    resolved: bool = False


@dataclass
class Discussion:
    """Discussion thread. The first note opens the thread."""

    notes: list[Note] = field(default_factory=list)


@dataclass
class Change:
    """One changed file of a merge request."""

    old_path: str
    new_path: str
    diff: str = ""


@dataclass
class Pipeline:
    """CI pipeline run."""

    id: int
    status: str  # "failed", "success", "running", "pending", "canceled", ...


@dataclass
class Project:
    """Repository a merge request belongs to."""

    id: int | str
    name: str
    web_url: str
    paths: list[str] = field(default_factory=list)


@dataclass
class MergeRequest:
    """Merge request snapshot, extended with approvals, changes, discussions and pipelines."""

    id: int
    iid: int
    title: str
    web_url: str
    author: User
    updated_at: datetime
    project: Project
    approvals_left: int = 0
    approved_by: list[User] = field(default_factory=list)
    work_in_progress: bool = False
    has_conflicts: bool = False
    changes: list[Change] = field(default_factory=list)
    discussions: list[Discussion] = field(default_factory=list)
    pipelines: list[Pipeline] = field(default_factory=list)  # most recent first


def parse_timestamp(value: str) -> datetime:
    """Parse a GitLab ISO 8601 timestamp into an aware datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_user(data: dict[str, Any]) -> User:
    return User(username=data["username"])


def parse_discussion(data: dict[str, Any]) -> Discussion:
    return Discussion(
        notes=[
            Note(
                author=parse_user(note["author"]),
                resolvable=note.get("resolvable", False),
                resolved=note.get("resolved", False),
            )
            for note in data.get("notes", [])
        ]
    )


def parse_project(data: dict[str, Any], paths: list[str] | None = None) -> Project:
    """Parse project data from the API, attaching configured path filters."""
    return Project(
        id=data["id"],
        name=data.get("name") or data.get("path_with_namespace") or str(data["id"]),
        web_url=data.get("web_url", ""),
        paths=list(paths or []),
    )


def parse_merge_request(data: dict[str, Any], project: Project) -> MergeRequest:
    """
    Parse an extended merge request record.

    Args:
        data: Merge request data merged with its approvals, changes,
            discussions and pipelines fragments
        project: Owning project

    Returns:
        MergeRequest
    """
    approved_by = [parse_user(approval["user"]) for approval in data.get("approved_by") or []]

    return MergeRequest(
        id=data["id"],
        iid=data["iid"],
        title=data["title"],
        web_url=data["web_url"],
        author=parse_user(data["author"]),
        updated_at=parse_timestamp(data["updated_at"]),
        project=project,
        approvals_left=data.get("approvals_left") or 0,
        approved_by=approved_by,
        work_in_progress=bool(data.get("work_in_progress", data.get("draft", False))),
        has_conflicts=bool(data.get("has_conflicts", False)),
        changes=[
            Change(
                old_path=change.get("old_path", ""),
                new_path=change.get("new_path", ""),
                diff=change.get("diff") or "",
            )
            for change in data.get("changes") or []
        ],
        discussions=[parse_discussion(d) for d in data.get("discussions") or []],
        pipelines=[
            Pipeline(id=pipeline["id"], status=pipeline["status"])
            for pipeline in data.get("pipelines") or []
        ],
    )
