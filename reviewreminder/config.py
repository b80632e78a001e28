"""
Review reminder configuration.

The configuration is a JSON document using camelCase keys:

    {
      "gitlab": {"url": "https://gitlab.com", "token": "...",
                 "projects": [{"id": 42, "paths": ["src/**"]}]},
      "messenger": {"url": "https://hooks.slack.com/...", "markup": "slack",
                    "slack": {"usernameMapping": {"alice": "U024BE7LH"}}},
      "unapproved": {"splitByReviewProgress": true, "requestsPerMessage": 10,
                     "emoji": {"1 day": ":fire:", "default": ":sleeping:"},
                     "tag": {"author": true}}
    }

Every option is optional and falls back to its documented default.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from reviewreminder.exceptions import ConfigurationError

DEFAULT_GITLAB_URL = "https://gitlab.com"
DEFAULT_REQUESTS_PER_MESSAGE = 10000


@dataclass
class ProjectSettings:
    """A configured repository and its optional path filters."""

    id: int | str
    paths: list[str] = field(default_factory=list)


@dataclass
class GitLabSettings:
    url: str = DEFAULT_GITLAB_URL
    token: str | None = None
    projects: list[ProjectSettings] = field(default_factory=list)


@dataclass
class MessengerSettings:
    markup: str = "markdown"
    url: str | None = None
    channel: str | None = None
    # dialect -> username -> platform id
    username_mappings: dict[str, dict[str, str]] = field(default_factory=dict)

    def username_mapping(self, dialect: str) -> dict[str, str]:
        """Username to platform id mapping for one markup dialect."""
        return self.username_mappings.get(dialect, {})


@dataclass
class TagSettings:
    """Who gets a real mention instead of a plain username."""

    author: bool = False
    commenters: bool = False
    approvers: bool = False
    on_conflict: bool = False
    on_failed_pipeline: bool = False
    on_threads_open: bool = False


@dataclass
class UnapprovedSettings:
    split_by_review_progress: bool = False
    requests_per_message: int = DEFAULT_REQUESTS_PER_MESSAGE
    diffs: bool = False
    check_conflicts: bool = False
    check_pipeline: bool = False
    emoji: dict[str, str] = field(default_factory=dict)
    tag: TagSettings = field(default_factory=TagSettings)


@dataclass
class Config:
    """Complete reminder configuration."""

    gitlab: GitLabSettings = field(default_factory=GitLabSettings)
    messenger: MessengerSettings = field(default_factory=MessengerSettings)
    unapproved: UnapprovedSettings = field(default_factory=UnapprovedSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """
        Build a Config from the camelCase JSON layout.

        Raises:
            ConfigurationError: If a value has the wrong shape
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be an object")

        return cls(
            gitlab=_parse_gitlab(data.get("gitlab") or {}),
            messenger=_parse_messenger(data.get("messenger") or {}),
            unapproved=_parse_unapproved(data.get("unapproved") or {}),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "Config":
        """
        Load configuration from a JSON file.

        Raises:
            ConfigurationError: If the file is missing or is not valid JSON
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_env(cls, path: str | Path | None = None) -> "Config":
        """
        Load configuration from the file named by the environment.

        Environment variables:
            REVIEW_REMINDER_CONFIG: Path to the JSON config (default: config.json)
            GITLAB_URL: Overrides gitlab.url
            GITLAB_TOKEN: Overrides gitlab.token
            MESSENGER_URL: Overrides messenger.url

        Args:
            path: Explicit config path, takes precedence over REVIEW_REMINDER_CONFIG

        Returns:
            Loaded Config
        """
        config_path = path or os.environ.get("REVIEW_REMINDER_CONFIG", "config.json")
        config = cls.from_file(config_path)

        if os.environ.get("GITLAB_URL"):
            config.gitlab.url = os.environ["GITLAB_URL"]
        if os.environ.get("GITLAB_TOKEN"):
            config.gitlab.token = os.environ["GITLAB_TOKEN"]
        if os.environ.get("MESSENGER_URL"):
            config.messenger.url = os.environ["MESSENGER_URL"]

        return config


def _parse_gitlab(data: dict[str, Any]) -> GitLabSettings:
    projects = []
    for project in data.get("projects") or []:
        if isinstance(project, (int, str)):
            projects.append(ProjectSettings(id=project))
        elif isinstance(project, dict) and "id" in project:
            projects.append(ProjectSettings(id=project["id"], paths=list(project.get("paths") or [])))
        else:
            raise ConfigurationError(f"Invalid project entry: {project!r}")

    return GitLabSettings(
        url=data.get("url") or DEFAULT_GITLAB_URL,
        token=data.get("token"),
        projects=projects,
    )


def _parse_messenger(data: dict[str, Any]) -> MessengerSettings:
    mappings = {
        dialect: dict(value.get("usernameMapping") or {})
        for dialect, value in data.items()
        if isinstance(value, dict)
    }

    return MessengerSettings(
        markup=data.get("markup") or "markdown",
        url=data.get("url"),
        channel=data.get("channel"),
        username_mappings=mappings,
    )


def _parse_unapproved(data: dict[str, Any]) -> UnapprovedSettings:
    per_message = data.get("requestsPerMessage", DEFAULT_REQUESTS_PER_MESSAGE)
    if isinstance(per_message, bool) or not isinstance(per_message, int) or per_message < 1:
        raise ConfigurationError(
            f"unapproved.requestsPerMessage must be a positive integer, got {per_message!r}"
        )

    emoji = data.get("emoji") or {}
    if not isinstance(emoji, dict):
        raise ConfigurationError("unapproved.emoji must be an object")

    tag = data.get("tag") or {}

    return UnapprovedSettings(
        split_by_review_progress=bool(data.get("splitByReviewProgress", False)),
        requests_per_message=per_message,
        diffs=bool(data.get("diffs", False)),
        check_conflicts=bool(data.get("checkConflicts", False)),
        check_pipeline=bool(data.get("checkPipeline", False)),
        emoji={str(key): str(value) for key, value in emoji.items()},
        tag=TagSettings(
            author=bool(tag.get("author", False)),
            commenters=bool(tag.get("commenters", False)),
            approvers=bool(tag.get("approvers", False)),
            on_conflict=bool(tag.get("onConflict", False)),
            on_failed_pipeline=bool(tag.get("onFailedPipeline", False)),
            on_threads_open=bool(tag.get("onThreadsOpen", False)),
        ),
    )
