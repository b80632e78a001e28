"""Mention decisions and username rendering."""

from collections.abc import Sequence

from reviewreminder.config import TagSettings
from reviewreminder.markup import Markup, wrap_string

# Notification types, in section order
UNAPPROVED = "unapproved"
UNDER_REVIEW = "under_review"
CONFLICTS = "conflicts"
PIPELINE_FAILED = "pipeline_failed"

NOTIFICATION_TYPES = (UNAPPROVED, UNDER_REVIEW, CONFLICTS, PIPELINE_FAILED)

# Mention roles
AUTHOR = "author"  # request author in the primary line
APPROVERS = "approvers"
CONFLICT = "conflict"  # author in the "conflicts:" line
FAILED_PIPELINE = "failed_pipeline"  # author in the "pipeline failed:" line
THREADS = "threads"  # whether the "unresolved threads" line may ping
THREAD_AUTHOR = "thread_author"

ROLES = (AUTHOR, APPROVERS, CONFLICT, FAILED_PIPELINE, THREADS, THREAD_AUTHOR)


class MentionResolver:
    """
    Decides who gets a real mention and renders usernames accordingly.

    Args:
        tags: The ``unapproved.tag`` settings
        markup: Markup dialect used to render mentions
        mapping: Username to platform id mapping for that dialect
    """

    def __init__(self, tags: TagSettings, markup: Markup, mapping: dict[str, str] | None = None) -> None:
        self.tags = tags
        self.markup = markup
        self.mapping = mapping or {}

    @property
    def tag_commenters(self) -> bool:
        """List every note author of an unresolved thread, not only the opener."""
        return self.tags.commenters

    def should_mention(
        self,
        role: str,
        notification_type: str = UNAPPROVED,
        unresolved_authors: Sequence[str] = (),
    ) -> bool:
        """
        Decide whether a username in the given role is a real mention.

        Args:
            role: One of ROLES
            notification_type: Section the request is rendered in
            unresolved_authors: Usernames holding unresolved threads

        Returns:
            True if the username should be tagged
        """
        if role == AUTHOR:
            if notification_type == CONFLICTS:
                return self.tags.on_conflict
            if notification_type == PIPELINE_FAILED:
                return self.tags.on_failed_pipeline
            return self.tags.author or (self.tags.on_threads_open and len(unresolved_authors) > 0)
        if role == APPROVERS:
            return self.tags.approvers
        if role == CONFLICT:
            return self.tags.on_conflict
        if role == FAILED_PIPELINE:
            return self.tags.on_failed_pipeline
        if role == THREADS:
            return self.tags.on_threads_open
        if role == THREAD_AUTHOR:
            return True
        raise ValueError(f"Unknown mention role: {role!r}")

    def render(self, username: str, tag: bool = False) -> str:
        """
        Render a username.

        Tagged names go through the dialect's mention syntax, which falls
        back to plain ``@username`` when the name is not mapped.
        Untagged names are code-wrapped so no platform links them.
        """
        if tag:
            return self.markup.mention(username, self.mapping)
        return wrap_string(f"@{username}")
