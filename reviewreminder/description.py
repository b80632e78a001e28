"""Rendering of a single merge request into a reminder entry."""

from typing import Any

from reviewreminder import mentions
from reviewreminder.checks import RequestChecks
from reviewreminder.config import UnapprovedSettings
from reviewreminder.emoji import EmojiSelector
from reviewreminder.markup import Markup, wrap_string
from reviewreminder.mentions import MentionResolver
from reviewreminder.types.requests import Change, MergeRequest, User


def count_diff_lines(diff: str) -> tuple[int, int]:
    """Count inserted and deleted lines of a unified diff."""
    insertions = deletions = 0
    for line in diff.splitlines():
        if line.startswith("+") and not line.startswith("+++"):
            insertions += 1
        elif line.startswith("-") and not line.startswith("---"):
            deletions += 1
    return insertions, deletions


def total_diff(changes: list[Change]) -> tuple[int, int]:
    """Sum insertions and deletions over every changed file."""
    insertions = deletions = 0
    for change in changes:
        added, removed = count_diff_lines(change.diff)
        insertions += added
        deletions += removed
    return insertions, deletions


def unresolved_authors(request: MergeRequest, include_commenters: bool = False) -> list[User]:
    """
    Authors of unresolved threads, deduplicated by username in first-seen order.

    Only thread openers are listed unless ``include_commenters`` is set.
    """
    seen: set[str] = set()
    authors: list[User] = []
    for discussion in request.discussions:
        if not any(note.resolvable and not note.resolved for note in discussion.notes):
            continue
        notes = discussion.notes if include_commenters else discussion.notes[:1]
        for note in notes:
            if note.author.username not in seen:
                seen.add(note.author.username)
                authors.append(note.author)
    return authors


class RequestDescriptionBuilder:
    """
    Builds the markup for one merge request: a primary line followed by
    secondary lines about threads, approvals, conflicts and pipelines.

    Args:
        markup: Markup dialect
        settings: The ``unapproved`` settings
        resolver: Mention decisions for the same dialect
        emoji: Staleness indicator selector
    """

    def __init__(
        self,
        markup: Markup,
        settings: UnapprovedSettings,
        resolver: MentionResolver,
        emoji: EmojiSelector,
    ) -> None:
        self.markup = markup
        self.settings = settings
        self.resolver = resolver
        self.emoji = emoji
        self.checks = RequestChecks(settings)

    def build(self, notification_type: str, request: MergeRequest) -> Any:
        markup = self.markup
        author = request.author.username

        thread_authors = [
            user.username
            for user in unresolved_authors(request, self.resolver.tag_commenters)
        ]
        tag_author = self.resolver.should_mention(mentions.AUTHOR, notification_type, thread_authors)

        link = markup.make_link(request.title, request.web_url)
        project_link = markup.make_link(request.project.name, request.project.web_url)
        parts = [
            self.emoji.pick(request.updated_at),
            markup.make_bold(link),
            f"({project_link})",
            self._diff_string(request),
            f"by {self.resolver.render(author, tag_author)}",
        ]
        primary = markup.make_primary_info(
            markup.make_text(" ".join(part for part in parts if part), with_mentions=tag_author)
        )

        secondary = []
        if notification_type not in (mentions.CONFLICTS, mentions.PIPELINE_FAILED):
            secondary = self._secondary_lines(request, thread_authors)

        return markup.compose_body(primary, markup.make_additional_info(secondary))

    def _secondary_lines(self, request: MergeRequest, thread_authors: list[str]) -> list[Any]:
        markup = self.markup
        resolver = self.resolver
        author = request.author.username
        lines = []

        if thread_authors:
            tag = resolver.should_mention(mentions.THREAD_AUTHOR)
            names = ", ".join(resolver.render(name, tag) for name in thread_authors)
            lines.append(markup.make_text(
                f"unresolved threads by: {names}",
                with_mentions=resolver.should_mention(mentions.THREADS),
            ))

        if request.approved_by:
            tag = resolver.should_mention(mentions.APPROVERS)
            names = ", ".join(resolver.render(user.username, tag) for user in request.approved_by)
            lines.append(markup.make_text(f"already approved by: {names}", with_mentions=False))

        if self.checks.has_conflicts(request):
            tag = resolver.should_mention(mentions.CONFLICT)
            lines.append(markup.make_text(
                f"conflicts: {resolver.render(author, tag)}", with_mentions=tag,
            ))

        if self.checks.has_failed_pipeline(request):
            tag = resolver.should_mention(mentions.FAILED_PIPELINE)
            lines.append(markup.make_text(
                f"pipeline failed: {resolver.render(author, tag)}", with_mentions=tag,
            ))

        return lines

    def _diff_string(self, request: MergeRequest) -> str:
        if not self.settings.diffs:
            return ""
        insertions, deletions = total_diff(request.changes)
        return wrap_string(f"+{insertions} -{deletions}")
