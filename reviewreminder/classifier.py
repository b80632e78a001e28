"""Grouping of applicable merge requests by review progress."""

from collections.abc import Callable
from dataclasses import dataclass, field

from reviewreminder import mentions
from reviewreminder.checks import RequestChecks
from reviewreminder.types.requests import MergeRequest


@dataclass
class Section:
    """Requests sharing one review state, rendered under one title."""

    type: str
    title: str | None
    requests: list[MergeRequest] = field(default_factory=list)


@dataclass
class Rule:
    type: str
    title: str
    matches: Callable[[MergeRequest], bool]


class RequestClassifier:
    """
    Splits requests into unapproved, under review, conflicts and failed
    pipeline sections. Rules are evaluated top-down; the first match wins
    and the last rule catches everything left.
    """

    def __init__(self, checks: RequestChecks) -> None:
        self.checks = checks
        self.rules = [
            Rule(
                mentions.UNAPPROVED,
                "Unapproved",
                lambda req: checks.is_unapproved(req) and not checks.is_under_review(req),
            ),
            Rule(mentions.UNDER_REVIEW, "Under review", checks.is_under_review),
            Rule(mentions.CONFLICTS, "With conflicts", checks.has_conflicts),
            Rule(mentions.PIPELINE_FAILED, "With failed pipeline", lambda req: True),
        ]

    def section_for(self, request: MergeRequest) -> str:
        """Notification type of the first rule matching the request."""
        for rule in self.rules:
            if rule.matches(request):
                return rule.type
        raise AssertionError("The last classification rule must match every request")

    def classify(self, requests: list[MergeRequest], split_by_review_progress: bool) -> list[Section]:
        """
        Group requests into sections, keeping their order inside each section.

        Without ``split_by_review_progress`` everything goes into a single
        untitled ``unapproved`` section. Otherwise all four sections are
        returned, empty ones included.
        """
        if not split_by_review_progress:
            return [Section(mentions.UNAPPROVED, None, list(requests))]

        sections = {rule.type: Section(rule.type, rule.title) for rule in self.rules}
        for request in requests:
            sections[self.section_for(request)].requests.append(request)
        return list(sections.values())
