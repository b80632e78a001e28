"""Predicates deciding whether a merge request is worth a reminder."""

import re
from functools import lru_cache

from reviewreminder.config import UnapprovedSettings
from reviewreminder.types.requests import Change, MergeRequest


_DOTLESS_SEGMENT = r"[^/.][^/]*"


def expand_braces(pattern: str) -> list[str]:
    """
    Expand ``{a,b}`` alternatives, nested ones included.

    Braces without a top-level comma are kept literally.
    """
    depth = 0
    start = -1
    commas: list[int] = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            i += 2
            continue
        if char == "{":
            if depth == 0:
                start = i
                commas = []
            depth += 1
        elif char == "}" and depth:
            depth -= 1
            if depth == 0 and commas:
                bounds = [start, *commas, i]
                prefix, suffix = pattern[:start], pattern[i + 1:]
                return [
                    expanded
                    for lo, hi in zip(bounds, bounds[1:])
                    for expanded in expand_braces(prefix + pattern[lo + 1:hi] + suffix)
                ]
        elif char == "," and depth == 1:
            commas.append(i)
        i += 1
    return [pattern]


def _class_to_regex(segment: str, i: int) -> tuple[str, int]:
    """Translate the ``[...]`` starting at ``segment[i]``; an unclosed one is a literal ``[``."""
    j = i + 1
    negate = j < len(segment) and segment[j] in "!^"
    if negate:
        j += 1
    if j < len(segment) and segment[j] == "]":
        j += 1
    end = segment.find("]", j)
    if end == -1:
        return re.escape("["), i + 1

    body = segment[i + 1 + negate:end].replace("\\", "\\\\").replace("[", "\\[")
    return (f"[^{body}/]" if negate else f"[{body}]"), end + 1


def _segment_to_regex(segment: str) -> str:
    # wildcards never match a leading dot, a literal one does
    parts = [] if segment.startswith(".") else [r"(?!\.)"]
    i = 0
    while i < len(segment):
        char = segment[i]
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            translated, i = _class_to_regex(segment, i)
            parts.append(translated)
            continue
        elif char == "\\" and i + 1 < len(segment):
            i += 1
            parts.append(re.escape(segment[i]))
        else:
            parts.append(re.escape(char))
        i += 1
    return "".join(parts)


def _pattern_to_regex(pattern: str) -> str:
    segments = pattern.split("/")
    parts = []
    for idx, segment in enumerate(segments):
        last = idx == len(segments) - 1
        if segment == "**":
            if last:
                parts.append(f"(?:{_DOTLESS_SEGMENT}(?:/{_DOTLESS_SEGMENT})*)?")
            else:
                parts.append(f"(?:{_DOTLESS_SEGMENT}/)*")
            continue
        parts.append(_segment_to_regex(segment))
        if not last:
            parts.append("/")
    return "".join(parts)


@lru_cache(maxsize=256)
def _glob_to_regex(pattern: str) -> re.Pattern[str]:
    """
    Compile a minimatch-style path glob.

    ``*``, ``?`` and ``[...]`` stay inside one path segment, ``**`` spans
    segments and ``{a,b}`` expands to alternatives. Wildcards skip names
    starting with a dot unless the pattern spells the dot out.
    """
    alternatives = "|".join(_pattern_to_regex(p) for p in expand_braces(pattern))
    return re.compile(f"(?:{alternatives})")


def path_matches(path: str, pattern: str) -> bool:
    return _glob_to_regex(pattern).fullmatch(path) is not None


def has_paths_changes(changes: list[Change], paths: list[str]) -> bool:
    """True when any change touches a configured path, or when no paths are configured."""
    if not paths:
        return True

    return any(
        path_matches(change.old_path, pattern) or path_matches(change.new_path, pattern)
        for change in changes
        for pattern in paths
    )


def is_under_review(request: MergeRequest) -> bool:
    """True when some discussion holds a resolvable note that is not resolved yet."""
    return any(
        note.resolvable and not note.resolved
        for discussion in request.discussions
        for note in discussion.notes
    )


class RequestChecks:
    """Settings-aware checks shared by aggregation, classification and rendering."""

    def __init__(self, settings: UnapprovedSettings) -> None:
        self.settings = settings

    def is_completed(self, request: MergeRequest) -> bool:
        return not request.work_in_progress

    def is_unapproved(self, request: MergeRequest) -> bool:
        return request.approvals_left > 0

    def is_under_review(self, request: MergeRequest) -> bool:
        return is_under_review(request)

    def has_conflicts(self, request: MergeRequest) -> bool:
        return self.settings.check_conflicts and request.has_conflicts

    def has_failed_pipeline(self, request: MergeRequest) -> bool:
        # Only the most recent pipeline counts; no pipeline means nothing failed.
        return (
            self.settings.check_pipeline
            and bool(request.pipelines)
            and request.pipelines[0].status == "failed"
        )

    def is_applicable(self, request: MergeRequest) -> bool:
        """
        Decide whether a merge request goes into the reminder.

        It must be completed, touch the project's configured paths, and
        still need attention: approvals missing, open threads, conflicts or
        a failed pipeline.
        """
        if not self.is_completed(request):
            return False

        if not has_paths_changes(request.changes, request.project.paths):
            return False

        return (
            self.is_unapproved(request)
            or self.is_under_review(request)
            or self.has_conflicts(request)
            or self.has_failed_pipeline(request)
        )
