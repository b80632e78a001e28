"""Collection of applicable merge requests across configured projects."""

import asyncio
from typing import TYPE_CHECKING, Any

from reviewreminder.checks import RequestChecks
from reviewreminder.config import ProjectSettings
from reviewreminder.logging import get_logger
from reviewreminder.types.requests import MergeRequest, Project, parse_merge_request, parse_project

if TYPE_CHECKING:
    from reviewreminder.gitlab import AsyncGitLabClient

logger = get_logger("aggregator")


def merge_fragment(request: dict[str, Any], field: str, result: Any) -> dict[str, Any]:
    """
    Merge one enrichment result into a raw merge request record.

    A list is stored under ``field``; a dict has its keys merged in.
    Keys already on the request win.
    """
    if isinstance(result, list):
        return {field: result, **request}
    return {**(result or {}), **request}


class RequestAggregator:
    """
    Fetches open merge requests of every configured project, extends each with
    approvals, changes, discussions and pipelines, and keeps the applicable ones.

    Args:
        gitlab: Source host client
        checks: Applicability checks
    """

    def __init__(self, gitlab: "AsyncGitLabClient", checks: RequestChecks) -> None:
        self.gitlab = gitlab
        self.checks = checks

    async def aggregate(self, projects: list[ProjectSettings]) -> list[MergeRequest]:
        """
        Collect applicable requests, oldest update first.

        Any failing call aborts the whole aggregation.
        """
        per_project = await asyncio.gather(*(self._project_requests(p) for p in projects))

        requests = [
            request
            for project_requests in per_project
            for request in project_requests
            if self.checks.is_applicable(request)
        ]
        # sorted() is stable, so equal timestamps keep project order
        return sorted(requests, key=lambda request: request.updated_at)

    async def _project_requests(self, settings: ProjectSettings) -> list[MergeRequest]:
        project = parse_project(await self.gitlab.get_project(settings.id), settings.paths)
        raw_requests = await self.gitlab.list_requests(project.id)
        logger.debug("Project %s has %d open merge requests", project.name, len(raw_requests))

        return list(await asyncio.gather(*(self._extend(project, raw) for raw in raw_requests)))

    async def _extend(self, project: Project, request: dict[str, Any]) -> MergeRequest:
        iid = request["iid"]

        request = merge_fragment(request, "approvals", await self.gitlab.get_approvals(project.id, iid))
        request = merge_fragment(request, "changes", await self.gitlab.get_changes(project.id, iid))
        request = merge_fragment(request, "discussions", await self.gitlab.get_discussions(project.id, iid))
        request = merge_fragment(request, "pipelines", await self.gitlab.get_pipelines(project.id, iid))

        return parse_merge_request(request, project)
