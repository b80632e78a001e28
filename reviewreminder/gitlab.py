"""
Async GitLab REST client.

Provides the project and merge request calls the reminder needs.
"""

from typing import Any
from urllib.parse import quote

import httpx

from reviewreminder.config import Config
from reviewreminder.exceptions import ConfigurationError, TransportError
from reviewreminder.transport import AsyncHTTPTransport, RetryConfig

PER_PAGE = 100


class AsyncGitLabClient:
    """
    Async client for the GitLab v4 API.

    Results are returned as raw JSON so callers can merge fragments
    before parsing.

    Example:
        ```python
        async with AsyncGitLabClient("https://gitlab.com", token) as gitlab:
            requests = await gitlab.list_requests(42)
        ```
    """

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the GitLab client.

        Args:
            base_url: GitLab instance URL (e.g., "https://gitlab.com")
            token: Personal or project access token
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior (optional)
            http_transport: Custom httpx transport (optional, used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._transport = AsyncHTTPTransport(
            base_url=f"{self.base_url}/api/v4",
            headers={"PRIVATE-TOKEN": token},
            timeout=timeout,
            retry_config=retry_config,
            http_transport=http_transport,
        )

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> "AsyncGitLabClient":
        """
        Create a client from the ``gitlab`` settings.

        Raises:
            ConfigurationError: If no token is configured
        """
        if not config.gitlab.token:
            raise ConfigurationError("gitlab.token is not set (or export GITLAB_TOKEN)")
        return cls(config.gitlab.url, config.gitlab.token, **kwargs)

    @property
    def transport(self) -> AsyncHTTPTransport:
        return self._transport

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> "AsyncGitLabClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def get_project(self, project_id: int | str) -> dict[str, Any]:
        """Get a project by numeric id or "group/name" path."""
        return await self._transport.get(_project_path(project_id))

    async def list_requests(self, project_id: int | str) -> list[dict[str, Any]]:
        """List open merge requests of a project, all pages."""
        return await self._transport.get_all(
            f"{_project_path(project_id)}/merge_requests",
            params={"state": "opened", "per_page": PER_PAGE},
        )

    async def get_approvals(self, project_id: int | str, iid: int) -> dict[str, Any]:
        """Approval state: ``approvals_left`` and ``approved_by``."""
        return await self._transport.get(f"{_request_path(project_id, iid)}/approvals")

    async def get_changes(self, project_id: int | str, iid: int) -> dict[str, Any]:
        """
        Merge request record with its ``changes`` (file diffs).

        ``/changes`` is deprecated since GitLab 15.7 in favour of ``/diffs``.
        When an instance answers 404, the diffs are listed from ``/diffs``
        and returned under the same ``changes`` key.
        """
        path = _request_path(project_id, iid)
        try:
            return await self._transport.get(f"{path}/changes")
        except TransportError as e:
            if e.status != 404:
                raise
        diffs = await self._transport.get_all(f"{path}/diffs", params={"per_page": PER_PAGE})
        return {"changes": diffs}

    async def get_discussions(self, project_id: int | str, iid: int) -> list[dict[str, Any]]:
        return await self._transport.get_all(
            f"{_request_path(project_id, iid)}/discussions",
            params={"per_page": PER_PAGE},
        )

    async def get_pipelines(self, project_id: int | str, iid: int) -> list[dict[str, Any]]:
        """Pipelines of a merge request, most recent first."""
        return await self._transport.get_all(f"{_request_path(project_id, iid)}/pipelines")


def _project_path(project_id: int | str) -> str:
    return f"/projects/{quote(str(project_id), safe='')}"


def _request_path(project_id: int | str, iid: int) -> str:
    return f"{_project_path(project_id)}/merge_requests/{iid}"
