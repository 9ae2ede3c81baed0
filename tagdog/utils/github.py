from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from tagdog.schemas.github import IssueRequest, TagReference

logger = structlog.get_logger(__name__)

TAG_REFS_PER_PAGE = 50


class GitHubAPIClient:
    """Async client for the parts of the GitHub REST API tag auditing needs.

    Holds only credentials and configuration; an ``httpx.AsyncClient`` is
    opened per operation, so one instance can be shared by every request.
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.headers = {
            "Accept": "application/vnd.github.v3+json",
            "Authorization": f"Bearer {token}",
        }
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self.headers,
            timeout=self.DEFAULT_TIMEOUT,
            transport=self.transport,
        )

    async def request(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        context: dict | None = None,
        **kwargs,
    ) -> httpx.Response | None:
        """Execute request with standard error handling."""
        context = context or {}

        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
            return response
        except httpx.RequestError as e:
            logger.error("Request error", url=url, error=str(e), **context)
        except httpx.HTTPStatusError as e:
            logger.error(
                "HTTP error",
                url=url,
                status_code=e.response.status_code,
                response_text=e.response.text,
                **context,
            )
        return None

    async def list_tag_refs(
        self, owner: str, repo: str, per_page: int = TAG_REFS_PER_PAGE
    ) -> list[TagReference] | None:
        """Return every tag reference of ``owner/repo``, in page order.

        Pages are followed through the ``Link: rel="next"`` header until
        GitHub stops sending one. Returns ``None`` if any page fails; a
        partial listing is never returned.
        """
        context = {"git_repo": f"{owner}/{repo}"}
        url: str | None = f"{self.base_url}/repos/{owner}/{repo}/git/refs/tags"
        params: dict[str, Any] | None = {"per_page": per_page}
        refs: list[TagReference] = []
        pages = 0

        async with self._client() as client:
            while url:
                response = await self.request(
                    client, "GET", url, params=params, context=context
                )
                if response is None:
                    return None

                try:
                    data = response.json()
                    if isinstance(data, dict):
                        data = [data]
                    refs.extend(TagReference.model_validate(item) for item in data)
                except (ValueError, TypeError, ValidationError) as e:
                    logger.error(
                        "Malformed tag reference page",
                        url=url,
                        error=str(e),
                        **context,
                    )
                    return None

                pages += 1
                # The next link already carries per_page and page.
                url = response.links.get("next", {}).get("url")
                params = None

        logger.debug(
            "Fetched tag references",
            count=len(refs),
            pages=pages,
            **context,
        )
        return refs

    async def create_issue(
        self, owner: str, repo: str, issue: IssueRequest
    ) -> str | None:
        context = {"git_repo": f"{owner}/{repo}", "title": issue.title}
        url = f"{self.base_url}/repos/{owner}/{repo}/issues"

        async with self._client() as client:
            response = await self.request(
                client, "POST", url, json=issue.model_dump(), context=context
            )
        if response is None:
            return None

        try:
            issue_url = response.json().get("html_url", "unknown URL")
        except (ValueError, AttributeError):
            issue_url = "unknown URL"
        logger.info(
            "Successfully created GitHub issue",
            issue_url=issue_url,
            **context,
        )
        return issue_url
