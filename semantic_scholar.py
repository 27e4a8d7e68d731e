"""Semantic Scholar Graph API client for citation lookups."""

from __future__ import annotations

import logging
import os
from typing import Any
from urllib.parse import quote

import requests

SEMANTIC_SCHOLAR_API_URL = os.getenv("SEMANTIC_SCHOLAR_API_URL", "https://api.semanticscholar.org/graph/v1")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("SEMANTIC_SCHOLAR_TIMEOUT", "30"))
USER_AGENT = "Academic-Website-Citation-Bot"
PAPER_FIELDS = "citationCount,title,paperId,externalIds"
SEARCH_LIMIT = 5
SOURCE_NAME = "Semantic Scholar"

LOGGER = logging.getLogger(__name__)


class LookupFailure(RuntimeError):
    """A lookup that failed in a way worth retrying."""


class TransportError(LookupFailure):
    """The request never produced an HTTP response."""


class MalformedResponseError(LookupFailure):
    """A 2xx response whose body was not the expected JSON object."""


class HttpStatusError(LookupFailure):
    """A non-2xx response other than 404."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code


class RateLimitError(HttpStatusError):
    """The API answered 429 Too Many Requests."""

    def __init__(self) -> None:
        super().__init__(429, "Rate limit exceeded")


class SemanticScholarClient:
    """Read-only access to the paper lookup and search endpoints.

    Without an API key requests go out unauthenticated, which the API
    rate-limits far more aggressively.
    """

    def __init__(self, api_key: str | None = None, timeout: float = REQUEST_TIMEOUT_SECONDS) -> None:
        self.api_key = api_key.strip() if api_key else None
        self.timeout = timeout

    @property
    def authenticated(self) -> bool:
        return bool(self.api_key)

    def fetch_by_doi(self, doi: str) -> dict[str, Any] | None:
        LOGGER.info("  Searching by DOI: %s", doi)
        return self._get_paper(f"DOI:{doi}")

    def fetch_by_arxiv(self, arxiv_id: str) -> dict[str, Any] | None:
        LOGGER.info("  Searching by arXiv ID: %s", arxiv_id)
        return self._get_paper(f"arXiv:{arxiv_id}")

    def search_by_title(self, title: str) -> dict[str, Any] | None:
        """Return the first search hit for ``title``, or None when there is none."""
        LOGGER.info("  Searching by title: %s...", title[:60])
        body = self._get_json(
            f"{SEMANTIC_SCHOLAR_API_URL}/paper/search",
            params={"query": title, "fields": PAPER_FIELDS, "limit": SEARCH_LIMIT},
        )
        if body is None:
            return None

        candidates = body.get("data")
        if not isinstance(candidates, list) or not candidates:
            return None
        first = candidates[0]
        if not isinstance(first, dict):
            raise MalformedResponseError("Unexpected search result shape")
        return first

    def _get_paper(self, identifier: str) -> dict[str, Any] | None:
        url = f"{SEMANTIC_SCHOLAR_API_URL}/paper/{quote(identifier, safe=':')}"
        return self._get_json(url, params={"fields": PAPER_FIELDS})

    def _get_json(self, url: str, params: dict[str, Any]) -> dict[str, Any] | None:
        try:
            response = requests.get(url, params=params, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(str(exc)) from exc

        if response.status_code == 404:
            return None
        if response.status_code == 429:
            raise RateLimitError()
        if not 200 <= response.status_code < 300:
            raise HttpStatusError(response.status_code)

        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Parse error: {exc}") from exc

        if not isinstance(body, dict):
            raise MalformedResponseError("Expected a JSON object from Semantic Scholar")
        return body

    def _headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        }
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers


def client_from_env() -> SemanticScholarClient:
    """Build a client from SEMANTIC_SCHOLAR_API_KEY, if set."""
    return SemanticScholarClient(api_key=os.getenv("SEMANTIC_SCHOLAR_API_KEY", ""))
