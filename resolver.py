"""Resolve publication records to Semantic Scholar citation counts."""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Callable, NamedTuple

from models import UNTITLED, CitationResult, PublicationRecord, ResultSet, build_result_set
from retry import DEFAULT_BACKOFF_SECONDS, call_with_retry
from semantic_scholar import SOURCE_NAME, LookupFailure, SemanticScholarClient

MAX_ATTEMPTS = int(os.getenv("CITATIONS_MAX_ATTEMPTS", "3"))
DELAY_AUTHENTICATED_SECONDS = float(os.getenv("S2_DELAY_AUTHENTICATED", "1"))
DELAY_PUBLIC_SECONDS = float(os.getenv("S2_DELAY_PUBLIC", "3"))

NOT_FOUND_MESSAGE = f"Not found on {SOURCE_NAME}"

LOGGER = logging.getLogger(__name__)


class LookupStrategy(NamedTuple):
    """One step of the fallback chain.

    ``key`` returns the value to look up, or None when the record has nothing
    for this strategy.
    """

    name: str
    key: Callable[[PublicationRecord], str | None]
    lookup: Callable[[SemanticScholarClient, str], dict[str, Any] | None]


LOOKUP_STRATEGIES: tuple[LookupStrategy, ...] = (
    LookupStrategy("doi", lambda record: record.doi, lambda client, doi: client.fetch_by_doi(doi)),
    LookupStrategy(
        "arxiv",
        lambda record: record.arxiv_id,
        lambda client, arxiv_id: client.fetch_by_arxiv(arxiv_id),
    ),
    LookupStrategy("title", lambda record: record.title, lambda client, title: client.search_by_title(title)),
)


def find_paper(
    record: PublicationRecord,
    client: SemanticScholarClient,
    strategies: tuple[LookupStrategy, ...] = LOOKUP_STRATEGIES,
) -> dict[str, Any] | None:
    """Return the first match along the strategy chain, or None on a clean miss."""
    for strategy in strategies:
        value = strategy.key(record)
        if not value:
            continue
        match = strategy.lookup(client, value)
        if match:
            LOGGER.debug("Matched id=%s via %s", record.id, strategy.name)
            return match
    return None


def resolve_citation(
    record: PublicationRecord,
    client: SemanticScholarClient,
    max_attempts: int = MAX_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
) -> CitationResult:
    """Resolve one record; lookup failures end as a not-found result."""
    try:
        match = call_with_retry(
            find_paper,
            record,
            client,
            max_attempts=max_attempts,
            backoff_seconds=DEFAULT_BACKOFF_SECONDS,
            sleep=sleep,
        )
    except LookupFailure as exc:
        LOGGER.warning("  Failed after retries: %s", exc)
        return _not_found(record, error=f"Lookup failed: {exc}")

    if match is None:
        return _not_found(record, error=NOT_FOUND_MESSAGE)

    return _from_match(record, match)


def enrich_publications(
    records: list[PublicationRecord],
    client: SemanticScholarClient,
    delay_seconds: float | None = None,
    max_attempts: int = MAX_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
) -> ResultSet:
    """Resolve every record in order, pausing between records to respect rate limits."""
    if delay_seconds is None:
        delay_seconds = DELAY_AUTHENTICATED_SECONDS if client.authenticated else DELAY_PUBLIC_SECONDS

    papers: list[CitationResult] = []
    for index, record in enumerate(records, start=1):
        LOGGER.info("[%s/%s] Processing: %s", index, len(records), record.id)

        result = resolve_citation(record, client, max_attempts=max_attempts, sleep=sleep)
        papers.append(result)

        if result.found:
            LOGGER.info("  Found: %s citations", result.citations or 0)
        else:
            LOGGER.info("  Not found")

        if index < len(records):
            LOGGER.info("  Waiting %s seconds...", delay_seconds)
            sleep(delay_seconds)

    return build_result_set(papers)


def log_summary(result_set: ResultSet, output_path: str) -> None:
    """Log run totals and per-paper citation counts."""
    LOGGER.info("=== Summary ===")
    LOGGER.info("Output: %s", output_path)
    LOGGER.info("Total papers: %s", len(result_set.papers))
    LOGGER.info("Total citations: %s", result_set.total_citations)
    LOGGER.info("Papers with citations: %s", result_set.found_count)
    LOGGER.info("Papers not found: %s", result_set.not_found_count)
    for paper in result_set.papers:
        LOGGER.info("  %s: %s citations", paper.id, "N/A" if paper.citations is None else paper.citations)


def _from_match(record: PublicationRecord, match: dict[str, Any]) -> CitationResult:
    count = match.get("citationCount")
    external_ids = match.get("externalIds")
    paper_id = match.get("paperId")
    return CitationResult(
        id=record.id,
        title=record.title or UNTITLED,
        citations=count if isinstance(count, int) and count >= 0 else None,
        source_paper_id=str(paper_id) if paper_id else None,
        external_ids=external_ids if isinstance(external_ids, dict) else {},
        source=SOURCE_NAME,
        found=True,
    )


def _not_found(record: PublicationRecord, error: str) -> CitationResult:
    return CitationResult(id=record.id, title=record.title or UNTITLED, error=error)
