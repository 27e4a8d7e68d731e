"""Shared typed models for the citation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

UNTITLED = "Untitled"


@dataclass(frozen=True, slots=True)
class PublicationRecord:
    """One publication read from a front-matter Markdown file."""

    id: str
    title: str | None = None
    doi: str | None = None
    arxiv: str | None = None
    path: str | None = None

    @property
    def arxiv_id(self) -> str | None:
        """arXiv identifier with any ``arXiv:`` prefix stripped."""
        if not self.arxiv:
            return None
        value = self.arxiv.replace("arXiv:", "").strip()
        return value or None


@dataclass(frozen=True, slots=True)
class CitationResult:
    """Resolved citation data for one publication (or the lack of it)."""

    id: str
    title: str = UNTITLED
    citations: int | None = None
    source_paper_id: str | None = None
    external_ids: dict[str, Any] = field(default_factory=dict)
    source: str | None = None
    error: str | None = None
    found: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "citations": self.citations,
            "source": self.source,
            "error": self.error,
            "semantic_scholar": (
                {"paper_id": self.source_paper_id, "external_ids": dict(self.external_ids)}
                if self.found
                else None
            ),
        }


@dataclass(frozen=True, slots=True)
class ResultSet:
    """Aggregate output persisted for the badge renderer."""

    generated_at: datetime
    papers: tuple[CitationResult, ...]

    @property
    def total_citations(self) -> int:
        return sum(paper.citations for paper in self.papers if paper.citations is not None)

    @property
    def found_count(self) -> int:
        return sum(1 for paper in self.papers if paper.found)

    @property
    def not_found_count(self) -> int:
        return len(self.papers) - self.found_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": self.generated_at.isoformat(),
            "total_citations": self.total_citations,
            "papers": [paper.to_dict() for paper in self.papers],
        }


def build_result_set(papers: list[CitationResult], generated_at: datetime | None = None) -> ResultSet:
    """Fold resolved papers into a ResultSet, preserving their order."""
    return ResultSet(
        generated_at=generated_at or datetime.now(UTC),
        papers=tuple(papers),
    )
