from __future__ import annotations

from models import CitationResult, PublicationRecord, build_result_set


def test_arxiv_id_strips_prefix_and_whitespace() -> None:
    assert PublicationRecord(id="p", arxiv="arXiv:2301.00001").arxiv_id == "2301.00001"
    assert PublicationRecord(id="p", arxiv="  2301.00001 ").arxiv_id == "2301.00001"
    assert PublicationRecord(id="p", arxiv="arXiv: ").arxiv_id is None
    assert PublicationRecord(id="p").arxiv_id is None


def test_total_citations_ignores_missing_counts() -> None:
    papers = [
        CitationResult(id="a", citations=5, source_paper_id="1", found=True),
        CitationResult(id="b"),
        CitationResult(id="c", citations=10, source_paper_id="3", found=True),
    ]

    result_set = build_result_set(papers)

    assert result_set.total_citations == 15
    assert result_set.found_count == 2
    assert result_set.not_found_count == 1


def test_empty_result_set() -> None:
    result_set = build_result_set([])

    assert result_set.total_citations == 0
    assert result_set.to_dict()["papers"] == []
    assert result_set.generated_at.tzinfo is not None
