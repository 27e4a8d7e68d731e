"""Tests for citation badge insertion into rendered pages."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests
from bs4 import BeautifulSoup

import badges

PAGE = """<html><body>
<div class="pub-list-item" data-paper-id="paper-1"><h3>First</h3><p>Authors, 2024.</p></div>
<div class="pub-list-item" data-paper-id="paper-2"><p>Other authors, 2023.</p></div>
</body></html>"""


def _badges_in(html: str) -> list:
    return BeautifulSoup(html, "html.parser").select("span.badge-publication")


def test_badge_shows_citation_count_with_source_tooltip() -> None:
    html, count = badges.apply_badges(PAGE, {"paper-1": {"citations": 42, "source": "ss"}})

    assert count == 1
    soup = BeautifulSoup(html, "html.parser")
    badge = soup.select_one('[data-paper-id="paper-1"] p span')
    assert badge.get_text() == "Citations: 42"
    assert badge["title"] == "Cited 42 times (via ss)"
    assert "badge-info" in badge["class"]
    assert soup.select_one('[data-paper-id="paper-2"] span') is None


def test_badge_for_missing_count_is_neutral() -> None:
    citations = {"paper-2": {"citations": None, "error": "Not found on Semantic Scholar"}}

    html, _ = badges.apply_badges(PAGE, citations)

    badge = BeautifulSoup(html, "html.parser").select_one('[data-paper-id="paper-2"] span')
    assert badge.get_text() == "Citations: N/A"
    assert badge["title"] == "Not found on Semantic Scholar"
    assert "badge-secondary" in badge["class"]


def test_badge_for_missing_count_falls_back_to_generic_tooltip() -> None:
    html, _ = badges.apply_badges(PAGE, {"paper-1": {"citations": None}})

    assert _badges_in(html)[0]["title"] == "Citation data not available"


def test_badge_without_source_says_unknown() -> None:
    html, _ = badges.apply_badges(PAGE, {"paper-1": {"citations": 0}})

    assert _badges_in(html)[0]["title"] == "Cited 0 times (via unknown)"


def test_badge_prefers_known_container_and_is_preceded_by_space() -> None:
    page = (
        '<section data-paper-id="p"><p>Intro</p>'
        '<div class="publication-item"><p>Meta</p></div></section>'
    )

    html, _ = badges.apply_badges(page, {"p": {"citations": 3}})

    assert '<p>Meta <span class="badge' in html
    container = BeautifulSoup(html, "html.parser").select_one(".publication-item p")
    assert container.contents[0] == "Meta "
    assert container.contents[-1].get_text() == "Citations: 3"


def test_element_without_paragraph_is_skipped() -> None:
    page = '<div data-paper-id="p"><span>No paragraph</span></div>'

    html, count = badges.apply_badges(page, {"p": {"citations": 3}})

    assert count == 0
    assert html == page


def test_citation_mapping_from_result_set_and_citations_map() -> None:
    result_set = {"papers": [{"id": "a", "citations": 1}, {"id": "b", "citations": None}]}
    assert set(badges.citation_mapping(result_set)) == {"a", "b"}

    legacy = {"citations": {"a": {"citations": 1}}}
    assert badges.citation_mapping(legacy) == {"a": {"citations": 1}}


def test_data_url_is_relative_to_base_url() -> None:
    assert badges.data_url("https://example.org/site") == "https://example.org/site/_data/publications.json"
    assert badges.data_url("https://example.org/") == "https://example.org/_data/publications.json"


def test_load_citation_data_fetch_failure_returns_none() -> None:
    with patch("badges.requests.get", side_effect=requests.ConnectionError("offline")):
        assert badges.load_citation_data("https://example.org/_data/publications.json") is None


def test_load_citation_data_non_2xx_returns_none() -> None:
    response = MagicMock()
    response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")

    with patch("badges.requests.get", return_value=response):
        assert badges.load_citation_data("https://example.org/_data/publications.json") is None


def test_annotate_pages_leaves_site_untouched_when_fetch_fails(tmp_path: Path) -> None:
    page = tmp_path / "publications" / "index.html"
    page.parent.mkdir()
    page.write_text(PAGE, encoding="utf-8")

    with patch("badges.requests.get", side_effect=requests.ConnectionError("offline")):
        inserted = badges.annotate_pages(tmp_path, "https://example.org/_data/publications.json")

    assert inserted == 0
    assert page.read_text(encoding="utf-8") == PAGE


def test_annotate_pages_from_local_data_file(tmp_path: Path) -> None:
    data = tmp_path / "_data" / "publications.json"
    data.parent.mkdir()
    data.write_text(
        json.dumps({"papers": [{"id": "paper-1", "citations": 8, "source": "Semantic Scholar"}]}),
        encoding="utf-8",
    )
    page = tmp_path / "index.html"
    page.write_text(PAGE, encoding="utf-8")
    untouched = tmp_path / "about.html"
    untouched.write_text("<p>About</p>", encoding="utf-8")

    inserted = badges.annotate_pages(tmp_path, data)

    assert inserted == 1
    assert [b.get_text() for b in _badges_in(page.read_text(encoding="utf-8"))] == ["Citations: 8"]
    assert untouched.read_text(encoding="utf-8") == "<p>About</p>"


def test_annotate_pages_skips_page_that_is_not_utf8(tmp_path: Path) -> None:
    data = tmp_path / "publications.json"
    data.write_text(json.dumps({"papers": [{"id": "paper-1", "citations": 1}]}), encoding="utf-8")
    good = tmp_path / "a.html"
    good.write_text(PAGE, encoding="utf-8")
    legacy = tmp_path / "b.html"
    legacy_bytes = '<div data-paper-id="paper-1"><p>caf\xe9</p></div>'.encode("latin-1")
    legacy.write_bytes(legacy_bytes)

    inserted = badges.annotate_pages(tmp_path, data)

    assert inserted == 1
    assert [b.get_text() for b in _badges_in(good.read_text(encoding="utf-8"))] == ["Citations: 1"]
    assert legacy.read_bytes() == legacy_bytes
