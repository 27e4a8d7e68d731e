"""Citation badges for rendered publication pages.

Reads the JSON written by the fetch run and appends a small badge to every
element tagged with ``data-paper-id``. Missing or unreadable data never
breaks a page: the HTML is simply left as it was.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup, Tag

from json_sink import read_citation_data

CITATIONS_DATA_PATH = os.getenv("CITATIONS_DATA_PATH", "/_data/publications.json")
REQUEST_TIMEOUT_SECONDS = 20

BADGE_CLASSES = ["badge", "badge-pill", "badge-publication"]
CONTAINER_SELECTOR = ".pub-list-item p, .publication-item p"
DEFAULT_UNAVAILABLE_MESSAGE = "Citation data not available"

LOGGER = logging.getLogger(__name__)


def data_url(base_url: str, data_path: str = CITATIONS_DATA_PATH) -> str:
    """Resolve the data file path against the site's base URL."""
    base = base_url if base_url.endswith("/") else f"{base_url}/"
    return urljoin(base, data_path.lstrip("/"))


def load_citation_data(source: str | Path, timeout: float = REQUEST_TIMEOUT_SECONDS) -> dict[str, Any] | None:
    """Fetch the citation document from a URL or local path; None on any failure."""
    source = str(source)
    if source.startswith(("http://", "https://")):
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            LOGGER.warning("Could not load citation data from %s: %s", source, exc)
            return None
        if not isinstance(data, dict):
            LOGGER.warning("Could not load citation data from %s: expected a JSON object", source)
            return None
    else:
        try:
            data = read_citation_data(source)
        except (OSError, ValueError) as exc:
            LOGGER.warning("Could not load citation data from %s: %s", source, exc)
            return None

    LOGGER.info("Citation data loaded from %s", source)
    return data


def citation_mapping(data: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Index citation entries by paper id.

    Accepts the fetch run's ``papers`` list or a ready-made ``citations`` map.
    """
    citations = data.get("citations")
    if isinstance(citations, dict):
        return {str(key): value for key, value in citations.items() if isinstance(value, dict)}

    mapping: dict[str, dict[str, Any]] = {}
    for paper in data.get("papers") or []:
        if isinstance(paper, dict) and paper.get("id") is not None:
            mapping[str(paper["id"])] = paper
    return mapping


def apply_badges(html: str, citations: Mapping[str, Mapping[str, Any]]) -> tuple[str, int]:
    """Append a citation badge inside every tagged publication element.

    Returns the rewritten HTML and the number of badges inserted. Running it
    twice on the same page adds a second set of badges.
    """
    soup = BeautifulSoup(html, "html.parser")
    inserted = 0

    for item in soup.select("[data-paper-id]"):
        paper_id = item.get("data-paper-id")
        entry = citations.get(paper_id)
        if not entry:
            LOGGER.debug("No citation data for %s", paper_id)
            continue

        container = item.select_one(CONTAINER_SELECTOR) or item.find("p")
        if container is None:
            continue

        container.append(" ")
        container.append(_badge(soup, entry))
        inserted += 1

    return (str(soup) if inserted else html), inserted


def annotate_pages(site_dir: str | Path, source: str | Path) -> int:
    """Add badges to every HTML page under ``site_dir``; returns badges inserted."""
    data = load_citation_data(source)
    if data is None:
        return 0

    citations = citation_mapping(data)
    total = 0
    for page in sorted(Path(site_dir).rglob("*.html")):
        try:
            html = page.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("Skipping unreadable page %s: %s", page, exc)
            continue
        updated, count = apply_badges(html, citations)
        if count:
            page.write_text(updated, encoding="utf-8")
            LOGGER.info("Added %s badges to %s", count, page)
            total += count

    LOGGER.info("Badge pass complete: pages under %s received %s badges", site_dir, total)
    return total


def _badge(soup: BeautifulSoup, entry: Mapping[str, Any]) -> Tag:
    badge = soup.new_tag("span")
    count = entry.get("citations")

    if count is not None:
        badge["class"] = [*BADGE_CLASSES, "badge-info"]
        badge.string = f"Citations: {count}"
        badge["title"] = f"Cited {count} times (via {entry.get('source') or 'unknown'})"
    else:
        badge["class"] = [*BADGE_CLASSES, "badge-secondary"]
        badge.string = "Citations: N/A"
        badge["title"] = entry.get("error") or DEFAULT_UNAVAILABLE_MESSAGE

    return badge
