"""Publication records read from front-matter Markdown files."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from models import PublicationRecord

PUBLICATIONS_DIR = os.getenv("PUBLICATIONS_DIR", "_publications")

LOGGER = logging.getLogger(__name__)

_FRONT_MATTER_RE = re.compile(r"^---[ \t]*\r?\n(.*?)\r?\n---", re.DOTALL)


def load_publications(directory: str | Path | None = None) -> list[PublicationRecord]:
    """Read every ``*.md`` file under ``directory`` into a PublicationRecord.

    Files are ordered by path, descending, so date-prefixed file names come
    out most recent first. A missing directory yields an empty list.
    """
    root = Path(directory if directory is not None else PUBLICATIONS_DIR)

    if not root.is_dir():
        LOGGER.error("Publications directory not found: %s", root.resolve())
        _log_directory_contents(Path.cwd())
        return []

    files = sorted((path.as_posix() for path in root.rglob("*.md") if path.is_file()), reverse=True)
    LOGGER.info("Found %s publication files in %s", len(files), root)
    for file_path in files:
        LOGGER.debug("  - %s", file_path)

    return [_read_record(Path(file_path)) for file_path in files]


def parse_front_matter(text: str) -> dict[str, Any]:
    """Return the YAML front matter of a document, or an empty dict.

    All scalars are kept as strings so identifiers like ``2301.10000`` survive.
    """
    match = _FRONT_MATTER_RE.match(text)
    if not match:
        return {}

    try:
        parsed = yaml.load(match.group(1), Loader=yaml.BaseLoader)
    except yaml.YAMLError as exc:
        LOGGER.warning("Could not parse front matter: %s", exc)
        return {}

    return parsed if isinstance(parsed, dict) else {}


def _read_record(path: Path) -> PublicationRecord:
    front_matter = parse_front_matter(path.read_text(encoding="utf-8", errors="replace"))
    return PublicationRecord(
        id=path.name.removesuffix(".md"),
        title=_as_str(front_matter.get("title")),
        doi=_as_str(front_matter.get("doi")),
        arxiv=_as_str(front_matter.get("arxiv")),
        path=path.as_posix(),
    )


def _log_directory_contents(directory: Path) -> None:
    LOGGER.info("Contents of %s:", directory)
    try:
        for item in sorted(directory.iterdir()):
            LOGGER.info("  %s %s", "[DIR]" if item.is_dir() else "[FILE]", item.name)
    except OSError as exc:
        LOGGER.error("Error reading directory %s: %s", directory, exc)


def _as_str(value: Any) -> str | None:
    return value.strip() if isinstance(value, str) and value.strip() else None
