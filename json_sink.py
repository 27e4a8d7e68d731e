"""JSON file sink for resolved citation data."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from models import ResultSet

CITATIONS_OUTPUT_PATH = os.getenv("CITATIONS_OUTPUT_PATH", "_data/publications.json")

LOGGER = logging.getLogger(__name__)


def write_result_set(result_set: ResultSet, path: str | Path | None = None) -> Path:
    """Write the ResultSet as indented JSON, creating parent directories."""
    output = Path(path if path is not None else CITATIONS_OUTPUT_PATH)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open("w", encoding="utf-8") as fh:
        json.dump(result_set.to_dict(), fh, indent=2, ensure_ascii=False)
        fh.write("\n")

    LOGGER.info("Wrote %s papers to %s", len(result_set.papers), output)
    return output


def read_citation_data(path: str | Path) -> dict[str, Any]:
    """Load a previously written ResultSet document."""
    with Path(path).open(encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}")
    return data
