"""CLI entrypoint for the publication citation tooling."""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from badges import CITATIONS_DATA_PATH, annotate_pages, data_url
from json_sink import CITATIONS_OUTPUT_PATH, write_result_set
from publications import PUBLICATIONS_DIR, load_publications
from resolver import enrich_publications, log_summary
from semantic_scholar import client_from_env


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Fetch citation counts and add citation badges to publication pages")
    parser.add_argument(
        "--mode",
        choices=["fetch", "badges"],
        default="fetch",
        help=(
            "'fetch' (default): resolve every publication against Semantic Scholar and write the JSON data file. "
            "'badges': add citation badges to the HTML pages of a built site."
        ),
    )
    parser.add_argument("--publications-dir", default=None, help="Directory of publication Markdown files")
    parser.add_argument("--output", default=None, help="Path of the JSON data file to write")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only list the publications that would be resolved, without API calls or writes",
    )
    parser.add_argument("--site-dir", default="_site", help="Built site directory to annotate (badges mode)")
    parser.add_argument("--data", default=None, help="URL or path of the citation data file (badges mode)")
    parser.add_argument(
        "--base-url",
        default=None,
        help="Site base URL; the data file is fetched from <base-url>/_data/publications.json (badges mode)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def run_fetch(publications_dir: str | None, output: str | None, dry_run: bool) -> None:
    """Resolve every publication and write the citation data file."""
    logging.info("=== Starting Publication Data Generation ===")

    client = client_from_env()
    if client.authenticated:
        logging.info("Using Semantic Scholar API key (authenticated)")
    else:
        logging.warning("No API key found, using public API (rate limited)")

    directory = publications_dir or PUBLICATIONS_DIR
    records = load_publications(directory)
    if not records:
        logging.info("No publications found! Searched in: %s", directory)
        return

    logging.info("Found %s publications", len(records))

    if dry_run:
        for record in records:
            logging.info(
                "[dry-run] Would resolve: %s (doi=%s arxiv=%s title=%s)",
                record.id,
                record.doi,
                record.arxiv_id,
                record.title,
            )
        return

    result_set = enrich_publications(records, client)
    path = write_result_set(result_set, output or CITATIONS_OUTPUT_PATH)
    log_summary(result_set, str(path))


def run_badges(site_dir: str, data: str | None, base_url: str | None) -> None:
    """Annotate the built site with citation badges."""
    if data:
        source = data
    elif base_url:
        source = data_url(base_url, CITATIONS_DATA_PATH)
    else:
        source = CITATIONS_OUTPUT_PATH

    inserted = annotate_pages(site_dir, source)
    logging.info("Inserted %s citation badges", inserted)


def main(argv: list[str] | None = None) -> None:
    """Initialize config and execute the selected mode."""
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        if args.mode == "badges":
            run_badges(site_dir=args.site_dir, data=args.data, base_url=args.base_url)
        else:
            run_fetch(publications_dir=args.publications_dir, output=args.output, dry_run=args.dry_run)
    except Exception:  # any error outside the per-record loop aborts the run
        logging.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
