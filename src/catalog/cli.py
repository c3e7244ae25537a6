"""Resolve card queries against a local catalog file without starting the bot.

Example:
    python -m src.catalog.cli --path cards.tsv "lom" "1U231"
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path

from dotenv import load_dotenv

from src.cards.index import build_index
from src.cards.resolver import lookup
from src.catalog.loader import CatalogSource
from src.config.logging import configure_logging


def run(path: Path, queries: list[str]) -> list[str]:
    """Resolve each query and return one printable line per query."""

    bundle = build_index(CatalogSource(card_file_path=path).load())
    lines: list[str] = []
    for query in queries:
        resolution = lookup(query, bundle)
        labels = ", ".join(card.label for card in resolution.candidates)
        lines.append(f"{query}\t{resolution.outcome}\t{labels}")
    return lines


def main() -> None:
    """CLI entry point for offline card lookups."""

    parser = argparse.ArgumentParser(description="Resolve card queries against a catalog file.")
    parser.add_argument("queries", nargs="+", help="Queries as typed inside [[...]].")
    parser.add_argument(
        "--path",
        help="Path to the catalog TSV (defaults to CARD_FILE_PATH or cards.tsv).",
    )
    args = parser.parse_args()

    load_dotenv(".env")
    configure_logging()
    path = Path(args.path or os.getenv("CARD_FILE_PATH") or "cards.tsv")

    for line in run(path, args.queries):
        print(line)


if __name__ == "__main__":
    main()
