"""Card catalog loading.

The catalog is a tab-separated sheet with a header row. When a Google Sheet id is configured the
sheet is exported as TSV and written over the local card file first; if the download fails the
existing local file is used as-is.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.request import urlopen

from pydantic import ValidationError

from src.cards.record import CardRecord, CardRow

logger = logging.getLogger(__name__)

GOOGLE_SHEET_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=tsv"


class CatalogLoadError(RuntimeError):
    """Raised when the catalog cannot be read or parsed."""


def parse_catalog(text: str) -> list[CardRecord]:
    """Parse TSV catalog text into records, in sheet order.

    Rows failing validation are skipped with a warning; validity for indexing (identifier and
    collector info present) is decided later by the index builder.
    """

    # Sheet exports do not escape quotes; a leading `"` is part of the cell text.
    reader = csv.DictReader(
        io.StringIO(text),
        delimiter="\t",
        quoting=csv.QUOTE_NONE,
        restval="",
    )
    if not reader.fieldnames or "ID" not in reader.fieldnames:
        raise CatalogLoadError("catalog header row is missing the ID column")

    records: list[CardRecord] = []
    for line_no, row in enumerate(reader, start=2):
        # Extra cells land under the `None` key.
        cells = {key: value for key, value in row.items() if key}
        try:
            records.append(CardRow.model_validate(cells).to_record())
        except ValidationError as exc:
            logger.warning("catalog row skipped line=%d reason=%s", line_no, exc)
    return records


def download_sheet(sheet_id: str, *, timeout_s: float = 30.0) -> str:
    """Export a Google Sheet as TSV text."""

    url = GOOGLE_SHEET_EXPORT_URL.format(sheet_id=sheet_id)
    try:
        with urlopen(url, timeout=timeout_s) as resp:  # noqa: S310 (fixed Google export URL)
            return resp.read().decode("utf-8")
    except HTTPError as exc:
        raise CatalogLoadError(f"sheet export HTTP error: {exc.code}") from exc
    except URLError as exc:
        raise CatalogLoadError("sheet export connection error") from exc


@dataclass(frozen=True)
class CatalogSource:
    """Where the catalog comes from; `load` is handed to `CardIndexStore.reload`."""

    card_file_path: Path
    google_sheet_id: str | None = None
    timeout_s: float = 30.0

    def refresh(self) -> None:
        """Overwrite the local card file from the configured sheet, if any."""

        if not self.google_sheet_id:
            return
        try:
            text = download_sheet(self.google_sheet_id, timeout_s=self.timeout_s)
        except CatalogLoadError as exc:
            logger.warning("sheet download failed, using local file reason=%s", exc)
            return
        self.card_file_path.write_text(text, encoding="utf-8")
        logger.info("sheet downloaded path=%s bytes=%d", self.card_file_path, len(text))

    def load(self) -> list[CardRecord]:
        """Refresh from the sheet (if configured) and parse the local card file.

        Raises:
            CatalogLoadError: If the card file is missing, unreadable or malformed.
        """

        self.refresh()
        try:
            text = self.card_file_path.read_text(encoding="utf-8-sig")
        except OSError as exc:
            raise CatalogLoadError(f"cannot read card file {self.card_file_path}: {exc}") from exc
        return parse_catalog(text)
