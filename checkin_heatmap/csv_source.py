import asyncio
import csv
import io
import logging
import re
from pathlib import Path

import httpx


logger = logging.getLogger(__name__)

_INT_PATTERN = re.compile(r"^[-+]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[-+]?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?$")
BYTE_ORDER_MARK = "\ufeff"


class CSVSourceError(Exception):
    """Raised when the CSV source cannot be read or parsed as CSV."""


def is_remote_source(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def coerce_cell(raw_value: str | None) -> object:
    """Loosely type a CSV cell: empty → None, booleans, numbers, else string."""

    if raw_value is None or raw_value == "":
        return None

    lowered = raw_value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False

    try:
        if _INT_PATTERN.match(raw_value):
            return int(raw_value)
        if _FLOAT_PATTERN.match(raw_value):
            return float(raw_value)
    except ValueError:
        # Past the interpreter's digit limit the cell stays text.
        return raw_value

    return raw_value


def parse_csv_rows(text: str) -> list[dict[str, object]]:
    """Parse CSV text with a header row into loosely typed row mappings.

    Only fully empty lines are skipped. Rows of blank cells are kept so the
    record parser can count them as discarded.

    Raises:
        CSVSourceError: If the text is not readable as CSV or has no header.
    """

    reader = csv.DictReader(io.StringIO(text.removeprefix(BYTE_ORDER_MARK)))
    rows: list[dict[str, object]] = []

    try:
        if not reader.fieldnames:
            raise CSVSourceError("CSV source has no header row")

        for raw_row in reader:
            rows.append(
                {
                    key.strip(): coerce_cell(value)
                    for key, value in raw_row.items()
                    if key is not None
                }
            )
    except csv.Error as exc:
        raise CSVSourceError(f"CSV source is malformed: {exc}") from exc

    return rows


async def fetch_csv_text(
    source: str,
    timeout: float = 20.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Read CSV text from a local path or download it from an HTTP(S) URL.

    Raises:
        CSVSourceError: If the file or URL cannot be read.
    """

    if is_remote_source(source):
        try:
            async with httpx.AsyncClient(
                timeout=timeout, transport=transport
            ) as client:
                response = await client.get(source)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise CSVSourceError(f"CSV download failed: {source}") from exc
        return response.text

    try:
        return await asyncio.to_thread(
            Path(source).read_text, encoding="utf-8-sig"
        )
    except (OSError, UnicodeDecodeError) as exc:
        raise CSVSourceError(f"CSV file could not be read: {source}") from exc


async def load_rows(
    source: str,
    timeout: float = 20.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[dict[str, object]]:
    """Fetch and parse the CSV source into header-mapped rows."""

    text = await fetch_csv_text(source, timeout=timeout, transport=transport)
    rows = parse_csv_rows(text)
    logger.info("Total CSV entries: %d (source=%s)", len(rows), source)
    return rows
