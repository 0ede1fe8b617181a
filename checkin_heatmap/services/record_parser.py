import logging
from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidRecord:
    """Check-in whose timestamp parsed to a local date-time."""

    timestamp: datetime
    raw_timestamp: str


@dataclass(frozen=True)
class InvalidRecord:
    """Row rejected by the parser, kept only for diagnostics."""

    row: object
    reason: str


ParsedRow = ValidRecord | InvalidRecord


@dataclass(frozen=True)
class ParseResult:
    records: list[ValidRecord] = field(default_factory=list)
    discarded: int = 0


def parse_timestamp(raw_value: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive local date-time.

    Offset-aware values are converted to local time. Naive values are
    already local.

    Raises:
        ValueError: If the string is not a valid ISO-8601 date-time.
    """

    parsed = datetime.fromisoformat(raw_value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def parse_row(row: object) -> ParsedRow:
    """Validate one loosely typed CSV row."""

    if not isinstance(row, Mapping):
        return InvalidRecord(row=row, reason="row is not a mapping")

    raw_timestamp = row.get("timestamp")
    if not isinstance(raw_timestamp, str) or not raw_timestamp:
        return InvalidRecord(row=row, reason="timestamp is missing or not a string")

    try:
        timestamp = parse_timestamp(raw_timestamp)
    except (ValueError, OverflowError, OSError) as exc:
        return InvalidRecord(row=row, reason=f"invalid timestamp: {exc}")

    return ValidRecord(timestamp=timestamp, raw_timestamp=raw_timestamp)


def parse_rows(rows: Iterable[object]) -> ParseResult:
    """Split rows into valid records, counting and logging the rejects."""

    records: list[ValidRecord] = []
    discarded = 0

    for row in rows:
        parsed = parse_row(row)
        if isinstance(parsed, InvalidRecord):
            logger.warning("Discarding row %r: %s", parsed.row, parsed.reason)
            discarded += 1
            continue
        records.append(parsed)

    return ParseResult(records=records, discarded=discarded)
