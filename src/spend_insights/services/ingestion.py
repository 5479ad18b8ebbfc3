import csv
import io
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from spend_insights.core import settings
from spend_insights.domain.rows import normalize_rows
from spend_insights.errors import ParseError, SourceReadError
from spend_insights.logger import get_logger
from spend_insights.models import Transaction

logger = get_logger(__name__)

CANDIDATE_DELIMITERS = ",\t|;"
DEFAULT_DELIMITER = ","
SNIFF_SAMPLE_SIZE = 8192
OVERFLOW_KEY = "_overflow"


@dataclass(frozen=True)
class RawSource:
    name: str
    content: bytes | str


def read_path(path: str | Path) -> RawSource:
    source_path = Path(path)
    try:
        content = source_path.read_bytes()
    except OSError as exc:
        raise SourceReadError(
            f"{source_path.name}: {exc.strerror or exc}", source=source_path.name
        ) from exc
    return RawSource(name=source_path.name, content=content)


def decode_source(source: RawSource, encoding: str | None = None) -> str:
    if isinstance(source.content, str):
        return source.content
    encoding = encoding or settings.get_source_encoding()
    try:
        return source.content.decode(encoding)
    except UnicodeDecodeError as exc:
        raise SourceReadError(
            f"{source.name}: not valid {encoding} text ({exc.reason} at byte {exc.start})",
            source=source.name,
        ) from exc


def detect_delimiter(text: str) -> str:
    sample = text[:SNIFF_SAMPLE_SIZE]
    try:
        return csv.Sniffer().sniff(sample, delimiters=CANDIDATE_DELIMITERS).delimiter
    except csv.Error:
        # Single-column tables give the sniffer nothing to work with
        return DEFAULT_DELIMITER


def _is_blank(cells: list[str]) -> bool:
    return not any(cell.strip() for cell in cells)


def _row_mapping(header: list[str], cells: list[str]) -> dict[str, Any]:
    row: dict[str, Any] = dict(zip(header, cells))
    for column in header[len(cells):]:
        row.setdefault(column, None)
    if len(cells) > len(header):
        row[OVERFLOW_KEY] = cells[len(header):]
    return row


def parse_table(name: str, text: str) -> list[dict[str, Any]]:
    """Parse a header-led table into row mappings.

    Blank lines are skipped, including any before the header. Short rows get
    ``None`` for missing cells and surplus cells are kept as a list under
    ``OVERFLOW_KEY``.
    """
    delimiter = detect_delimiter(text)
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, strict=True)
    try:
        header = next((cells for cells in reader if not _is_blank(cells)), None)
        if header is None:
            raise ParseError(f"{name}: no header row found", source=name)
        rows = [_row_mapping(header, cells) for cells in reader if not _is_blank(cells)]
    except csv.Error as exc:
        raise ParseError(f"{name}: line {reader.line_num}: {exc}", source=name) from exc

    logger.debug(
        "[INGEST] %s: delimiter=%r, columns=%s, rows=%d",
        name,
        delimiter,
        header,
        len(rows),
    )
    return rows


def ingest_source(source: RawSource) -> list[Transaction]:
    text = decode_source(source)
    rows = parse_table(source.name, text)
    transactions = normalize_rows(rows)
    logger.info(
        "[INGEST] %s: kept %d of %d rows (%d filtered).",
        source.name,
        len(transactions),
        len(rows),
        len(rows) - len(transactions),
    )
    return transactions


def ingest_sources(sources: Iterable[RawSource]) -> list[Transaction]:
    """Normalize every source in the order given and merge the results.

    The first failing source aborts the whole call; nothing is returned for
    the sources that succeeded before it.
    """
    transactions: list[Transaction] = []
    source_count = 0
    for source in sources:
        transactions.extend(ingest_source(source))
        source_count += 1
    logger.info(
        "[INGEST] %d transactions from %d source(s).",
        len(transactions),
        source_count,
    )
    return transactions
