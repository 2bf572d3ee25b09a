"""
Scraper for the legacy comprehensive models page.

The endpoint renders an HTML table rather than JSON. Rows may share a line
(minified pages) or wrap their cells across several lines. A row ends at its
``</tr>``, at the next ``<tr``, or after a bounded number of lines when it is
never closed.
"""

import html
import logging
import re

from appserver_mcp.models import ModelRecord

logger = logging.getLogger(__name__)

_ROW_START = re.compile(r"<tr\b", re.IGNORECASE)
_ROW_END = re.compile(r"</tr\s*>", re.IGNORECASE)
_HEADER_CELL = re.compile(r"<th\b", re.IGNORECASE)
_CELL = re.compile(r"<td\b[^>]*>(.*?)</td\s*>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")

MAX_LOOKAHEAD_LINES = 12
MIN_CELLS = 3
_TRUTHY = {"yes", "true", "1", "y"}


def _clean_cell(raw: str) -> str:
    text = _TAG.sub(" ", raw)
    text = html.unescape(text)
    return _WHITESPACE.sub(" ", text).strip()


def _to_record(cells: list[str]) -> ModelRecord | None:
    if len(cells) < MIN_CELLS or not cells[0]:
        return None
    padded = cells + [""] * (6 - len(cells))
    return ModelRecord(
        model_id=padded[0],
        description=padded[1],
        status=padded[2],
        version=padded[3],
        modeldata_timestamp=padded[4],
        is_real_time=padded[5].lower() in _TRUTHY,
    )


def _row_end(content: str, start: int, next_start: int) -> int:
    closing = _ROW_END.search(content, start, next_start)
    if closing is not None:
        return closing.start()
    # Unclosed row: its opening line plus MAX_LOOKAHEAD_LINES more.
    limit = start
    for _ in range(MAX_LOOKAHEAD_LINES + 1):
        newline = content.find("\n", limit, next_start)
        if newline == -1:
            return next_start
        limit = newline + 1
    return limit


def parse_comprehensive_models(content: str) -> list[ModelRecord]:
    """Extract model rows from the comprehensive models HTML page."""
    starts = [match.start() for match in _ROW_START.finditer(content)]
    records: list[ModelRecord] = []

    for position, start in enumerate(starts):
        next_start = starts[position + 1] if position + 1 < len(starts) else len(content)
        row_html = content[start:_row_end(content, start, next_start)]
        if _HEADER_CELL.search(row_html):
            continue

        record = _to_record([_clean_cell(cell) for cell in _CELL.findall(row_html)])
        if record is not None:
            records.append(record)

    logger.debug("Parsed comprehensive models page", extra={"records": len(records)})
    return records
