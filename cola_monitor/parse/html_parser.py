"""Parse registry search pages: hidden form fields and result rows."""
import logging
import re
from typing import Optional

from selectolax.parser import HTMLParser, Node

from cola_monitor.parse.models import ColaLabel

logger = logging.getLogger(__name__)

NO_RECORDS_MARKER = "No records found"
TTB_ID_PATTERN = re.compile(r"ttbid=(\d{14})", re.IGNORECASE)

# Result rows with fewer cells are layout rows or truncated markup and are skipped
MIN_ROW_CELLS = 10

# Cell positions 1-9; position 0 holds the TTB ID link
ROW_FIELDS = (
    "permit_no",
    "serial_number",
    "completed_date",
    "fanciful_name",
    "brand_name",
    "origin",
    "origin_desc",
    "class_type",
    "class_type_desc",
)


def clean_text(text: str) -> str:
    """Normalize non-breaking spaces and trim."""
    return text.replace("\xa0", " ").strip()


def extract_hidden_fields(html_content: str | None) -> dict[str, str]:
    """Collect name/value pairs of every ``<input type="hidden">`` in the page."""
    fields: dict[str, str] = {}
    if not html_content:
        return fields

    for node in HTMLParser(html_content).css("input"):
        attrs = node.attributes
        if (attrs.get("type") or "").lower() != "hidden":
            continue
        name = attrs.get("name")
        if not name:
            continue
        fields[name] = attrs.get("value") or ""
    return fields


def _enclosing_row(node: Node) -> Optional[Node]:
    current = node.parent
    while current is not None:
        if current.tag == "tr":
            return current
        current = current.parent
    return None


def _row_cells(row: Node) -> list[str]:
    return [clean_text(child.text(deep=True)) for child in row.iter() if child.tag == "td"]


def parse_search_results(html_content: str | None) -> list[ColaLabel]:
    """
    Extract labels from the search results table.

    Each link carrying a ``ttbid=`` parameter anchors one result row. Rows with
    fewer than MIN_ROW_CELLS cells are skipped. A TTB ID linked more than once
    yields a single label.
    """
    if not html_content:
        return []

    if NO_RECORDS_MARKER in html_content:
        logger.info("No records found in search results")
        return []

    parser = HTMLParser(html_content)
    labels: list[ColaLabel] = []
    seen_ids: set[str] = set()

    for link in parser.css("a[href]"):
        match = TTB_ID_PATTERN.search(link.attributes.get("href") or "")
        if not match:
            continue
        ttb_id = match.group(1)
        if ttb_id in seen_ids:
            continue

        row = _enclosing_row(link)
        if row is None:
            continue

        cells = _row_cells(row)
        if len(cells) < MIN_ROW_CELLS:
            logger.debug(f"Skipping row for {ttb_id}: {len(cells)} cells")
            continue

        values = dict(zip(ROW_FIELDS, cells[1:MIN_ROW_CELLS]))
        labels.append(ColaLabel(ttb_id=ttb_id, **values))
        seen_ids.add(ttb_id)

    return labels
