"""Parse label detail and printable pages."""
import html
import logging
import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

from selectolax.parser import HTMLParser

from cola_monitor.parse.html_parser import clean_text
from cola_monitor.parse.models import ColaLabel, ColaLabelDetail

logger = logging.getLogger(__name__)

ATTACHMENT_ENDPOINT = "publicViewAttachment.do"
LABEL_FILETYPE = "l"

# Attribute name -> label text on the public detail page
DETAIL_LABELS = {
    "permit_no": "Permit Number",
    "serial_number": "Serial #",
    "completed_date": "Completed Date",
    "fanciful_name": "Fanciful Name",
    "brand_name": "Brand Name",
    "origin": "Origin",
    "origin_desc": "Origin Code",
    "class_type": "Class/Type",
    "class_type_desc": "Class/Type Code",
    "status": "Status",
    "vendor_code": "Vendor Code",
    "type_of_application": "Type of Application",
    "approval_date": "Approval Date",
    "plant_registry": "Plant Registry",
    "company_name": "Company Name",
    "address": "Address",
}

_TRAILING_TEXT = re.compile(r"[\s:]*([^<]*)")


def extract_image_filenames(html_content: str | None) -> list[str]:
    """Return filenames of every label attachment (``filetype=l``), in document order."""
    if not html_content:
        return []

    filenames = []
    for img in HTMLParser(html_content).css("img[src]"):
        src = html.unescape(img.attributes.get("src") or "")
        parsed = urlparse(src)
        if not parsed.path.endswith(ATTACHMENT_ENDPOINT):
            continue
        params = parse_qs(parsed.query)
        if params.get("filetype") != [LABEL_FILETYPE]:
            continue
        filename = params.get("filename")
        if filename:
            filenames.append(filename[0])
    return filenames


def extract_labeled_field(html_content: str | None, label: str) -> Optional[str]:
    """
    Return the text that follows the first occurrence of ``label``.

    Matching is case-insensitive on the raw markup, so a label repeated on the
    page or embedded in an attribute may capture unrelated text. Returns None
    when the label does not occur, and "" when it is directly followed by a tag.
    """
    if not html_content:
        return None

    start = html_content.lower().find(label.lower())
    if start == -1:
        return None

    match = _TRAILING_TEXT.match(html_content, start + len(label))
    return clean_text(html.unescape(match.group(1)))


def parse_label_detail(ttb_id: str, html_content: str) -> ColaLabelDetail:
    """Build a label detail from the public detail page."""
    values = {attr: extract_labeled_field(html_content, label) for attr, label in DETAIL_LABELS.items()}

    # Base label fields are plain strings; only detail-only fields stay None
    for attr in ColaLabel.model_fields:
        if values.get(attr, "") is None:
            values[attr] = ""

    return ColaLabelDetail(ttb_id=ttb_id, **values)
