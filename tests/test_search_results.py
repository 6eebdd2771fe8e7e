"""Tests for search results parsing."""
import pytest
from cola_monitor.parse.html_parser import (
    MIN_ROW_CELLS,
    extract_hidden_fields,
    parse_search_results,
)


def _row(ttb_id: str, values: list[str]) -> str:
    link = f'<a href="/colasonline/viewColaDetails.do?action=publicDisplaySearchBasic&amp;ttbid={ttb_id}">{ttb_id}</a>'
    cells = "".join(f"<td>{value}</td>" for value in values)
    return f"<tr><td>{link}</td>{cells}</tr>"


ROW_VALUES = [
    "DSP-KY-20001",
    "240001",
    "10/14/2026",
    "Single&nbsp;Barrel",
    "<b>OLD FORESTER</b>",
    "21",
    "KENTUCKY",
    "101",
    "STRAIGHT BOURBON WHISKY",
]


def _page(*rows: str) -> str:
    return f"""
    <html><body>
    <table class="results">
        <tr><th>TTB ID</th><th>Permit No.</th></tr>
        {''.join(rows)}
    </table>
    </body></html>
    """


def test_parse_row_with_ten_cells():
    """A row with exactly 10 cells yields one label mapped by position."""
    html = _page(_row("26287001000123", ROW_VALUES))
    labels = parse_search_results(html)

    assert len(labels) == 1
    label = labels[0]
    assert label.ttb_id == "26287001000123"
    assert label.permit_no == "DSP-KY-20001"
    assert label.serial_number == "240001"
    assert label.completed_date == "10/14/2026"
    assert label.fanciful_name == "Single Barrel"
    assert label.brand_name == "OLD FORESTER"
    assert label.origin == "21"
    assert label.origin_desc == "KENTUCKY"
    assert label.class_type == "101"
    assert label.class_type_desc == "STRAIGHT BOURBON WHISKY"
    assert label.image_data is None


def test_row_with_nine_cells_is_skipped():
    """A row with 9 cells is tolerated and yields nothing."""
    html = _page(_row("26287001000123", ROW_VALUES[:8]))
    assert MIN_ROW_CELLS == 10
    assert parse_search_results(html) == []


def test_extra_cells_are_ignored():
    """Cells beyond position 9 do not shift the mapping."""
    html = _page(_row("26287001000123", ROW_VALUES + ["extra"]))
    labels = parse_search_results(html)
    assert labels[0].class_type_desc == "STRAIGHT BOURBON WHISKY"


def test_multiple_rows_keep_document_order():
    """Labels come back in table order, short rows skipped."""
    html = _page(
        _row("26287001000001", ROW_VALUES),
        _row("26287001000002", ROW_VALUES[:3]),
        _row("26287001000003", ROW_VALUES),
    )
    labels = parse_search_results(html)
    assert [label.ttb_id for label in labels] == ["26287001000001", "26287001000003"]


def test_duplicate_links_yield_one_label():
    """A TTB ID linked twice in its row is reported once."""
    ttb_id = "26287001000123"
    extra_link = f'<a href="viewColaDetails.do?ttbid={ttb_id}">print</a>'
    values = ROW_VALUES[:-1] + [ROW_VALUES[-1] + extra_link]
    labels = parse_search_results(_page(_row(ttb_id, values)))
    assert len(labels) == 1


def test_no_records_marker():
    """The registry's empty result page gives no labels."""
    html = "<html><body><p>No records found</p></body></html>"
    assert parse_search_results(html) == []


@pytest.mark.parametrize("html", ["", None, "<html><body><table></table></body></html>"])
def test_empty_or_tableless_pages(html):
    """Pages without result rows give no labels."""
    assert parse_search_results(html) == []


def test_links_without_fourteen_digit_id_are_ignored():
    """Only 14-digit TTB IDs anchor a row."""
    html = _page(_row("12345", ROW_VALUES))
    assert parse_search_results(html) == []


def test_extract_hidden_fields():
    """Hidden inputs are collected, missing values default to empty."""
    html = """
    <form action="publicSearchColasBasicProcess.do">
        <input type="hidden" name="org.apache.struts.taglib.html.TOKEN" value="abc123">
        <INPUT TYPE="HIDDEN" NAME="searchType">
        <input type="text" name="searchCriteria.productOrFancifulName" value="x">
        <input type="hidden" value="orphan">
    </form>
    """
    fields = extract_hidden_fields(html)
    assert fields == {
        "org.apache.struts.taglib.html.TOKEN": "abc123",
        "searchType": "",
    }


def test_extract_hidden_fields_empty():
    """No markup, no fields."""
    assert extract_hidden_fields("") == {}
