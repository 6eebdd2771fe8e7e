"""Tests for notification message formatting."""
from cola_monitor.notify.embeds import (
    BOURBON_COLOR,
    build_batch_payload,
    build_image_payload,
    build_label_embed,
    build_test_payload,
    header_text,
)
from cola_monitor.parse.models import ColaLabel


def _label(**overrides) -> ColaLabel:
    values = {
        "ttb_id": "26287001000123",
        "completed_date": "10/14/2026",
        "fanciful_name": "SINGLE BARREL",
        "brand_name": "OLD FORESTER",
        "origin": "21",
        "origin_desc": "KENTUCKY",
        "class_type": "101",
        "class_type_desc": "STRAIGHT BOURBON WHISKY",
    }
    values.update(overrides)
    return ColaLabel(**values)


def test_header_text_wording():
    """Singular and plural announcement lines."""
    assert header_text(1) == "**1 New Whiskey Label Approved!**"
    assert header_text(3) == "**3 New Whiskey Labels Approved!**"


def test_title_preference():
    """Fanciful name, then brand name, then a fixed fallback."""
    assert build_label_embed(_label()).title == "SINGLE BARREL"
    assert build_label_embed(_label(fanciful_name="")).title == "OLD FORESTER"
    assert build_label_embed(_label(fanciful_name="", brand_name="")).title == "New Label"


def test_label_embed_fields():
    """Card carries brand, type, origin, approval date and TTB ID."""
    embed = build_label_embed(_label(class_type_desc="", origin_desc="", brand_name=""))
    fields = {field.name: field.value for field in embed.fields}

    assert fields == {
        "Brand": "N/A",
        "Type": "101",
        "Origin": "21",
        "Approved": "10/14/2026",
        "TTB ID": "26287001000123",
    }
    assert embed.color == BOURBON_COLOR
    assert embed.url.endswith("ttbid=26287001000123")
    assert embed.footer.text == "TTB COLA Registry"
    assert embed.timestamp
    assert embed.image is None


def test_image_payload_references_attachment():
    """Image messages point the card image at the attached file."""
    label = _label(image_data=b"img", image_filename="front.jpg")
    payload = build_image_payload(label).to_json()

    assert payload["embeds"][0]["image"] == {"url": "attachment://front.jpg"}
    assert payload["username"] == "TTB COLA Monitor"
    assert "content" not in payload


def test_batch_payload_has_one_card_per_label():
    """Batches carry one card each and no images."""
    labels = [_label(ttb_id=f"2628700100000{i}") for i in range(3)]
    payload = build_batch_payload(labels).to_json()

    assert [embed["fields"][-1]["value"] for embed in payload["embeds"]] == [label.ttb_id for label in labels]
    assert all("image" not in embed for embed in payload["embeds"])


def test_test_payload():
    """The test message carries the sample card."""
    payload = build_test_payload().to_json()
    assert payload["content"].startswith("**Test Notification**")
    assert payload["embeds"][0]["title"] == "Test Bourbon"
    assert payload["embeds"][0]["footer"]["text"] == "TTB COLA Registry - Test"
