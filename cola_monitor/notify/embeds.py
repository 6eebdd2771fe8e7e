"""Build webhook messages for label notifications."""
from datetime import datetime, timezone
from typing import Sequence

from cola_monitor.config import config
from cola_monitor.fetch.endpoints import get_detail_url
from cola_monitor.parse.models import (
    ColaLabel,
    WebhookEmbed,
    WebhookField,
    WebhookFooter,
    WebhookImage,
    WebhookPayload,
)

BOURBON_COLOR = 0xD4A574
FOOTER_TEXT = "TTB COLA Registry"
FALLBACK_TITLE = "New Label"
MISSING = "N/A"


def label_title(label: ColaLabel) -> str:
    return label.fanciful_name or label.brand_name or FALLBACK_TITLE


def header_text(count: int) -> str:
    """Announcement line for a batch of new labels."""
    plural = "s" if count != 1 else ""
    return f"**{count} New Whiskey Label{plural} Approved!**"


def build_label_embed(label: ColaLabel, with_image: bool = False) -> WebhookEmbed:
    """Build the card for one label, referencing its attached image if asked."""
    embed = WebhookEmbed(
        title=label_title(label),
        url=get_detail_url(label.ttb_id),
        color=BOURBON_COLOR,
        fields=[
            WebhookField(name="Brand", value=label.brand_name or MISSING, inline=True),
            WebhookField(name="Type", value=label.class_type_desc or label.class_type or MISSING, inline=True),
            WebhookField(name="Origin", value=label.origin_desc or label.origin or MISSING, inline=True),
            WebhookField(name="Approved", value=label.completed_date or MISSING, inline=True),
            WebhookField(name="TTB ID", value=label.ttb_id, inline=True),
        ],
        timestamp=datetime.now(timezone.utc).isoformat(),
        footer=WebhookFooter(text=FOOTER_TEXT),
    )
    if with_image and label.has_image:
        embed.image = WebhookImage(url=f"attachment://{label.image_filename}")
    return embed


def build_header_payload(count: int) -> WebhookPayload:
    return WebhookPayload(username=config.WEBHOOK_USERNAME, content=header_text(count))


def build_image_payload(label: ColaLabel) -> WebhookPayload:
    return WebhookPayload(username=config.WEBHOOK_USERNAME, embeds=[build_label_embed(label, with_image=True)])


def build_batch_payload(labels: Sequence[ColaLabel]) -> WebhookPayload:
    return WebhookPayload(
        username=config.WEBHOOK_USERNAME,
        embeds=[build_label_embed(label) for label in labels],
    )


def build_test_payload() -> WebhookPayload:
    """Sample message used to check the webhook configuration."""
    sample = ColaLabel(
        ttb_id="TEST123",
        permit_no="DSP-KY-1",
        serial_number="000001",
        completed_date=datetime.now().strftime("%m/%d/%Y"),
        fanciful_name="Test Bourbon",
        brand_name="Test Distillery",
        origin="21",
        origin_desc="KENTUCKY",
        class_type="101",
        class_type_desc="STRAIGHT BOURBON WHISKY",
    )
    return WebhookPayload(
        username=config.WEBHOOK_USERNAME,
        content="**Test Notification** - TTB COLA Monitor is configured correctly!",
        embeds=[
            WebhookEmbed(
                title=sample.fanciful_name,
                description="This is a test notification to verify your webhook is working.",
                color=BOURBON_COLOR,
                fields=[
                    WebhookField(name="Brand", value=sample.brand_name, inline=True),
                    WebhookField(name="Type", value=sample.class_type_desc, inline=True),
                    WebhookField(name="Origin", value=sample.origin_desc, inline=True),
                ],
                footer=WebhookFooter(text=f"{FOOTER_TEXT} - Test"),
            )
        ],
    )
