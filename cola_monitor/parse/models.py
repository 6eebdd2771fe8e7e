"""Data models for scraped labels, dedup state and webhook payloads."""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ColaLabel(BaseModel):
    """A label approval row from the registry search results."""

    ttb_id: str = Field(..., frozen=True, description="14-digit TTB ID, the dedup key")
    permit_no: str = ""
    serial_number: str = ""
    completed_date: str = ""
    fanciful_name: str = ""
    brand_name: str = ""
    origin: str = ""
    origin_desc: str = ""
    class_type: str = ""
    class_type_desc: str = ""

    # Populated by image enrichment only
    image_data: Optional[bytes] = Field(default=None, repr=False)
    image_filename: Optional[str] = None

    @property
    def has_image(self) -> bool:
        return bool(self.image_data and self.image_filename)


class ColaLabelDetail(ColaLabel):
    """Label with the fields only present on the public detail page.

    Detail fields are scraped by label text; ``None`` means the label was not
    found on the page, which is distinct from a label followed by blank text.
    """

    status: Optional[str] = None
    vendor_code: Optional[str] = None
    type_of_application: Optional[str] = None
    approval_date: Optional[str] = None
    plant_registry: Optional[str] = None
    company_name: Optional[str] = None
    address: Optional[str] = None


class SeenLabels(BaseModel):
    """Persisted dedup state: last run timestamp and notified TTB IDs."""

    model_config = ConfigDict(populate_by_name=True)

    last_run: str = Field(default="", alias="lastRun")
    ttb_ids: list[str] = Field(default_factory=list, alias="ttbIds")

    @field_validator("ttb_ids")
    @classmethod
    def _unique_ids(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class WebhookField(BaseModel):
    name: str
    value: str
    inline: Optional[bool] = None


class WebhookFooter(BaseModel):
    text: str


class WebhookImage(BaseModel):
    url: str


class WebhookEmbed(BaseModel):
    title: str
    description: Optional[str] = None
    url: Optional[str] = None
    color: Optional[int] = None
    fields: Optional[list[WebhookField]] = None
    timestamp: Optional[str] = None
    footer: Optional[WebhookFooter] = None
    image: Optional[WebhookImage] = None
    thumbnail: Optional[WebhookImage] = None


class WebhookPayload(BaseModel):
    content: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    embeds: Optional[list[WebhookEmbed]] = None

    def to_json(self) -> dict:
        """Serialize for the webhook API, omitting unset keys."""
        return self.model_dump(mode="json", exclude_none=True)
