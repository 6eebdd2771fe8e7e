"""URL builders for the COLAs Online registry."""
from urllib.parse import urlencode, urlparse

from cola_monitor.config import config


def get_origin() -> str:
    parsed = urlparse(config.BASE_URL)
    return f"{parsed.scheme}://{parsed.netloc}"


def get_search_url() -> str:
    """Get the public basic search form URL."""
    return f"{config.BASE_URL}/publicSearchColasBasic.do"


def get_search_results_url() -> str:
    return f"{config.BASE_URL}/publicSearchColasBasicProcess.do?action=search"


def get_detail_url(ttb_id: str) -> str:
    """Get the public detail page URL for a TTB ID."""
    return f"{config.BASE_URL}/viewColaDetails.do?action=publicDisplaySearchBasic&ttbid={ttb_id}"


def get_printable_url(ttb_id: str) -> str:
    return f"{config.BASE_URL}/viewColaDetails.do?action=publicFormDisplay&ttbid={ttb_id}"


def get_attachment_url(filename: str, filetype: str = "l") -> str:
    """Get the label image URL for an attachment filename."""
    query = urlencode({"filename": filename, "filetype": filetype})
    return f"{config.BASE_URL}/publicViewAttachment.do?{query}"


def get_registry_host() -> str:
    return urlparse(config.BASE_URL).hostname or ""
