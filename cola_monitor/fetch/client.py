"""Registry client: search, label images and detail pages."""
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

import httpx

from cola_monitor.auth.challenge_detector import is_challenge_page
from cola_monitor.auth.session import SessionAcquirer, SessionContext
from cola_monitor.config import config
from cola_monitor.exceptions import RegistryError, SessionError
from cola_monitor.fetch.endpoints import (
    get_attachment_url,
    get_detail_url,
    get_origin,
    get_printable_url,
    get_registry_host,
    get_search_results_url,
    get_search_url,
)
from cola_monitor.parse.detail_parser import extract_image_filenames, parse_label_detail
from cola_monitor.parse.html_parser import parse_search_results
from cola_monitor.parse.models import ColaLabel, ColaLabelDetail
from cola_monitor.parse.redact import redact_string

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class LabelImage:
    data: bytes = field(repr=False)
    filename: str


def format_search_date(day: date) -> str:
    """Format a date the way the search form expects (MM/DD/YYYY)."""
    return day.strftime("%m/%d/%Y")


class RegistryClient:
    """HTTP access to the registry, with sessions obtained through the proxy."""

    def __init__(
        self,
        token: Optional[str] = None,
        proxy_transport: Optional[httpx.AsyncBaseTransport] = None,
        registry_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.proxy_client = httpx.AsyncClient(timeout=config.TIMEOUT, transport=proxy_transport)
        # Certificate verification is relaxed for registry requests only.
        self.client = httpx.AsyncClient(
            verify=config.REGISTRY_VERIFY_TLS,
            timeout=config.TIMEOUT,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=registry_transport,
        )
        self.session_acquirer = SessionAcquirer(self.proxy_client, token=token)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()
        await self.proxy_client.aclose()

    def _use_session(self, session: SessionContext) -> None:
        """Replace the client jar with the proxy session, scoped to the registry host."""
        # The jar is rebuilt into the Cookie header on every redirect hop.
        self.client.cookies.clear()
        host = get_registry_host()
        for name, value in session.cookie_pairs:
            self.client.cookies.set(name, value, domain=host)

    async def search(self, session: SessionContext, start_date: date, end_date: date) -> str:
        """Submit the basic search form and return the results page HTML."""
        self._use_session(session)
        form_data = dict(session.form_fields)
        form_data.update(
            {
                "searchCriteria.dateCompletedFrom": format_search_date(start_date),
                "searchCriteria.dateCompletedTo": format_search_date(end_date),
                "searchCriteria.classTypeFrom": config.CLASS_TYPE_FROM,
                "searchCriteria.classTypeTo": config.CLASS_TYPE_TO,
                "searchCriteria.productOrFancifulName": "",
                "searchCriteria.originCode": "",
            }
        )
        headers = {
            "Referer": get_search_url(),
            "Origin": get_origin(),
        }

        try:
            response = await self.client.post(get_search_results_url(), data=form_data, headers=headers)
        except httpx.TransportError as e:
            raise RegistryError(f"Search request failed: {redact_string(str(e))}") from e

        if not response.is_success:
            raise RegistryError(f"Search request failed: {response.status_code}")
        if is_challenge_page(response.text):
            raise RegistryError("Search request was answered with an anti-automation challenge")

        return response.text

    async def scrape_new_labels(self, days_back: int = 1, today: Optional[date] = None) -> list[ColaLabel]:
        """Search labels completed in the last ``days_back`` days."""
        session = await self.session_acquirer.acquire(get_search_url())

        end_date = today or date.today()
        start_date = end_date - timedelta(days=days_back)
        logger.info(
            f"Searching for labels from {format_search_date(start_date)} to {format_search_date(end_date)}"
        )

        html_content = await self.search(session, start_date, end_date)
        labels = parse_search_results(html_content)
        logger.info(f"Found {len(labels)} labels")
        return labels

    async def fetch_label_image(self, ttb_id: str) -> Optional[LabelImage]:
        """
        Fetch the front label image of a record.

        Returns None on every failure: missing token, proxy failure, no image on
        the printable page, or a response that is not an image.
        """
        if not self.session_acquirer.has_token:
            logger.info("No BROWSERLESS_TOKEN, skipping image fetch")
            return None

        printable_url = get_printable_url(ttb_id)
        try:
            session = await self.session_acquirer.acquire(printable_url)
        except SessionError as e:
            logger.warning(f"Failed to get printable page for {ttb_id}: {e}")
            return None

        filenames = extract_image_filenames(session.content)
        if not filenames:
            logger.info(f"No images found for {ttb_id}")
            return None

        # First image is the front label
        filename = filenames[0]
        self._use_session(session)
        try:
            response = await self.client.get(
                get_attachment_url(filename),
                headers={"Referer": printable_url},
            )
        except httpx.TransportError as e:
            logger.warning(f"Failed to fetch image for {ttb_id}: {redact_string(str(e))}")
            return None

        if not response.is_success:
            logger.warning(f"Failed to fetch image for {ttb_id}: {response.status_code}")
            return None

        content_type = response.headers.get("content-type", "")
        if not content_type.startswith("image/"):
            logger.warning(f"Response is not an image for {ttb_id}: {content_type}")
            return None

        logger.info(f"Fetched image for {ttb_id}: {filename} ({len(response.content)} bytes)")
        return LabelImage(data=response.content, filename=filename)

    async def fetch_label_details(self, ttb_id: str) -> Optional[ColaLabelDetail]:
        """Fetch and parse the public detail page of a record."""
        try:
            session = await self.session_acquirer.acquire(get_detail_url(ttb_id))
        except SessionError as e:
            logger.error(f"Error fetching details for {ttb_id}: {e}")
            return None
        return parse_label_detail(ttb_id, session.content)
