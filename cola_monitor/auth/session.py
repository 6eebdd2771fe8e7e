"""Session acquisition through the browser-automation proxy."""
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from cola_monitor.config import config
from cola_monitor.exceptions import SessionError
from cola_monitor.parse.html_parser import extract_hidden_fields
from cola_monitor.parse.redact import redact_body, redact_string

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Cookies and hidden form fields for one scrape attempt. Never persisted."""

    cookies: str
    cookie_pairs: list[tuple[str, str]] = field(default_factory=list, repr=False)
    form_fields: dict[str, str] = field(default_factory=dict)
    content: str = field(default="", repr=False)


def parse_cookie_pairs(cookies: list[dict[str, Any]]) -> list[tuple[str, str]]:
    return [(c["name"], c.get("value", "")) for c in cookies if c.get("name")]


def build_cookie_header(cookies: list[dict[str, Any]]) -> str:
    """Join proxy cookies into a ``name=value; name=value`` header, keeping order."""
    return "; ".join(f"{name}={value}" for name, value in parse_cookie_pairs(cookies))


class SessionAcquirer:
    """
    Obtains a registry session by having the proxy render a page in a real browser.

    Direct requests to the registry receive anti-automation challenges; the
    proxy passes the challenge and returns the cookies it was issued together
    with the rendered markup.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: Optional[str] = None,
        endpoint: Optional[str] = None,
    ):
        self.client = client
        self.token = token if token is not None else config.BROWSERLESS_TOKEN
        self.endpoint = endpoint or config.BROWSERLESS_URL

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    async def acquire(self, url: str) -> SessionContext:
        """Render ``url`` through the proxy and return its session context."""
        if not self.token:
            raise SessionError("BROWSERLESS_TOKEN environment variable is not set")

        try:
            response = await self._unblock_request(url)
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            raise SessionError(f"Unblock API unreachable: {redact_string(str(e))}") from e

        if not response.is_success:
            raise SessionError(
                f"Unblock API failed: {response.status_code} - {redact_body(response.text)}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SessionError("Unblock API returned a non-JSON body") from e

        content = data.get("content") if isinstance(data, dict) else None
        if not content:
            raise SessionError(f"Unblock API returned no content for {url}")

        session = SessionContext(
            cookies=build_cookie_header(data.get("cookies") or []),
            cookie_pairs=parse_cookie_pairs(data.get("cookies") or []),
            form_fields=extract_hidden_fields(content),
            content=content,
        )
        logger.debug(
            f"Session acquired for {url}: {len(data.get('cookies') or [])} cookies, "
            f"{len(session.form_fields)} hidden fields"
        )
        return session

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _unblock_request(self, url: str) -> httpx.Response:
        """Ask the proxy to render a page, with retries on transport errors."""
        return await self.client.post(
            self.endpoint,
            params={"token": self.token},
            json={
                "url": url,
                "browserWSEndpoint": False,
                "cookies": True,
                "content": True,
            },
            timeout=config.TIMEOUT,
        )
