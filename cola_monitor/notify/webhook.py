"""Deliver label notifications to a chat webhook with pacing and retries."""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

import httpx
import orjson
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
)

from cola_monitor.config import config
from cola_monitor.notify.embeds import (
    build_batch_payload,
    build_header_payload,
    build_image_payload,
    build_test_payload,
)
from cola_monitor.parse.models import ColaLabel, WebhookPayload
from cola_monitor.parse.redact import redact_body

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


def retry_after_seconds(response: httpx.Response) -> float:
    """Read the wait requested by a 429 response, in seconds."""
    header = response.headers.get("Retry-After")
    if header:
        try:
            return float(header)
        except ValueError:
            pass
    try:
        body = response.json()
        if isinstance(body, dict) and body.get("retry_after") is not None:
            return float(body["retry_after"])
    except (TypeError, ValueError):
        pass
    return config.RATE_LIMIT_DEFAULT_WAIT


def _is_failed_delivery(response: httpx.Response) -> bool:
    return not response.is_success


def batched(labels: Sequence[ColaLabel], size: int) -> list[list[ColaLabel]]:
    return [list(labels[i : i + size]) for i in range(0, len(labels), size)]


class WebhookNotifier:
    """
    Sends the notification sequence for a run.

    One header message, then one message per label that has an image (with
    the image attached), then the remaining labels as multi-card batches.
    Every send is retried up to WEBHOOK_MAX_ATTEMPTS times.
    """

    def __init__(
        self,
        webhook_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.webhook_url = webhook_url
        self.client = httpx.AsyncClient(http2=True, timeout=config.TIMEOUT, transport=transport)
        self._sleep = sleep

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()

    async def send_notification(self, labels: Sequence[ColaLabel]) -> bool:
        """
        Notify about new labels.

        Returns False only when a batch of image-less labels could not be
        delivered; failed single image messages are logged and skipped.
        """
        if not labels:
            logger.info("No labels to notify about")
            return True

        with_images = [label for label in labels if label.has_image]
        without_images = [label for label in labels if not label.has_image]

        if not await self._send_json(build_header_payload(len(labels)), "header message"):
            logger.warning("Header message was not delivered")
        await self._sleep(config.HEADER_PAUSE)

        for label in with_images:
            if await self._send_with_image(label):
                logger.info(f"Sent notification with image for {label.ttb_id}")
            else:
                logger.error(f"Failed to send notification for {label.ttb_id}")
            await self._sleep(config.IMAGE_MESSAGE_PAUSE)

        batches = batched(without_images, config.EMBED_BATCH_SIZE)
        for index, batch in enumerate(batches):
            if not await self._send_json(build_batch_payload(batch), f"batch of {len(batch)} labels"):
                logger.error(f"Failed to send batch {index + 1}/{len(batches)}, aborting notification")
                return False
            logger.info(f"Successfully sent notification for {len(batch)} labels")
            if index + 1 < len(batches):
                await self._sleep(config.BATCH_PAUSE)

        return True

    async def send_test_notification(self) -> bool:
        """Send a sample message to check the webhook configuration."""
        success = await self._send_json(build_test_payload(), "test notification")
        if success:
            logger.info("Test notification sent successfully!")
        return success

    async def _send_json(self, payload: WebhookPayload, description: str) -> bool:
        return await self._deliver(description, json=payload.to_json())

    async def _send_with_image(self, label: ColaLabel) -> bool:
        payload = build_image_payload(label)
        return await self._deliver(
            f"label {label.ttb_id}",
            data={"payload_json": orjson.dumps(payload.to_json()).decode()},
            files={"files[0]": (label.image_filename, label.image_data)},
        )

    async def _deliver(self, description: str, **request_kwargs: Any) -> bool:
        """POST to the webhook with the retry policy. Returns True on a 2xx."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(config.WEBHOOK_MAX_ATTEMPTS),
            wait=self._retry_wait,
            retry=retry_if_exception_type(httpx.TransportError) | retry_if_result(_is_failed_delivery),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            retry_error_callback=lambda state: self._give_up(description, state),
        )
        response = await retrying(self._post, description, **request_kwargs)
        return response is not None and response.is_success

    async def _post(self, description: str, **request_kwargs: Any) -> httpx.Response:
        response = await self.client.post(self.webhook_url, **request_kwargs)
        if response.status_code == 429:
            logger.warning(f"Rate limited while sending {description}")
        elif not response.is_success:
            logger.error(
                f"Webhook failed for {description}: {response.status_code} - "
                f"{redact_body(response.text, limit=200)}"
            )
        return response

    def _retry_wait(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome
        if outcome is not None and not outcome.failed:
            response = outcome.result()
            if response.status_code == 429:
                wait = retry_after_seconds(response)
                logger.info(f"Rate limited, waiting {wait:.1f}s before retry...")
                return wait
        return config.WEBHOOK_RETRY_DELAY * retry_state.attempt_number

    def _give_up(self, description: str, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        if outcome is not None and outcome.failed:
            logger.error(f"Giving up on {description} after {retry_state.attempt_number} attempts: {outcome.exception()}")
        else:
            logger.error(f"Giving up on {description} after {retry_state.attempt_number} attempts")
        return None
