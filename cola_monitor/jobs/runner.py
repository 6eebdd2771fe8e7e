"""Monitor run: scrape, dedup, enrich, notify, then mark as seen."""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

from cola_monitor.config import config
from cola_monitor.fetch.client import RegistryClient
from cola_monitor.jobs.metrics import Metrics
from cola_monitor.notify.webhook import WebhookNotifier
from cola_monitor.parse.models import ColaLabel
from cola_monitor.store.state import SeenLabelsStore, add_seen_ttb_ids, filter_new_labels

logger = logging.getLogger(__name__)


class MonitorRunner:
    """
    Runs one monitoring pass.

    Labels are only added to the seen state after the notification for them
    was confirmed, so a failed run is retried in full on the next one.
    """

    def __init__(
        self,
        registry: RegistryClient,
        notifier: WebhookNotifier,
        store: SeenLabelsStore,
        days_back: int = 1,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.registry = registry
        self.notifier = notifier
        self.store = store
        self.days_back = days_back
        self._sleep = sleep
        self.metrics = Metrics()

    async def run(self) -> bool:
        """Run the pipeline. Returns False when notification failed."""
        logger.info("=" * 50)
        logger.info("TTB COLA Monitor - Starting...")
        logger.info(datetime.now(timezone.utc).isoformat())
        logger.info("=" * 50)

        logger.info("Loading seen labels...")
        seen = await self.store.load()
        logger.info(f"Previously seen: {len(seen.ttb_ids)} labels")
        if seen.last_run:
            logger.info(f"Last run: {seen.last_run}")

        logger.info(f"Scraping TTB COLA registry (last {self.days_back} days)...")
        all_labels = await self.registry.scrape_new_labels(self.days_back)
        self.metrics.increment("found", len(all_labels))

        if not all_labels:
            logger.info("No labels found in date range")
            await self.store.save(seen)
            return True

        new_labels = filter_new_labels(all_labels, seen)
        self.metrics.increment("new", len(new_labels))
        logger.info(f"New labels (not previously seen): {len(new_labels)}")

        if not new_labels:
            logger.info("No new labels to notify about")
            await self.store.save(seen)
            return True

        logger.info("Fetching label images...")
        await self._attach_images(new_labels)
        logger.info(f"Fetched images for {self.metrics.get('images')}/{len(new_labels)} labels")

        logger.info("Sending webhook notification...")
        if not await self.notifier.send_notification(new_labels):
            logger.error("Failed to send notification, not marking labels as seen")
            return False

        updated = add_seen_ttb_ids(seen, [label.ttb_id for label in new_labels])
        await self.store.save(updated)

        logger.info("=" * 50)
        logger.info(f"Successfully processed {len(new_labels)} new labels")
        self.metrics.report()
        logger.info("=" * 50)
        return True

    async def _attach_images(self, labels: list[ColaLabel]) -> None:
        for label in labels:
            try:
                image = await self.registry.fetch_label_image(label.ttb_id)
            except Exception as e:
                logger.error(f"Failed to fetch image for {label.ttb_id}: {e}")
                image = None

            if image:
                label.image_data = image.data
                label.image_filename = image.filename
                self.metrics.increment("images")

            # Pace proxy usage whatever the outcome
            await self._sleep(config.IMAGE_FETCH_PAUSE)
