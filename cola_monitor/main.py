"""Main entry point with CLI."""
import argparse
import asyncio
import logging
import sys

from cola_monitor.config import config, Config
from cola_monitor.exceptions import ColaMonitorError, ConfigError
from cola_monitor.fetch.client import RegistryClient
from cola_monitor.jobs.runner import MonitorRunner
from cola_monitor.logging_conf import setup_logging
from cola_monitor.notify.webhook import WebhookNotifier
from cola_monitor.store.state import SeenLabelsStore

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="TTB COLA registry monitor")
    parser.add_argument(
        "--test",
        action="store_true",
        help="Send a test notification to the webhook and exit",
    )
    parser.add_argument(
        "--details",
        metavar="TTB_ID",
        default=None,
        help="Fetch and print the public detail page of one label",
    )
    parser.add_argument(
        "--days-back",
        type=int,
        default=None,
        help=f"Lookback window in days (default: {config.DAYS_BACK})",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(argv)


async def run_monitor(days_back: int) -> bool:
    async with RegistryClient() as registry, WebhookNotifier(config.WEBHOOK_URL) as notifier:
        runner = MonitorRunner(registry, notifier, SeenLabelsStore(), days_back=days_back)
        return await runner.run()


async def run_test_notification() -> bool:
    async with WebhookNotifier(config.WEBHOOK_URL) as notifier:
        return await notifier.send_test_notification()


async def show_details(ttb_id: str) -> bool:
    async with RegistryClient() as registry:
        detail = await registry.fetch_label_details(ttb_id)
    if detail is None:
        return False
    for name, value in detail.model_dump(exclude={"image_data", "image_filename"}).items():
        logger.info(f"{name}: {value if value is not None else '(not found)'}")
    return True


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging("DEBUG" if args.debug else None)

    try:
        Config.validate(require_scraper=not args.test)
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    if args.days_back is not None and args.days_back < 1:
        logger.error("--days-back must be at least 1")
        sys.exit(1)

    try:
        if args.test:
            logger.info("Running in test mode...")
            success = asyncio.run(run_test_notification())
        elif args.details:
            success = asyncio.run(show_details(args.details))
        else:
            success = asyncio.run(run_monitor(args.days_back or config.DAYS_BACK))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except ColaMonitorError as e:
        logger.error(f"Error during execution: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
