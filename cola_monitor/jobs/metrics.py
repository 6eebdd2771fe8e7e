"""Counters for a monitor run."""
import time
import logging
from collections import defaultdict
from typing import Dict

logger = logging.getLogger(__name__)


class Metrics:
    """Track what a run found, fetched and delivered."""

    def __init__(self):
        self.start_time = time.time()
        self.counters: Dict[str, int] = defaultdict(int)

    def increment(self, key: str, amount: int = 1) -> None:
        """Increment a counter."""
        self.counters[key] += amount

    def get(self, key: str) -> int:
        return self.counters.get(key, 0)

    def get_summary(self) -> Dict:
        """Get summary statistics."""
        return {
            "found": self.get("found"),
            "new": self.get("new"),
            "images": self.get("images"),
            "elapsed_seconds": round(time.time() - self.start_time, 2),
        }

    def report(self) -> None:
        """Log the run summary."""
        summary = self.get_summary()
        logger.info(
            f"Found: {summary['found']} | New: {summary['new']} | "
            f"Images: {summary['images']}/{summary['new']} | "
            f"Elapsed: {summary['elapsed_seconds']:.1f}s"
        )
