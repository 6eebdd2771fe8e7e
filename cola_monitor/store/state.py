"""JSON state file tracking which labels have already been notified."""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Sequence, TypeVar

import aiofiles
import orjson

from cola_monitor.config import SEEN_LABELS_FILE
from cola_monitor.exceptions import StorageError
from cola_monitor.parse.models import ColaLabel, SeenLabels

logger = logging.getLogger(__name__)

LabelT = TypeVar("LabelT", bound=ColaLabel)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def filter_new_labels(labels: Sequence[LabelT], seen: SeenLabels) -> list[LabelT]:
    """Return labels whose TTB ID has not been notified yet, in input order."""
    seen_ids = set(seen.ttb_ids)
    return [label for label in labels if label.ttb_id not in seen_ids]


def add_seen_ttb_ids(seen: SeenLabels, ttb_ids: Iterable[str]) -> SeenLabels:
    """Return a new state with ``ttb_ids`` merged in. The timestamp is left as is."""
    merged = list(dict.fromkeys([*seen.ttb_ids, *ttb_ids]))
    return seen.model_copy(update={"ttb_ids": merged})


class SeenLabelsStore:
    """Loads and saves the seen-labels file."""

    def __init__(self, path: Path = SEEN_LABELS_FILE):
        self.path = Path(path)

    async def load(self) -> SeenLabels:
        """Load state. Missing, unreadable or malformed files give an empty state."""
        if not self.path.exists():
            return SeenLabels()

        try:
            async with aiofiles.open(self.path, "rb") as f:
                raw = await f.read()
            return SeenLabels.model_validate(orjson.loads(raw))
        except (OSError, ValueError) as e:
            logger.error(f"Error loading seen labels from {self.path}: {e}")
            return SeenLabels()

    async def save(self, seen: SeenLabels) -> SeenLabels:
        """Stamp the current time on ``seen`` and write it."""
        seen.last_run = utc_timestamp()
        data = orjson.dumps(seen.model_dump(by_alias=True), option=orjson.OPT_INDENT_2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self.path, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error(f"Error saving seen labels to {self.path}: {e}")
            raise StorageError(f"Could not write {self.path}: {e}") from e

        logger.debug(f"Saved {len(seen.ttb_ids)} seen labels to {self.path}")
        return seen
