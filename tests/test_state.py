"""Tests for the seen-labels state."""
import orjson
import pytest

from cola_monitor.exceptions import StorageError
from cola_monitor.parse.models import ColaLabel, SeenLabels
from cola_monitor.store.state import SeenLabelsStore, add_seen_ttb_ids, filter_new_labels


def _labels(*ttb_ids: str) -> list[ColaLabel]:
    return [ColaLabel(ttb_id=ttb_id) for ttb_id in ttb_ids]


def test_filter_new_labels_preserves_order():
    """Unseen labels are returned in input order."""
    seen = SeenLabels(ttb_ids=["B"])
    result = filter_new_labels(_labels("C", "B", "A"), seen)
    assert [label.ttb_id for label in result] == ["C", "A"]


@pytest.mark.parametrize("prior", [[], ["A"], ["X", "Y"]])
def test_marked_ids_are_always_filtered(prior):
    """After marking, those IDs are excluded whatever the prior state."""
    state = add_seen_ttb_ids(SeenLabels(ttb_ids=prior), ["A", "B"])
    result = filter_new_labels(_labels("A", "B", "C"), state)
    assert [label.ttb_id for label in result] == ["C"]


def test_add_seen_ttb_ids_is_idempotent():
    """Merging the same IDs twice changes nothing."""
    state = SeenLabels(last_run="2026-10-18T00:00:00.000Z", ttb_ids=["A"])
    once = add_seen_ttb_ids(state, ["B", "A", "B"])
    twice = add_seen_ttb_ids(once, ["B", "A", "B"])

    assert once == twice
    assert sorted(once.ttb_ids) == ["A", "B"]
    assert once.last_run == state.last_run
    # The input state is not modified
    assert state.ttb_ids == ["A"]


def test_seen_labels_dedupes_on_load():
    """Duplicate IDs in the file collapse."""
    state = SeenLabels.model_validate({"lastRun": "", "ttbIds": ["A", "A", "B"]})
    assert state.ttb_ids == ["A", "B"]


@pytest.mark.asyncio
async def test_load_missing_file(tmp_path):
    """No state file means an empty state."""
    state = await SeenLabelsStore(tmp_path / "seen-labels.json").load()
    assert state == SeenLabels()


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", [b"{not json", b"[1, 2]", b'{"ttbIds": "oops"}'])
async def test_load_malformed_file(tmp_path, raw):
    """Malformed files give an empty state instead of raising."""
    path = tmp_path / "seen-labels.json"
    path.write_bytes(raw)
    state = await SeenLabelsStore(path).load()
    assert state == SeenLabels()


@pytest.mark.asyncio
async def test_save_stamps_time_and_uses_file_schema(tmp_path):
    """Saving creates the directory, stamps lastRun and writes the JSON schema."""
    path = tmp_path / "data" / "seen-labels.json"
    store = SeenLabelsStore(path)

    saved = await store.save(SeenLabels(ttb_ids=["26287001000123"]))

    data = orjson.loads(path.read_bytes())
    assert set(data) == {"lastRun", "ttbIds"}
    assert data["ttbIds"] == ["26287001000123"]
    assert data["lastRun"] == saved.last_run
    assert data["lastRun"].endswith("Z")

    reloaded = await store.load()
    assert reloaded == saved


@pytest.mark.asyncio
async def test_save_failure_raises(tmp_path):
    """Write failures propagate as StorageError."""
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file")
    store = SeenLabelsStore(blocker / "seen-labels.json")

    with pytest.raises(StorageError):
        await store.save(SeenLabels())
