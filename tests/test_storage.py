"""Tests for the collection storage service and its backends."""

import asyncio

import pytest

from src.archive.schemas import Collection, SelectionState
from src.persistence.storage import (
    COLLECTION_KEY,
    MemoryKeyValueStore,
    SqliteKeyValueStore,
    StorageService,
)
from tests.factories import make_collection, make_framework, make_prompt, new_id


@pytest.fixture(params=["memory", "sqlite"])
def service(request, tmp_path) -> StorageService:
    if request.param == "memory":
        return StorageService(MemoryKeyValueStore())
    return StorageService(SqliteKeyValueStore(tmp_path / "kv.db"))


@pytest.mark.asyncio
async def test_missing_collection_reads_as_empty(service):
    collection = await service.get_collection()
    assert collection == Collection()
    assert await service.get_selection_state() is None


@pytest.mark.asyncio
async def test_collection_round_trip(service):
    fw = make_framework(metadata={"k": [1, 2]})
    prompt = make_prompt(
        frameworkRef=fw.id,
        tests=[{"name": "t", "with": {"text": "x"}, "assert": {"maxTokens": 10}}],
    )
    collection = make_collection([fw], [(prompt, 3, False)], fw.id)

    await service.save_collection(collection)
    loaded = await service.get_collection()

    assert loaded == collection
    assert loaded.get_prompt(prompt.id).content.tests[0].assert_.max_tokens == 10


@pytest.mark.asyncio
async def test_save_replaces_previous_collection(service):
    await service.save_collection(make_collection([], [(make_prompt(), 1, True)]))
    await service.save_collection(make_collection())
    assert (await service.get_collection()).prompts == []


@pytest.mark.asyncio
async def test_selection_state_round_trip(service):
    state = SelectionState(user_prompt="draft", selected_prompt_id=new_id())
    await service.save_selection_state(state)
    assert await service.get_selection_state() == state


@pytest.mark.asyncio
async def test_collection_is_stored_with_wire_names():
    store = MemoryKeyValueStore()
    prompt = make_prompt(frameworkRef=new_id())
    await StorageService(store).save_collection(make_collection([], [(prompt, 1, True)]))

    raw = await store.get(COLLECTION_KEY)
    assert "frameworkRef" in raw["prompts"][0]["content"]


@pytest.mark.asyncio
async def test_sqlite_store_persists_across_instances(tmp_path):
    path = tmp_path / "kv.db"
    prompt = make_prompt()
    await StorageService(SqliteKeyValueStore(path)).save_collection(
        make_collection([], [(prompt, 1, True)])
    )
    loaded = await StorageService(SqliteKeyValueStore(path)).get_collection()
    assert loaded.get_prompt(prompt.id) is not None


@pytest.mark.asyncio
async def test_sqlite_calls_run_in_worker_threads(tmp_path, monkeypatch):
    offloaded = []
    real_to_thread = asyncio.to_thread

    async def recording_to_thread(func, *args, **kwargs):
        offloaded.append(func.__name__)
        return await real_to_thread(func, *args, **kwargs)

    monkeypatch.setattr(asyncio, "to_thread", recording_to_thread)
    store = SqliteKeyValueStore(tmp_path / "kv.db")

    await store.set("k", {"v": 1})
    assert await store.get("k") == {"v": 1}
    assert offloaded == ["_set_sync", "_get_sync"]


@pytest.mark.asyncio
async def test_sqlite_concurrent_reads(tmp_path):
    store = SqliteKeyValueStore(tmp_path / "kv.db")
    await store.set("k", [1, 2, 3])
    results = await asyncio.gather(*(store.get("k") for _ in range(5)))
    assert results == [[1, 2, 3]] * 5
