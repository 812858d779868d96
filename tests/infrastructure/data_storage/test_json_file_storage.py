# tests/infrastructure/data_storage/test_json_file_storage.py
import json

import pytest

from real_price.infrastructure.data_storage import JsonFileStorage, MemoryStorage


@pytest.mark.asyncio
async def test_save_and_load_keep_other_keys(tmp_path):
    path = tmp_path / "nested" / "store.json"
    storage = JsonFileStorage(str(path))

    await storage.save("aliexpress_cache", '{"a": 1}')
    await storage.save("aliexpress_disable_cache", "true")

    assert await storage.load("aliexpress_cache") == '{"a": 1}'
    assert await storage.load("aliexpress_disable_cache") == "true"
    assert await storage.load("missing") is None
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "aliexpress_cache": '{"a": 1}',
        "aliexpress_disable_cache": "true",
    }
    assert not (tmp_path / "nested" / "store.json.tmp").exists()


@pytest.mark.asyncio
async def test_corrupted_file_reads_as_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{broken", encoding="utf-8")
    storage = JsonFileStorage(str(path))

    assert await storage.load("aliexpress_cache") is None
    await storage.save("k", "v")
    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}


@pytest.mark.asyncio
async def test_memory_storage_counts_saves():
    storage = MemoryStorage({"k": "v"})
    await storage.save("k", "w")
    assert await storage.load("k") == "w"
    assert storage.save_count == 1
