"""Tests for tag counters and category saving."""

import pytest
from pymongo.errors import DuplicateKeyError

from blog.models.category import Category
from blog.models.tag import Tag
from blog.services.tag_manager import save_category, save_tags


@pytest.mark.asyncio
async def test_new_tag_is_created_with_number_one(mongo_db) -> None:
    docs = await save_tags(["fresh"])

    assert len(docs) == 1
    stored = await Tag.find({"name": "fresh"})
    assert len(stored) == 1
    assert stored[0]["number"] == 1


@pytest.mark.asyncio
async def test_seen_tag_is_incremented_not_duplicated(mongo_db) -> None:
    await save_tags(["again"])
    await save_tags(["again"])

    stored = await Tag.find({"name": "again"})
    assert len(stored) == 1
    assert stored[0]["number"] == 2


@pytest.mark.asyncio
async def test_mixed_list_updates_each_tag(mongo_db) -> None:
    await save_tags(["a"])
    await save_tags(["a", "b"])

    tags = {doc["name"]: doc["number"] for doc in await Tag.find()}
    assert tags == {"a": 2, "b": 1}


@pytest.mark.asyncio
async def test_repeated_name_in_one_list_counts_twice(mongo_db) -> None:
    await save_tags(["dup", "dup"])

    stored = await Tag.find({"name": "dup"})
    assert len(stored) == 1
    assert stored[0]["number"] == 2


@pytest.mark.asyncio
async def test_empty_tag_list_is_a_no_op(mongo_db) -> None:
    assert await save_tags([]) == []
    assert await save_tags(None) == []
    assert await Tag.find() == []


@pytest.mark.asyncio
async def test_tag_name_is_unique(mongo_db) -> None:
    await Tag.create({"name": "solo"})
    with pytest.raises(DuplicateKeyError):
        await Tag.create({"name": "solo"})


@pytest.mark.asyncio
async def test_save_category_always_inserts(mongo_db) -> None:
    await save_category("notes")
    await save_category("notes")

    stored = await Category.find({"name": "notes"})
    assert len(stored) == 2


class _RacingCollection:
    """Tags collection whose first upsert loses a race to a concurrent insert."""

    def __init__(self, real, failures: int = 1):
        self.real = real
        self.failures = failures
        self.calls = []

    async def find_one_and_update(self, *args, **kwargs):
        self.calls.append(kwargs)
        if self.failures:
            self.failures -= 1
            # the concurrent writer's insert lands before our error surfaces
            await self.real.insert_one({"name": args[0]["name"], "number": 1})
            raise DuplicateKeyError("E11000 duplicate key error collection: tags index: name_1")
        return await self.real.find_one_and_update(*args, **kwargs)


@pytest.mark.asyncio
async def test_lost_upsert_race_is_retried_as_increment(mongo_db, monkeypatch: pytest.MonkeyPatch) -> None:
    racing = _RacingCollection(Tag.collection)
    monkeypatch.setattr(type(Tag), "collection", property(lambda self: racing))

    docs = await save_tags(["raced"])

    assert docs[0]["number"] == 2
    assert len(racing.calls) == 2
    assert racing.calls[0].get("upsert") is True
    assert "upsert" not in racing.calls[1]
    stored = await racing.real.find({"name": "raced"}).to_list(length=None)
    assert [doc["number"] for doc in stored] == [2]


@pytest.mark.asyncio
async def test_second_duplicate_key_error_propagates(mongo_db, monkeypatch: pytest.MonkeyPatch) -> None:
    racing = _RacingCollection(Tag.collection)

    async def always_duplicate(*args, **kwargs):
        racing.calls.append(kwargs)
        raise DuplicateKeyError("E11000 duplicate key error collection: tags index: name_1")

    racing.find_one_and_update = always_duplicate
    monkeypatch.setattr(type(Tag), "collection", property(lambda self: racing))

    with pytest.raises(DuplicateKeyError):
        await save_tags(["stuck"])
    assert len(racing.calls) == 2
