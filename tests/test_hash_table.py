import logging

import pytest

from hash_table import HashTable, TableFullError, string_hash


@pytest.fixture
def colliding():
    # Integer keys hash to themselves: 1, 5, 9 and 13 all start at slot 1
    table = HashTable(4)
    for key in (1, 5, 9, 13):
        table.put(key, key * 10)
    return table


def test_put_then_get_returns_value():
    table = HashTable(16)
    table.put("undermining", 1)
    assert table.get("undermining") == 1
    assert table["undermining"] == 1


def test_put_overwrites_existing_value():
    table = HashTable(16)
    table.put("undermining", 1)
    table.put("undermining", 2)
    assert table.get("undermining") == 2
    assert len(table) == 1


def test_overwrite_keeps_slot_and_count(colliding):
    before = colliding.keys()
    colliding.put(9, -1)
    assert colliding.keys() == before
    assert colliding.size == 4
    assert colliding[9] == -1


def test_contains_key_on_never_inserted_key():
    table = HashTable(16)
    assert not table.contains_key("daunting")
    table.put("undermining", 1)
    assert not table.contains_key("daunting")
    assert "undermining" in table


def test_missing_key_lookup_is_safe():
    table = HashTable(16)
    assert table.get("ghost") is None
    assert table.get("ghost", 0) == 0
    with pytest.raises(KeyError):
        table["ghost"]


def test_size_grows_only_with_new_keys():
    table = HashTable(10)
    table.put("undermining", 1)
    assert len(table) == 1
    table.put("daunting", 1)
    assert len(table) == 2
    table["daunting"] = 5
    assert len(table) == 2


def test_linear_probing_wraps_around(colliding):
    # 1, 5, 9 fill slots 1-3, so 13 wraps to slot 0
    assert colliding.keys() == [13, 1, 5, 9]
    assert colliding.values() == [130, 10, 50, 90]
    assert colliding.items() == list(zip(colliding.keys(), colliding.values()))
    assert all(colliding.get(k) == k * 10 for k in (1, 5, 9, 13))


def test_full_table_rejects_new_key(colliding):
    with pytest.raises(TableFullError):
        colliding.put(2, 20)
    assert colliding.size == 4
    assert not colliding.contains_key(2)
    assert colliding.get(2) is None


def test_full_table_still_updates_existing_key(colliding):
    colliding.put(13, 0)
    assert colliding[13] == 0


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        HashTable(0)


def test_iteration_yields_keys():
    table = HashTable(32)
    for word in ("the", "cat", "sat"):
        table.put(word, len(word))
    assert sorted(table) == ["cat", "sat", "the"]


def test_string_hash_is_stable():
    assert string_hash("") == 0
    assert string_hash("a") == 97
    assert string_hash("ab") == 97 * 31 + 98
    long_hash = string_hash("antidisestablishmentarianism" * 10)
    assert -2 ** 31 <= long_hash < 2 ** 31
    assert long_hash == string_hash("antidisestablishmentarianism" * 10)


def test_probe_histogram(colliding):
    assert colliding.probe_stats[:4] == [1, 1, 1, 1]
    assert colliding.max_probe == 3


def test_stats_report(colliding, caplog):
    caplog.set_level(logging.INFO, logger="hash_table")
    report = colliding.stats()

    assert report["entries"] == 4
    assert report["buckets"] == 4
    assert report["histogram"] == [1, 1, 1, 1]
    assert report["max_probe"] == 3
    assert report["fill_percentage"] == 100.0
    assert report["average_probe"] == 1.5
    assert "Hash Table Stats" in caplog.text


def test_stats_on_empty_table():
    report = HashTable(8).stats()
    assert report["entries"] == 0
    assert report["histogram"] == []
    assert report["average_probe"] == 0.0
