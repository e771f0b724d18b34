import logging

import pytest

from hash_table import COLLISION, HashTable, bucket_id, hash_key
from operation import Outcome


@pytest.mark.parametrize("key, expected", [
    ("12", 12),
    ("-3.7", 3),
    ("ab", 195),
    ("inf", ord("i") + ord("n") + ord("f")),
])
def test_hash_key(key, expected):
    assert hash_key(key) == expected


def test_insert_narrates_the_hash(quick):
    table = HashTable(**quick)
    result = table.insert("12", "twelve").run()
    assert result.ok
    assert result.steps[0].message == 'Hashing "12": 12 % 10 = 2'
    assert table.get("12") == "twelve"
    assert table.count == 1


def test_chaining_collision(quick):
    table = HashTable(**quick)
    table.insert("2").run()
    result = table.insert("12").run()
    assert "Collision at index 2. Appending to chain." in [s.message for s in result.steps]
    assert [i.key for i in table.buckets[2].items] == ["2", "12"]


def test_existing_key_is_updated(quick):
    table = HashTable(**quick)
    table.insert("a", "1").run()
    result = table.insert("a", "2").run()
    assert result.message == 'Updated "a".'
    assert table.get("a") == "2"
    assert table.count == 1


def test_search(quick):
    table = HashTable(**quick)
    table.insert("7", "seven").run()
    found = table.search("7").run()
    assert found.ok
    assert found.value == "seven"
    assert found.message == 'Found "7" in bucket 7.'
    missing = table.search("17").run()
    assert missing.outcome is Outcome.NOT_FOUND
    assert missing.message == '"17" not found in bucket 7.'


def test_linear_probing_delete_keeps_cluster_findable(quick):
    table = HashTable(method="linear_probing", **quick)
    for key in ("1", "11", "21"):
        table.insert(key).run()
    assert [table.buckets[i].items[0].key for i in (1, 2, 3)] == ["1", "11", "21"]

    result = table.delete("11").run()
    assert result.ok
    assert "Re-seated \"21\" from index 3 to 2." in [s.message for s in result.steps]
    assert table.search("21").run().message == 'Found "21" at index 2.'
    assert table.buckets[3].empty


def test_probing_collision_role(quick):
    table = HashTable(method="linear_probing", **quick)
    table.insert("4").run()
    result = table.insert("14").run()
    assert any(s.role_of(bucket_id(4)) == COLLISION for s in result.steps)
    assert table.buckets[5].items[0].key == "14"


def test_full_probing_table_overflows(quick, caplog):
    table = HashTable(size=2, method="linear_probing", auto_rehash=False, **quick)
    table.insert("0").run()
    table.insert("1").run()
    with caplog.at_level(logging.WARNING, logger="hash_table"):
        result = table.insert("2").run()
    assert result.outcome is Outcome.OVERFLOW
    assert result.message == "Table is full! Cannot insert."
    assert "rehash suggested" in caplog.text


def test_auto_rehash_doubles_before_insert(quick):
    table = HashTable(**quick)
    for i in range(8):
        table.insert(str(i)).run()
    assert table.size == 10
    result = table.insert("8").run()
    assert result.ok
    assert table.size == 20
    assert "Expanded size to 20. Re-inserting 8 items..." in [s.message for s in result.steps]
    assert sorted(table.keys(), key=int) == [str(i) for i in range(9)]
    assert table.aux() == {"count": 9, "size": 20, "load_factor": 0.45}


def test_manual_rehash_logs(quick, caplog):
    table = HashTable(**quick)
    table.insert("3").run()
    with caplog.at_level(logging.INFO, logger="hash_table"):
        result = table.rehash().run()
    assert result.value == 20
    assert "rehashed 1 items into 20 buckets" in caplog.text
    assert table.get("3") == "3"


def test_set_method_resets(quick):
    table = HashTable(**quick)
    table.insert("x").run()
    result = table.set_method("linear_probing")
    assert result.ok
    assert table.method == "linear_probing"
    assert table.count == 0
    with pytest.raises(ValueError):
        table.set_method("cuckoo")


def test_build_and_reset(quick):
    table = HashTable(**quick)
    table.build(["apple", "pear", 3])
    assert table.count == 3
    assert table.get("3") == "3"
    table.reset()
    assert table.keys() == []


def test_invalid_construction():
    with pytest.raises(ValueError):
        HashTable(size=0)
    with pytest.raises(ValueError):
        HashTable(method="open")


@pytest.mark.parametrize("method", ["chaining", "linear_probing"])
def test_every_key_is_found_after_rehash(quick, method):
    table = HashTable(method=method, **quick)
    keys = [str(k) for k in (3, 13, 23, 7, 17, 40, 55, 61, 72, 88, "pear", "plum")]
    for key in keys:
        assert table.insert(key).run().ok
    assert table.size > 10
    for key in keys:
        assert table.search(key).run().ok, key


def test_updating_a_key_does_not_rehash(quick):
    table = HashTable(**quick)
    for i in range(8):
        table.insert(str(i)).run()
    result = table.insert("0", "zero").run()
    assert result.message == 'Updated "0".'
    assert table.size == 10
    assert table.get("0") == "zero"


def test_digit_grouped_keys_hash_as_text():
    assert hash_key("1_000") == sum(ord(ch) for ch in "1_000")
