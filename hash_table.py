# hash_table.py
# Hash table engine with chaining or linear probing and doubling rehash

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from operation import Engine, Operation, OperationResult, Outcome, done, failed
from settings import HASH_INITIAL_SIZE, LOAD_FACTOR_LIMIT
from steps import ACTIVE, IdSource, StepRecorder

logger = logging.getLogger(__name__)

COLLISION = "collision"
FOUND = "found"

METHODS = ("chaining", "linear_probing")


def hash_key(key: str) -> int:
    """Decimal numeric keys hash to their magnitude, anything else to the sum of its character codes."""
    try:
        # float() also accepts digit grouping such as "1_000"
        number = math.nan if "_" in key else float(key)
    except ValueError:
        number = math.nan
    if math.isfinite(number):
        return int(abs(number))
    return sum(ord(ch) for ch in key)


def bucket_id(index: int) -> str:
    return f"b{index}"


@dataclass
class HashItem:
    id: str
    key: str
    value: str


@dataclass
class Bucket:
    index: int
    items: List[HashItem] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.items


class HashTable(Engine):
    feature = "hash_table"
    context = "Hash Table. Hashing, collisions (chaining, linear probing), load factor, rehashing."

    def __init__(
        self,
        size: int = HASH_INITIAL_SIZE,
        method: str = "chaining",
        auto_rehash: bool = True,
        load_factor_limit: float = LOAD_FACTOR_LIMIT,
        **kwargs,
    ):
        if size <= 0:
            raise ValueError("table size must be positive")
        if method not in METHODS:
            raise ValueError(f"unknown collision method: {method}")
        super().__init__(**kwargs)
        self.initial_size = size
        self.method = method
        self.auto_rehash = auto_rehash
        self.load_factor_limit = load_factor_limit
        self.buckets: List[Bucket] = self._new_buckets(size)
        self.count = 0
        self._new_id = IdSource("h")

    @staticmethod
    def _new_buckets(size: int) -> List[Bucket]:
        return [Bucket(i) for i in range(size)]

    # --- state ---

    @property
    def size(self) -> int:
        return len(self.buckets)

    @property
    def load_factor(self) -> float:
        return self.count / self.size

    def index_of(self, key, size: Optional[int] = None) -> int:
        return hash_key(str(key)) % (size or self.size)

    def snapshot(self) -> dict:
        return {
            "size": self.size,
            "method": self.method,
            "buckets": [
                {
                    "id": bucket_id(b.index),
                    "index": b.index,
                    "items": [{"id": i.id, "key": i.key, "value": i.value} for i in b.items],
                }
                for b in self.buckets
            ],
        }

    def aux(self) -> dict:
        return {"count": self.count, "size": self.size, "load_factor": round(self.load_factor, 2)}

    def keys(self) -> List[str]:
        return [item.key for b in self.buckets for item in b.items]

    def get(self, key) -> Optional[str]:
        """Direct lookup without recording."""
        key = str(key)
        for b in self.buckets:
            for item in b.items:
                if item.key == key:
                    return item.value
        return None

    def ids_with_value(self, value) -> List[str]:
        value = str(value)
        return [i.id for b in self.buckets for i in b.items if value in (i.key, i.value)]

    # --- public operations ---

    def insert(self, key, value="") -> Operation:
        return self._begin(f"insert {key}", lambda rec: self._insert(rec, str(key), str(value)))

    def search(self, key) -> Operation:
        return self._begin(f"search {key}", lambda rec: self._search(rec, str(key)))

    def delete(self, key) -> Operation:
        return self._begin(f"delete {key}", lambda rec: self._delete(rec, str(key)))

    remove = delete

    def rehash(self) -> Operation:
        return self._begin("rehash", lambda rec: self._rehash(rec, "Rehashing table..."))

    def reset(self) -> OperationResult:
        def action():
            self.buckets = self._new_buckets(self.initial_size)
            self.count = 0
            return done("Table cleared.")

        return self._sync("reset", action)

    clear = reset

    def set_method(self, method: str) -> OperationResult:
        if method not in METHODS:
            raise ValueError(f"unknown collision method: {method}")

        def action():
            self.method = method
            self.buckets = self._new_buckets(self.initial_size)
            self.count = 0
            return done(f"Collision method: {method}. Table cleared.")

        return self._sync("set method", action)

    def build(self, values: Sequence) -> OperationResult:
        def action():
            self.buckets = self._new_buckets(self.initial_size)
            self.count = 0
            for value in values:
                self._silently(self._insert(None, str(value), str(value)))
            return done(f"Built table with {self.count} items.")

        return self._sync("build", action)

    # --- placement ---

    def _seat(self, item: HashItem, buckets: List[Bucket]) -> Optional[int]:
        """Places an item without animation; returns its bucket index or None when full."""
        size = len(buckets)
        index = hash_key(item.key) % size
        if self.method == "chaining":
            buckets[index].items.append(item)
            return index
        for offset in range(size):
            slot = (index + offset) % size
            if buckets[slot].empty:
                buckets[slot].items.append(item)
                return slot
        return None

    def _hash_text(self, key: str, index: int) -> str:
        return f'Hashing "{key}": {hash_key(key)} % {self.size} = {index}'

    # --- step generators ---

    def _insert(self, rec: Optional[StepRecorder], key: str, value: str):
        if self.load_factor > self.load_factor_limit and key not in self.keys():
            if self.auto_rehash:
                yield from self._rehash(rec, f"Load Factor > {self.load_factor_limit}. Rehashing table...")
            else:
                logger.warning("load factor %.2f exceeds %.2f; rehash suggested", self.load_factor,
                               self.load_factor_limit)
                yield self._step(rec, message=f"Load Factor > {self.load_factor_limit}. Rehash suggested.")

        index = self.index_of(key)
        yield self._step(rec, {bucket_id(index): ACTIVE}, message=self._hash_text(key, index))

        if self.method == "chaining":
            bucket = self.buckets[index]
            for item in bucket.items:
                if item.key == key:
                    item.value = value
                    yield self._step(rec, {bucket_id(index): FOUND, item.id: FOUND},
                                     message=f'Key "{key}" exists. Updated value.')
                    self._play("success")
                    return done(f'Updated "{key}".', item)
            if not bucket.empty:
                yield self._step(rec, {bucket_id(index): COLLISION},
                                 message=f"Collision at index {index}. Appending to chain.")
            item = HashItem(self._new_id(), key, value)
            bucket.items.append(item)
            self.count += 1
            yield self._step(rec, {bucket_id(index): FOUND, item.id: FOUND}, message="Inserted.")
            self._play("insert")
            return done("Inserted.", item)

        slot = index
        for _ in range(self.size):
            bucket = self.buckets[slot]
            yield self._step(rec, {bucket_id(slot): ACTIVE}, message=f"Checking index {slot}...",
                             delay=self.step_delay / 2)
            if bucket.empty:
                item = HashItem(self._new_id(), key, value)
                bucket.items.append(item)
                self.count += 1
                yield self._step(rec, {bucket_id(slot): FOUND, item.id: FOUND}, message="Inserted.")
                self._play("insert")
                return done("Inserted.", item)
            if bucket.items[0].key == key:
                bucket.items[0].value = value
                yield self._step(rec, {bucket_id(slot): FOUND}, message=f'Key "{key}" exists. Updated value.')
                self._play("success")
                return done(f'Updated "{key}".', bucket.items[0])
            yield self._step(rec, {bucket_id(slot): COLLISION}, message=f"Index {slot} occupied. Probing next...",
                             delay=self.step_delay / 2)
            slot = (slot + 1) % self.size

        yield self._step(rec, message="Table is full! Cannot insert.")
        self._play("error")
        return failed(Outcome.OVERFLOW, "Table is full! Cannot insert.")

    def _locate(self, rec, key: str):
        """Searches for key, recording each check. Returns (bucket index, item) or (index, None)."""
        index = self.index_of(key)
        if self.method == "chaining":
            bucket = self.buckets[index]
            for item in bucket.items:
                yield self._step(rec, {bucket_id(index): ACTIVE, item.id: ACTIVE},
                                 message=f'Comparing "{item.key}"...', delay=self.step_delay / 2)
                if item.key == key:
                    return index, item
            return index, None

        slot = index
        for _ in range(self.size):
            bucket = self.buckets[slot]
            yield self._step(rec, {bucket_id(slot): ACTIVE}, message=f"Checking index {slot}...",
                             delay=self.step_delay / 2)
            if bucket.empty:
                break
            if bucket.items[0].key == key:
                return slot, bucket.items[0]
            slot = (slot + 1) % self.size
        return slot, None

    def _search(self, rec: StepRecorder, key: str):
        index = self.index_of(key)
        yield self._step(rec, {bucket_id(index): ACTIVE}, message=self._hash_text(key, index))
        slot, item = yield from self._locate(rec, key)
        if item is None:
            where = f" in bucket {index}" if self.method == "chaining" else ""
            yield self._step(rec, {bucket_id(slot): COLLISION}, message=f'"{key}" not found{where}.')
            self._play("error")
            return failed(Outcome.NOT_FOUND, f'"{key}" not found{where}.')

        where = f"in bucket {slot}" if self.method == "chaining" else f"at index {slot}"
        yield self._step(rec, {bucket_id(slot): FOUND, item.id: FOUND}, message=f'Found "{key}" {where}.', delay=1500)
        self._play("success")
        return done(f'Found "{key}" {where}.', item.value)

    def _delete(self, rec: StepRecorder, key: str):
        yield self._step(rec, message=f'Searching to delete "{key}"...')
        slot, item = yield from self._locate(rec, key)
        if item is None:
            yield self._step(rec, {bucket_id(slot): COLLISION}, message=f'"{key}" not found.')
            self._play("error")
            return failed(Outcome.NOT_FOUND, f'"{key}" not found.')

        self.buckets[slot].items.remove(item)
        self.count -= 1
        yield self._step(rec, {bucket_id(slot): FOUND}, message=f'Deleted "{key}" from index {slot}.', delay=1000)
        self._play("delete")

        if self.method == "linear_probing":
            yield from self._reseat_cluster(rec, slot)
        return done(f'Deleted "{key}".', item.value)

    def _reseat_cluster(self, rec, hole: int):
        # Items after the hole may have been placed past it; reinsert each one
        slot = (hole + 1) % self.size
        while slot != hole and not self.buckets[slot].empty:
            item = self.buckets[slot].items.pop()
            target = self._seat(item, self.buckets)
            if target != slot:
                yield self._step(rec, {bucket_id(slot): ACTIVE, bucket_id(target): FOUND},
                                 message=f'Re-seated "{item.key}" from index {slot} to {target}.',
                                 delay=self.step_delay / 2)
            slot = (slot + 1) % self.size

    def _rehash(self, rec: Optional[StepRecorder], message: str):
        yield self._step(rec, message=message, delay=1000)

        items = [item for b in self.buckets for item in b.items]
        new_size = self.size * 2
        self.buckets = self._new_buckets(new_size)
        yield self._step(rec, message=f"Expanded size to {new_size}. Re-inserting {len(items)} items...", delay=800)

        for item in items:
            self._seat(item, self.buckets)
        logger.info("rehashed %d items into %d buckets", len(items), new_size)
        yield self._step(rec, message="Rehashing complete.")
        self._play("success")
        return done("Rehashing complete.", new_size)
