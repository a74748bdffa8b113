"""Minimal perfect hash map over a fixed key set.

Construction follows the hash-and-displace (CHD) scheme:

  - every key is hashed once with a seed into three 32-bit words
    ``(g, f1, f2)``
  - keys are grouped into buckets of about ``LAMBDA`` keys by ``g``
  - buckets are placed largest first; for each one a displacement pair
    ``(d1, d2)`` is searched so that ``f2 + f1 * d1 + d2`` (mod n) sends
    every key of the bucket to a free slot
  - if some bucket cannot be placed the whole attempt restarts with the
    next seed

Lookup is one hash, one displacement read and one key comparison.  The
table has exactly one slot per key.  Hashing uses keyed BLAKE2b so the
layout does not depend on ``PYTHONHASHSEED`` and can be written out as
literals by the emitter.
"""

from __future__ import annotations

import hashlib
import random
from collections.abc import Hashable, Iterator, Mapping
from typing import Any, Generic, NamedTuple, TypeVar

from iana_ports.errors import PerfectHashError

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

LAMBDA = 5
MAX_ATTEMPTS = 64
DEFAULT_SEED = 1234567890

_MASK32 = 0xFFFFFFFF


class Hashes(NamedTuple):
    g: int
    f1: int
    f2: int


def _key_bytes(key: Any) -> bytes:
    if isinstance(key, bool):
        raise TypeError("bool keys are not supported")
    if isinstance(key, int):
        return b"i" + str(key).encode("ascii")
    if isinstance(key, str):
        return b"s" + key.encode("utf-8")
    raise TypeError(f"Unsupported perfect-hash key type: {type(key).__name__}")


def hash_key(key: Any, seed: int) -> Hashes:
    digest = hashlib.blake2b(
        _key_bytes(key), digest_size=12, key=seed.to_bytes(8, "little"),
    ).digest()
    return Hashes(
        int.from_bytes(digest[0:4], "little"),
        int.from_bytes(digest[4:8], "little"),
        int.from_bytes(digest[8:12], "little"),
    )


def displace(f1: int, f2: int, d1: int, d2: int) -> int:
    return (d2 + f1 * d1 + f2) & _MASK32


def _try_generate(
    keys: list[Any], seed: int,
) -> tuple[tuple[tuple[int, int], ...], list[int]] | None:
    """One construction attempt. Returns (displacements, slot -> key index)."""
    hashes = [hash_key(k, seed) for k in keys]
    table_len = len(keys)
    buckets_len = (table_len + LAMBDA - 1) // LAMBDA

    buckets: list[list[int]] = [[] for _ in range(buckets_len)]
    for i, h in enumerate(hashes):
        buckets[h.g % buckets_len].append(i)

    order = sorted(range(buckets_len), key=lambda b: len(buckets[b]), reverse=True)
    disps = [(0, 0)] * buckets_len
    slots: list[int | None] = [None] * table_len
    # generation marks avoid clearing a scratch table for every trial
    trial = [0] * table_len
    generation = 0

    for b in order:
        members = buckets[b]
        placed = False
        for d1 in range(table_len):
            for d2 in range(table_len):
                generation += 1
                pending: list[tuple[int, int]] = []
                for key_idx in members:
                    h = hashes[key_idx]
                    idx = displace(h.f1, h.f2, d1, d2) % table_len
                    if slots[idx] is not None or trial[idx] == generation:
                        break
                    trial[idx] = generation
                    pending.append((idx, key_idx))
                else:
                    for idx, key_idx in pending:
                        slots[idx] = key_idx
                    disps[b] = (d1, d2)
                    placed = True
                    break
            if placed:
                break
        if not placed:
            return None

    return tuple(disps), [s for s in slots if s is not None]


class PerfectHashMap(Mapping[K, V], Generic[K, V]):
    """Read-only mapping backed by a minimal perfect hash.

    Instances are normally built with ``from_mapping``.  The constructor
    takes the raw table parts so generated code can rebuild a map without
    re-running the search.
    """

    __slots__ = ("_seed", "_disps", "_entries")

    def __init__(
        self,
        seed: int,
        displacements: tuple[tuple[int, int], ...],
        entries: tuple[tuple[K, V], ...],
    ) -> None:
        if entries and not displacements:
            raise ValueError("A non-empty perfect hash map needs displacements")
        self._seed = seed
        self._disps = tuple(displacements)
        self._entries = tuple(entries)

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[K, V], *, seed: int = DEFAULT_SEED,
    ) -> PerfectHashMap[K, V]:
        """Build a map for ``mapping``'s keys.

        Deterministic for a given key set and seed.  Raises PerfectHashError
        if no seed in the attempt budget yields a placement.
        """
        keys = list(mapping)
        if not keys:
            return cls(seed, (), ())
        if len(set(keys)) != len(keys):
            raise ValueError("Perfect hash keys must be unique")

        rng = random.Random(seed)
        for _ in range(MAX_ATTEMPTS):
            attempt_seed = rng.getrandbits(64)
            result = _try_generate(keys, attempt_seed)
            if result is None:
                continue
            disps, slots = result
            entries = tuple((keys[i], mapping[keys[i]]) for i in slots)
            return cls(attempt_seed, disps, entries)
        raise PerfectHashError(
            f"Could not build a perfect hash for {len(keys)} keys "
            f"in {MAX_ATTEMPTS} attempts"
        )

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def displacements(self) -> tuple[tuple[int, int], ...]:
        return self._disps

    @property
    def entries(self) -> tuple[tuple[K, V], ...]:
        """Key/value pairs in slot order."""
        return self._entries

    def _slot(self, key: Any) -> int | None:
        if not self._entries:
            return None
        try:
            h = hash_key(key, self._seed)
        except TypeError:
            return None
        d1, d2 = self._disps[h.g % len(self._disps)]
        idx = displace(h.f1, h.f2, d1, d2) % len(self._entries)
        stored = self._entries[idx][0]
        if type(stored) is not type(key) or stored != key:
            return None
        return idx

    def __getitem__(self, key: K) -> V:
        idx = self._slot(key)
        if idx is None:
            raise KeyError(key)
        return self._entries[idx][1]

    def get(self, key: Any, default: Any = None) -> Any:
        idx = self._slot(key)
        if idx is None:
            return default
        return self._entries[idx][1]

    def __contains__(self, key: object) -> bool:
        return self._slot(key) is not None

    def __iter__(self) -> Iterator[K]:
        return (k for k, _ in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(<{len(self._entries)} keys>, seed={self._seed})"
