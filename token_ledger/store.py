"""
store.py - Key-Value Persistence for the Token Ledger

The host persists contract state as a flat key -> value map. This module
defines that interface and the two implementations the package needs:

    KeyValueStore  Protocol every store implements (get/set/delete/scan)
    MemoryStore    Plain in-memory map, the default durable store for tests/examples
    StoreOverlay   Buffered view over another store; commit() or discard()

Key layout:
    token_info              TokenInfo singleton
    contract_info           ContractVersion singleton
    metadata_url            metadata URL singleton
    balances/<address>      spendable balance
    vesting/<address>       owner vesting ReleaseSchedule
    pool_release/<address>  pool ReleaseSchedule

Values are canonical JSON text (sorted keys, compact separators) so that the
same logical state always serializes to the same bytes.
"""

from __future__ import annotations
import json
from typing import Any, Dict, Iterator, Optional, Protocol, Tuple, runtime_checkable


TOKEN_INFO_KEY = "token_info"
CONTRACT_INFO_KEY = "contract_info"
METADATA_URL_KEY = "metadata_url"

BALANCES_PREFIX = "balances/"
VESTING_PREFIX = "vesting/"
POOL_RELEASE_PREFIX = "pool_release/"


def balance_key(address: str) -> str:
    return f"{BALANCES_PREFIX}{address}"


# ============================================================================
# PROTOCOL
# ============================================================================

@runtime_checkable
class KeyValueStore(Protocol):
    """
    Interface to the host's key-value state.

    Functions accepting a KeyValueStore only read and write through these four
    methods. scan() yields keys in ascending order so every iteration over
    state is deterministic.
    """

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    def delete(self, key: str) -> None:
        """Remove key. Deleting an absent key is a no-op."""
        ...

    def scan(self, prefix: str) -> Iterator[Tuple[str, str]]:
        """Yield (key, value) pairs whose key starts with prefix, sorted by key."""
        ...


# ============================================================================
# IMPLEMENTATIONS
# ============================================================================

class MemoryStore:
    """
    In-memory KeyValueStore.

    Not thread-safe. Each thread should maintain its own store.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"store values must be str, got {type(value).__name__}")
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def scan(self, prefix: str) -> Iterator[Tuple[str, str]]:
        for key in sorted(self._data):
            if key.startswith(prefix):
                yield key, self._data[key]

    def snapshot(self) -> Dict[str, str]:
        """Return a copy of the raw key -> value map."""
        return dict(self._data)

    def __len__(self) -> int:
        return len(self._data)


class StoreOverlay:
    """
    Write buffer over another store.

    Reads fall through to the base store unless the key has been written or
    deleted in this overlay. Nothing reaches the base store until commit().
    discard() drops every buffered write, which is how a failed call leaves
    persisted state untouched.
    """

    _DELETED = object()

    def __init__(self, base: KeyValueStore):
        self._base = base
        self._writes: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[str]:
        if key in self._writes:
            value = self._writes[key]
            return None if value is self._DELETED else value
        return self._base.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"store values must be str, got {type(value).__name__}")
        self._writes[key] = value

    def delete(self, key: str) -> None:
        self._writes[key] = self._DELETED

    def scan(self, prefix: str) -> Iterator[Tuple[str, str]]:
        merged: Dict[str, Any] = dict(self._base.scan(prefix))
        for key, value in self._writes.items():
            if key.startswith(prefix):
                merged[key] = value
        for key in sorted(merged):
            value = merged[key]
            if value is not self._DELETED:
                yield key, value

    @property
    def pending_writes(self) -> int:
        """Number of keys written or deleted since the last commit/discard."""
        return len(self._writes)

    def commit(self) -> None:
        """Apply buffered writes to the base store, in key order."""
        for key in sorted(self._writes):
            value = self._writes[key]
            if value is self._DELETED:
                self._base.delete(key)
            else:
                self._base.set(key, value)
        self._writes.clear()

    def discard(self) -> None:
        """Drop all buffered writes."""
        self._writes.clear()


# ============================================================================
# CODEC
# ============================================================================

def encode_record(record: Dict[str, Any]) -> str:
    """
    Serialize a record to canonical JSON.

    Semantically equal records produce identical strings regardless of dict
    insertion order.
    """
    return json.dumps(record, sort_keys=True, separators=(",", ":"))


def decode_record(raw: str) -> Dict[str, Any]:
    """Parse a record produced by encode_record()."""
    value = json.loads(raw)
    if not isinstance(value, dict):
        raise ValueError(f"expected a JSON object, got {type(value).__name__}")
    return value
