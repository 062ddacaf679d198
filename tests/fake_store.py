"""
fake_store.py - Test Helpers for KeyValueStore

Minimal KeyValueStore implementations for testing adapter functions without a
full TokenContract.
"""

from __future__ import annotations
from typing import Dict, Iterator, List, Optional, Tuple


class ReadOnlyStore:
    """
    Store that serves reads from a fixed map and refuses every write.

    Used to prove that query paths never write.

    Example:
        store = ReadOnlyStore(contract.store.snapshot())
        get_balance(store, 'team')   # fine
        credit(store, 'team', 1)     # AssertionError
    """

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self._data = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        raise AssertionError(f"unexpected write to {key!r}")

    def delete(self, key: str) -> None:
        raise AssertionError(f"unexpected delete of {key!r}")

    def scan(self, prefix: str) -> Iterator[Tuple[str, str]]:
        for key in sorted(self._data):
            if key.startswith(prefix):
                yield key, self._data[key]


class RecordingStore:
    """
    In-memory store that records every write in order.

    Example:
        store = RecordingStore()
        credit(store, 'alice', 5)
        store.writes   # [('set', 'balances/alice', '5')]
    """

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self._data = dict(data or {})
        self.writes: List[Tuple[str, str, Optional[str]]] = []

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes.append(('set', key, value))
        self._data[key] = value

    def delete(self, key: str) -> None:
        self.writes.append(('delete', key, None))
        self._data.pop(key, None)

    def scan(self, prefix: str) -> Iterator[Tuple[str, str]]:
        for key in sorted(self._data):
            if key.startswith(prefix):
                yield key, self._data[key]
