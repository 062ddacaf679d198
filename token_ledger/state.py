"""
state.py - Typed Adapters Between the Store and the Data Model

These functions are the ONLY place that converts persisted JSON into the
frozen dataclasses of core.py and back. Everything above this layer works with
TokenInfo / ReleaseSchedule values and never sees raw store text.

Amounts are persisted as decimal strings (u128 does not fit a JSON double),
timestamps as ISO-8601 strings.
"""

from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

from .core import (
    TokenInfo, ReleaseEntry, ReleaseSchedule, ContractVersion,
    NotFound, InvariantViolation,
    require_u128,
)
from .store import (
    KeyValueStore,
    TOKEN_INFO_KEY, CONTRACT_INFO_KEY, METADATA_URL_KEY,
    BALANCES_PREFIX, VESTING_PREFIX, POOL_RELEASE_PREFIX,
    balance_key, encode_record, decode_record,
)


class ScheduleKind(Enum):
    """
    The two release-bucket kinds.

    VESTING: owner bucket, unlocked yearly.
    POOL_RELEASE: locked remainder of the pool bucket, unlocked over 18 months.
    """
    VESTING = "vesting"
    POOL_RELEASE = "pool_release"

    @property
    def prefix(self) -> str:
        return VESTING_PREFIX if self is ScheduleKind.VESTING else POOL_RELEASE_PREFIX

    def key(self, address: str) -> str:
        return f"{self.prefix}{address}"


# ============================================================================
# AMOUNTS AND TIMESTAMPS
# ============================================================================

def _amount_to_str(amount: int) -> str:
    return str(require_u128(amount))


def _amount_from_str(raw: Any) -> int:
    if not isinstance(raw, str) or not (raw.isascii() and raw.isdigit()):
        raise InvariantViolation(f"stored amount is not a decimal string: {raw!r}")
    return int(raw)


def _time_to_str(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _time_from_str(raw: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(raw) if raw is not None else None


# ============================================================================
# TOKEN INFO
# ============================================================================

def token_info_to_dict(info: TokenInfo) -> Dict[str, Any]:
    return {
        'name': info.name,
        'symbol': info.symbol,
        'decimals': info.decimals,
        'total_supply': _amount_to_str(info.total_supply),
        'owner': info.owner,
    }


def has_token_info(store: KeyValueStore) -> bool:
    return store.get(TOKEN_INFO_KEY) is not None


def load_token_info(store: KeyValueStore) -> TokenInfo:
    """
    Load the TokenInfo singleton.

    Raises:
        NotFound: If the contract has not been instantiated.
    """
    raw = store.get(TOKEN_INFO_KEY)
    if raw is None:
        raise NotFound("token info not found: contract not instantiated")
    data = decode_record(raw)
    return TokenInfo(
        name=data['name'],
        symbol=data['symbol'],
        decimals=data['decimals'],
        total_supply=_amount_from_str(data['total_supply']),
        owner=data['owner'],
    )


def save_token_info(store: KeyValueStore, info: TokenInfo) -> None:
    store.set(TOKEN_INFO_KEY, encode_record(token_info_to_dict(info)))


# ============================================================================
# CONTRACT VERSION AND METADATA
# ============================================================================

def load_contract_version(store: KeyValueStore) -> ContractVersion:
    raw = store.get(CONTRACT_INFO_KEY)
    if raw is None:
        raise NotFound("contract version not found")
    data = decode_record(raw)
    return ContractVersion(contract=data['contract'], version=data['version'])


def save_contract_version(store: KeyValueStore, version: ContractVersion) -> None:
    store.set(CONTRACT_INFO_KEY, encode_record({
        'contract': version.contract,
        'version': version.version,
    }))


def load_metadata_url(store: KeyValueStore) -> str:
    raw = store.get(METADATA_URL_KEY)
    if raw is None:
        raise NotFound("metadata url not found")
    return decode_record(raw)['metadata_url']


def save_metadata_url(store: KeyValueStore, url: str) -> None:
    store.set(METADATA_URL_KEY, encode_record({'metadata_url': url}))


# ============================================================================
# BALANCES
# ============================================================================

def load_balance(store: KeyValueStore, address: str) -> int:
    """Spendable balance of address; absent entries read as zero."""
    raw = store.get(balance_key(address))
    if raw is None:
        return 0
    return _amount_from_str(raw)


def save_balance(store: KeyValueStore, address: str, amount: int) -> None:
    store.set(balance_key(address), _amount_to_str(amount))


def scan_balances(store: KeyValueStore) -> Iterator[Tuple[str, int]]:
    """Yield (address, balance) for every balance entry, ordered by address."""
    for key, raw in store.scan(BALANCES_PREFIX):
        yield key[len(BALANCES_PREFIX):], _amount_from_str(raw)


# ============================================================================
# RELEASE SCHEDULES
# ============================================================================

def schedule_to_dict(schedule: ReleaseSchedule) -> Dict[str, Any]:
    return {
        'locked_amount': _amount_to_str(schedule.locked_amount),
        'start_time': _time_to_str(schedule.start_time),
        'entries': [
            [_time_to_str(entry.unlock_time), _amount_to_str(entry.amount)]
            for entry in schedule.entries
        ],
        'last_processed_time': _time_to_str(schedule.last_processed_time),
    }


def schedule_from_dict(data: Dict[str, Any]) -> ReleaseSchedule:
    """
    Rebuild a ReleaseSchedule from its stored form.

    A stored schedule that fails the ReleaseSchedule invariants is reported as
    InvariantViolation rather than ValueError: the data came from the store,
    not from a caller.
    """
    try:
        return ReleaseSchedule(
            locked_amount=_amount_from_str(data['locked_amount']),
            start_time=_time_from_str(data['start_time']),
            entries=tuple(
                ReleaseEntry(unlock_time=_time_from_str(t), amount=_amount_from_str(a))
                for t, a in data['entries']
            ),
            last_processed_time=_time_from_str(data.get('last_processed_time')),
        )
    except ValueError as e:
        raise InvariantViolation(f"stored release schedule is invalid: {e}") from e


def load_schedule(
    store: KeyValueStore,
    kind: ScheduleKind,
    address: str,
) -> Optional[ReleaseSchedule]:
    """Return the holder's schedule of this kind, or None if there is none."""
    raw = store.get(kind.key(address))
    if raw is None:
        return None
    return schedule_from_dict(decode_record(raw))


def save_schedule(
    store: KeyValueStore,
    kind: ScheduleKind,
    address: str,
    schedule: ReleaseSchedule,
) -> None:
    store.set(kind.key(address), encode_record(schedule_to_dict(schedule)))


def scan_schedules(
    store: KeyValueStore,
    kind: ScheduleKind,
) -> Iterator[Tuple[str, ReleaseSchedule]]:
    """Yield (address, schedule) for every schedule of this kind, ordered by address."""
    prefix = kind.prefix
    for key, raw in store.scan(prefix):
        yield key[len(prefix):], schedule_from_dict(decode_record(raw))
