"""
Core types and pure functions for the token ledger.

This module provides the foundational pieces every other module builds on:
1. Constants: integer bounds, persisted key names, contract identity
2. Exceptions: LedgerError and the domain-specific error types
3. Checked arithmetic: u128_add, u128_sub, multiply_ratio (no silent wrap)
4. Immutable data structures: TokenInfo, ReleaseEntry, ReleaseSchedule, ContractVersion

All functions in this module are pure. None of them touch storage.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


# ============================================================================
# CONSTANTS
# ============================================================================

# Amounts are unsigned 128-bit integers. Python ints are unbounded, so every
# arithmetic helper below enforces this range explicitly.
U128_MAX = 2 ** 128 - 1

# Largest accepted decimals value for display precision.
MAX_DECIMALS = 18

# Identity written at instantiation so a host can recognise the state layout.
CONTRACT_NAME = "token-ledger"
CONTRACT_VERSION = "0.1.0"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class InvalidDecimals(LedgerError):
    """Raised when decimals exceeds MAX_DECIMALS."""
    pass


class InvalidInitialSupply(LedgerError):
    """Raised when the initial supply is zero or differs from the required supply."""
    pass


class InvalidTokenInfo(LedgerError):
    """Raised when the token name or symbol is empty."""
    pass


class DuplicateAddresses(LedgerError):
    """Raised when two distribution targets (creator, team, pool) coincide."""
    pass


class InvalidMetadataUrl(LedgerError):
    """Raised when a metadata URL does not parse as a well-formed URL."""
    pass


class InvalidAddress(LedgerError):
    """Raised when the host's address validator rejects an address."""
    pass


class InvalidAmount(LedgerError):
    """Raised when a transfer or burn amount is not an int in the u128 range."""
    pass


class AlreadyInstantiated(LedgerError):
    """Raised when instantiate is called on a store that already holds a token."""
    pass


class Unauthorized(LedgerError):
    """Raised when a caller other than the owner attempts an owner-only action."""
    pass


class NotFound(LedgerError):
    """Raised when a required record (token info, release schedule) does not exist."""
    pass


class Overflow(LedgerError):
    """Raised when checked arithmetic would leave the unsigned 128-bit range."""
    pass


class InvariantViolation(LedgerError):
    """Raised when persisted state contradicts one of the ledger invariants."""
    pass


class InsufficientBalance(LedgerError):
    """Raised when a debit exceeds the available balance."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient balance: required {required}, available {available}"
        )


# ============================================================================
# CHECKED ARITHMETIC
# ============================================================================

def require_u128(value: int, what: str = "amount") -> int:
    """
    Validate that value is an int within [0, U128_MAX].

    bool is rejected even though it subclasses int.

    Raises:
        ValueError: If value is not a plain int or is out of range.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{what} must be int, got {type(value).__name__}")
    if value < 0 or value > U128_MAX:
        raise ValueError(f"{what} out of u128 range: {value}")
    return value


def require_naive(value: datetime, what: str = "time") -> datetime:
    """
    Validate that value is a naive datetime.

    The logical clock carries no timezone.

    Raises:
        ValueError: If value is not a datetime or carries tzinfo.
    """
    if not isinstance(value, datetime):
        raise ValueError(f"{what} must be datetime, got {type(value).__name__}")
    if value.tzinfo is not None:
        raise ValueError(f"{what} must be a naive datetime, got tzinfo={value.tzinfo}")
    return value


def u128_add(a: int, b: int) -> int:
    """Return a + b, raising Overflow if the sum exceeds U128_MAX."""
    result = a + b
    if result > U128_MAX:
        raise Overflow(f"Overflow: {a} + {b} exceeds u128")
    return result


def u128_sub(a: int, b: int) -> int:
    """Return a - b, raising Overflow if the difference is negative."""
    if b > a:
        raise Overflow(f"Overflow: {a} - {b} underflows u128")
    return a - b


def multiply_ratio(value: int, numerator: int, denominator: int) -> int:
    """
    Compute value * numerator / denominator with truncation toward zero.

    The multiplication happens first on unbounded ints, so no precision is
    lost in the intermediate product. Only the final quotient is range-checked.

    Raises:
        ValueError: If denominator is zero.
        Overflow: If the result exceeds U128_MAX.
    """
    if denominator == 0:
        raise ValueError("multiply_ratio: denominator must be non-zero")
    result = (value * numerator) // denominator
    if result > U128_MAX:
        raise Overflow(f"Overflow: {value} * {numerator} / {denominator} exceeds u128")
    return result


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class TokenInfo:
    """
    Global token record, created once at instantiation.

    Attributes:
        name: Display name (non-empty).
        symbol: Ticker symbol (non-empty).
        decimals: Display precision, 0..MAX_DECIMALS.
        total_supply: Amount in existence. Only burn decreases it.
        owner: Address allowed to update metadata.
    """
    name: str
    symbol: str
    decimals: int
    total_supply: int
    owner: str

    def __post_init__(self):
        require_u128(self.total_supply, "total_supply")
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int):
            raise ValueError(f"decimals must be int, got {type(self.decimals).__name__}")
        if not self.owner:
            raise ValueError("TokenInfo owner cannot be empty")


@dataclass(frozen=True, slots=True)
class ReleaseEntry:
    """A single (unlock_time, amount) step of a release schedule."""
    unlock_time: datetime
    amount: int

    def __post_init__(self):
        require_naive(self.unlock_time, "unlock_time")
        require_u128(self.amount, "unlock amount")
        if self.amount == 0:
            raise ValueError("unlock amount must be positive")

    def __repr__(self) -> str:
        return f"ReleaseEntry({self.unlock_time.isoformat()}: {self.amount})"


@dataclass(frozen=True, slots=True)
class ReleaseSchedule:
    """
    Immutable snapshot of one holder's release schedule.

    A schedule is pending while entries is non-empty and exhausted once it is
    empty. Each release produces a NEW instance with entries removed; entries
    are never added after construction.

    Invariants (checked here, so no invalid schedule can exist):
        - entries strictly ascending by unlock_time
        - every unlock_time is after start_time
        - locked_amount == sum of entry amounts
        - last_processed_time, when set, is not before start_time
    """
    locked_amount: int
    start_time: datetime
    entries: Tuple[ReleaseEntry, ...] = ()
    last_processed_time: Optional[datetime] = None

    def __post_init__(self):
        require_u128(self.locked_amount, "locked_amount")
        require_naive(self.start_time, "start_time")
        if self.last_processed_time is not None:
            require_naive(self.last_processed_time, "last_processed_time")
        if not isinstance(self.entries, tuple):
            object.__setattr__(self, 'entries', tuple(self.entries))

        previous = self.start_time
        total = 0
        for entry in self.entries:
            if entry.unlock_time <= previous:
                raise ValueError(
                    f"release entries must be strictly ascending after start_time: "
                    f"{entry.unlock_time} <= {previous}"
                )
            previous = entry.unlock_time
            total += entry.amount

        if total != self.locked_amount:
            raise ValueError(
                f"locked_amount {self.locked_amount} != sum of entries {total}"
            )
        if self.last_processed_time is not None and self.last_processed_time < self.start_time:
            raise ValueError("last_processed_time cannot precede start_time")

    @property
    def is_exhausted(self) -> bool:
        """True once every entry has been released."""
        return not self.entries

    @property
    def baseline(self) -> datetime:
        """Time after which entries have not been applied yet."""
        return self.last_processed_time or self.start_time

    def next_unlock_time(self) -> Optional[datetime]:
        """Unlock time of the earliest remaining entry, or None when exhausted."""
        return self.entries[0].unlock_time if self.entries else None


@dataclass(frozen=True, slots=True)
class ContractVersion:
    """Contract identity stored alongside the token state."""
    contract: str
    version: str
