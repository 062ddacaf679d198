"""
distribution.py - Initial Supply Distribution

Runs exactly once, when the token is created. It validates the creation
parameters, splits the initial supply into buckets, credits the immediately
spendable shares and seeds the two release schedules.

Split (DEFAULT_DISTRIBUTION_POLICY):

    team bucket   20%  -> team address, spendable immediately
    pool bucket   50%  -> 40/50 of it to the pool address immediately,
                          the rest locked in the pool's POOL_RELEASE schedule
    owner bucket  rest -> locked in the creator's VESTING schedule

For an initial supply of 1,000,000,000:

    team          200,000,000 immediate
    pool          400,000,000 immediate + 100,000,000 locked
    owner                                 300,000,000 locked

Rounding: every share is computed multiply-then-divide with truncation. The
remainder of each split goes to the LAST computed share (owner bucket, locked
pool remainder), so the shares always add up to exactly initial_supply.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from .core import (
    TokenInfo, MAX_DECIMALS,
    InvalidDecimals, InvalidInitialSupply, InvalidTokenInfo, DuplicateAddresses,
    multiply_ratio, require_u128, u128_sub,
)
from .balances import credit
from .metadata import validate_metadata_url
from .release import ReleasePolicy, OWNER_VESTING_POLICY, POOL_RELEASE_POLICY, build_schedule
from .state import ScheduleKind, save_token_info, save_metadata_url, save_schedule
from .store import KeyValueStore


# Exact supply the deployed token must be created with.
REQUIRED_INITIAL_SUPPLY = 1_000_000_000

Ratio = Tuple[int, int]


def _check_ratio(name: str, ratio: Ratio) -> None:
    numerator, denominator = ratio
    if denominator <= 0 or numerator < 0 or numerator > denominator:
        raise ValueError(f"{name} must satisfy 0 <= numerator <= denominator > 0, got {ratio}")


@dataclass(frozen=True, slots=True)
class DistributionPolicy:
    """
    Deployment constants for the initial distribution.

    Attributes:
        team_ratio: Share of the supply credited to the team address.
        pool_ratio: Share of the supply forming the pool bucket.
        pool_upfront_ratio: Share of the pool bucket credited immediately.
        required_supply: Exact supply to enforce, or None to accept any
            non-zero supply.
        max_decimals: Largest accepted decimals value.
        owner_release: Offset table for the owner's vesting schedule.
        pool_release: Offset table for the pool's release schedule.
    """
    team_ratio: Ratio = (20, 100)
    pool_ratio: Ratio = (50, 100)
    pool_upfront_ratio: Ratio = (40, 50)
    required_supply: Optional[int] = REQUIRED_INITIAL_SUPPLY
    max_decimals: int = MAX_DECIMALS
    owner_release: ReleasePolicy = OWNER_VESTING_POLICY
    pool_release: ReleasePolicy = POOL_RELEASE_POLICY

    def __post_init__(self):
        _check_ratio("team_ratio", self.team_ratio)
        _check_ratio("pool_ratio", self.pool_ratio)
        _check_ratio("pool_upfront_ratio", self.pool_upfront_ratio)
        team_n, team_d = self.team_ratio
        pool_n, pool_d = self.pool_ratio
        if team_n * pool_d + pool_n * team_d > team_d * pool_d:
            raise ValueError("team_ratio + pool_ratio cannot exceed 100%")
        if self.required_supply is not None:
            require_u128(self.required_supply, "required_supply")
            if self.required_supply == 0:
                raise ValueError("required_supply must be positive")


DEFAULT_DISTRIBUTION_POLICY = DistributionPolicy()

# Same split, any non-zero supply accepted.
LENIENT_DISTRIBUTION_POLICY = DistributionPolicy(required_supply=None)


@dataclass(frozen=True, slots=True)
class Allocation:
    """Amounts produced by the initial split."""
    team_immediate: int
    pool_immediate: int
    pool_locked: int
    owner_locked: int

    @property
    def total(self) -> int:
        return self.team_immediate + self.pool_immediate + self.pool_locked + self.owner_locked

    @property
    def immediate(self) -> int:
        return self.team_immediate + self.pool_immediate

    @property
    def locked(self) -> int:
        return self.pool_locked + self.owner_locked


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def calculate_allocation(initial_supply: int, policy: DistributionPolicy) -> Allocation:
    """Split initial_supply according to policy. The result sums to initial_supply."""
    team = multiply_ratio(initial_supply, *policy.team_ratio)
    pool_bucket = multiply_ratio(initial_supply, *policy.pool_ratio)
    owner_bucket = u128_sub(u128_sub(initial_supply, team), pool_bucket)

    pool_immediate = multiply_ratio(pool_bucket, *policy.pool_upfront_ratio)
    pool_locked = u128_sub(pool_bucket, pool_immediate)

    return Allocation(
        team_immediate=team,
        pool_immediate=pool_immediate,
        pool_locked=pool_locked,
        owner_locked=owner_bucket,
    )


def validate_creation(
    name: str,
    symbol: str,
    decimals: int,
    initial_supply: int,
    creator: str,
    team_address: str,
    pool_address: str,
    metadata_url: str,
    policy: DistributionPolicy,
) -> None:
    """
    Check creation parameters in a fixed order.

    Raises:
        InvalidDecimals, InvalidTokenInfo, InvalidInitialSupply,
        DuplicateAddresses, InvalidMetadataUrl
    """
    if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= policy.max_decimals:
        raise InvalidDecimals(f"Invalid decimals: {decimals} (max {policy.max_decimals})")
    if not name or not name.strip() or not symbol or not symbol.strip():
        raise InvalidTokenInfo("Invalid token info: name and symbol cannot be empty")

    if isinstance(initial_supply, bool) or not isinstance(initial_supply, int):
        raise InvalidInitialSupply(f"Invalid initial supply: {initial_supply!r}")
    if initial_supply <= 0:
        raise InvalidInitialSupply("Invalid initial supply: must be positive")
    try:
        require_u128(initial_supply, "initial_supply")
    except ValueError as e:
        raise InvalidInitialSupply(f"Invalid initial supply: {e}") from e
    if policy.required_supply is not None and initial_supply != policy.required_supply:
        raise InvalidInitialSupply(
            f"Invalid initial supply: {initial_supply} (required {policy.required_supply})"
        )

    targets = (creator, team_address, pool_address)
    if len(set(targets)) != len(targets):
        raise DuplicateAddresses(
            f"Duplicate addresses: creator={creator}, team={team_address}, pool={pool_address}"
        )

    validate_metadata_url(metadata_url)


# ============================================================================
# APPLY
# ============================================================================

def distribute(
    store: KeyValueStore,
    *,
    name: str,
    symbol: str,
    decimals: int,
    initial_supply: int,
    creator: str,
    team_address: str,
    pool_address: str,
    metadata_url: str,
    start_time: datetime,
    policy: DistributionPolicy = DEFAULT_DISTRIBUTION_POLICY,
) -> Allocation:
    """
    Validate, create the token and perform the initial distribution.

    Writes TokenInfo (owner = creator), the metadata URL, the two immediate
    balances and both release schedules. Validation completes before the
    first write.

    Returns:
        The Allocation that was applied.
    """
    validate_creation(
        name, symbol, decimals, initial_supply,
        creator, team_address, pool_address, metadata_url, policy,
    )
    allocation = calculate_allocation(initial_supply, policy)

    save_token_info(store, TokenInfo(
        name=name,
        symbol=symbol,
        decimals=decimals,
        total_supply=initial_supply,
        owner=creator,
    ))
    save_metadata_url(store, metadata_url)

    credit(store, team_address, allocation.team_immediate)
    credit(store, pool_address, allocation.pool_immediate)

    save_schedule(
        store, ScheduleKind.VESTING, creator,
        build_schedule(allocation.owner_locked, start_time, policy.owner_release),
    )
    save_schedule(
        store, ScheduleKind.POOL_RELEASE, pool_address,
        build_schedule(allocation.pool_locked, start_time, policy.pool_release),
    )
    return allocation
