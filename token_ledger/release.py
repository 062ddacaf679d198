"""
release.py - Release Schedule Engine

One generic time-gated unlock state machine, used for both bucket kinds
(ScheduleKind.VESTING and ScheduleKind.POOL_RELEASE). Only the policy
constants differ between the two.

ARCHITECTURE (Pure Function Pattern):
=====================================

1. FROZEN DATACLASSES (explicit inputs):
   - ReleasePolicy: offset/weight table, fixed per deployment
   - ReleaseSchedule (core.py): immutable schedule snapshot
   - ReleaseOutcome: result of one release step

2. PURE CALCULATION FUNCTIONS:
   - build_schedule(locked_amount, start_time, policy) -> ReleaseSchedule
   - calculate_release(schedule, now) -> ReleaseOutcome

3. ADAPTER FUNCTIONS (touch the store):
   - get_schedule(store, kind, holder)
   - process_release(store, kind, holder, now)

Release algorithm:
    baseline = last_processed_time or start_time
    for entry in entries (ascending):
        if baseline < entry.unlock_time <= now:
            released += entry.amount
            baseline = entry.unlock_time
    entries    -> only those with unlock_time > now
    locked     -> locked - released
    last_processed_time -> baseline

Because baseline only moves forward and is persisted, every entry is applied
at most once no matter how irregularly release is called. A second call with
the same (or an earlier) now releases zero.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Tuple

from .core import (
    ReleaseEntry, ReleaseSchedule,
    NotFound, InvariantViolation,
    multiply_ratio, require_u128, u128_add, u128_sub,
)
from .balances import credit
from .state import ScheduleKind, load_schedule, save_schedule
from .store import KeyValueStore


ONE_YEAR = timedelta(days=365)
SIX_MONTHS = ONE_YEAR / 2


# ============================================================================
# POLICY
# ============================================================================

@dataclass(frozen=True, slots=True)
class ReleasePolicy:
    """
    Offset table for a release schedule.

    Each step is (offset from start_time, weight). An entry receives
    locked_amount * weight / total_weight, truncated; the last entry takes
    whatever rounding left over so the entries sum exactly to locked_amount.

    Attributes:
        steps: ((offset, weight), ...) with strictly increasing positive offsets
               and positive integer weights.
    """
    steps: Tuple[Tuple[timedelta, int], ...]

    def __post_init__(self):
        if not isinstance(self.steps, tuple):
            object.__setattr__(self, 'steps', tuple(tuple(s) for s in self.steps))
        if not self.steps:
            raise ValueError("ReleasePolicy needs at least one step")
        previous = timedelta(0)
        for offset, weight in self.steps:
            if offset <= previous:
                raise ValueError(
                    f"ReleasePolicy offsets must be positive and strictly increasing: {offset}"
                )
            if isinstance(weight, bool) or not isinstance(weight, int) or weight <= 0:
                raise ValueError(f"ReleasePolicy weights must be positive ints, got {weight!r}")
            previous = offset

    @property
    def total_weight(self) -> int:
        return sum(weight for _, weight in self.steps)


# Owner bucket: one third at each of +1y, +2y, +3y (10% of a 1e9 supply each).
OWNER_VESTING_POLICY = ReleasePolicy(steps=(
    (ONE_YEAR, 1),
    (2 * ONE_YEAR, 1),
    (3 * ONE_YEAR, 1),
))

# Locked pool remainder: 50% at +6mo, 25% at +12mo, 25% at +18mo.
POOL_RELEASE_POLICY = ReleasePolicy(steps=(
    (SIX_MONTHS, 50),
    (2 * SIX_MONTHS, 25),
    (3 * SIX_MONTHS, 25),
))


# ============================================================================
# RESULT TYPE
# ============================================================================

@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    """
    Result of one release step.

    Attributes:
        released: Amount newly unlocked (0 means nothing was due).
        schedule: Schedule after the step (the same object if nothing changed).
        released_entries: Entries applied by this step, ascending.
    """
    released: int
    schedule: ReleaseSchedule
    released_entries: Tuple[ReleaseEntry, ...] = ()


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def build_schedule(
    locked_amount: int,
    start_time: datetime,
    policy: ReleasePolicy,
) -> ReleaseSchedule:
    """
    Build a fresh schedule that splits locked_amount across the policy steps.

    Entries that would receive zero (tiny locked amounts) are dropped, so
    every remaining entry has a positive amount. A zero locked_amount yields
    an already exhausted schedule.
    """
    require_u128(locked_amount, "locked_amount")
    total_weight = policy.total_weight
    entries = []
    allocated = 0
    last_index = len(policy.steps) - 1
    for i, (offset, weight) in enumerate(policy.steps):
        if i == last_index:
            amount = locked_amount - allocated
        else:
            amount = multiply_ratio(locked_amount, weight, total_weight)
            allocated += amount
        if amount > 0:
            entries.append(ReleaseEntry(unlock_time=start_time + offset, amount=amount))
    return ReleaseSchedule(
        locked_amount=locked_amount,
        start_time=start_time,
        entries=tuple(entries),
    )


def calculate_release(schedule: ReleaseSchedule, now: datetime) -> ReleaseOutcome:
    """
    Compute what a release at logical time now unlocks.

    Entries with unlock_time == now are included. Entries after now stay.

    Raises:
        InvariantViolation: If a due entry lies at or before the baseline,
            i.e. it would be removed without being released.
        Overflow: If locked_amount would underflow.
    """
    baseline = schedule.baseline
    released = 0
    applied = []
    for entry in schedule.entries:
        if entry.unlock_time > now:
            break
        if entry.unlock_time > baseline:
            released = u128_add(released, entry.amount)
            baseline = entry.unlock_time
            applied.append(entry)

    remaining = tuple(e for e in schedule.entries if e.unlock_time > now)
    removed = len(schedule.entries) - len(remaining)
    if removed != len(applied):
        raise InvariantViolation(
            f"{removed - len(applied)} due entries lie at or before "
            f"baseline {schedule.baseline.isoformat()}"
        )

    if not applied:
        return ReleaseOutcome(released=0, schedule=schedule)

    updated = ReleaseSchedule(
        locked_amount=u128_sub(schedule.locked_amount, released),
        start_time=schedule.start_time,
        entries=remaining,
        last_processed_time=baseline,
    )
    return ReleaseOutcome(released=released, schedule=updated, released_entries=tuple(applied))


# ============================================================================
# ADAPTERS
# ============================================================================

def get_schedule(store: KeyValueStore, kind: ScheduleKind, holder: str) -> ReleaseSchedule:
    """
    Load the holder's schedule of the given kind.

    Raises:
        NotFound: If the holder has no schedule of this kind.
    """
    schedule = load_schedule(store, kind, holder)
    if schedule is None:
        raise NotFound(f"No {kind.value} schedule for {holder}")
    return schedule


def process_release(
    store: KeyValueStore,
    kind: ScheduleKind,
    holder: str,
    now: datetime,
) -> ReleaseOutcome:
    """
    Release everything due for holder at time now and credit it.

    Steps: load schedule, calculate_release(), persist the updated schedule,
    credit the released amount to the holder's spendable balance. When nothing
    is due the store is left untouched.

    Raises:
        NotFound: If the holder has no schedule of this kind.
    """
    schedule = get_schedule(store, kind, holder)
    outcome = calculate_release(schedule, now)
    if outcome.released:
        save_schedule(store, kind, holder, outcome.schedule)
        credit(store, holder, outcome.released)
    return outcome
