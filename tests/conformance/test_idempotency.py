"""
Idempotency Conformance Tests

INVARIANT: Each schedule entry is credited at most once.

    ∀ schedule S, times t1 <= t2:
        release(S, t1); release(S, t1) ≡ release(S, t1)
        release(S, t2) after release(S, t1) credits only entries in (t1, t2]

The persisted baseline (last_processed_time) guarantees this no matter how
often or how irregularly releases are called.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from datetime import timedelta

from token_ledger import ONE_YEAR, SIX_MONTHS

from tests.conftest import (
    T0, CREATOR, POOL, OWNER_LOCKED, POOL_LOCKED, POOL_IMMEDIATE,
    env, sender, new_token,
)


class TestIdempotencyProperties:

    @given(st.integers(min_value=2, max_value=10), st.integers(min_value=0, max_value=1500))
    @settings(max_examples=50, deadline=None)
    def test_repeated_release_same_time(self, repeats, days):
        """PROPERTY: Repeating a release at the same time credits nothing more."""
        token = new_token()
        now = T0 + timedelta(days=days)
        token.release_vested(env(now), sender(CREATOR))
        after_first = token.store.snapshot()
        for _ in range(repeats - 1):
            response = token.release_vested(env(now), sender(CREATOR))
            assert response.attr("released") == "0"
        assert token.store.snapshot() == after_first

    @given(st.lists(st.integers(min_value=0, max_value=200), min_size=1, max_size=20))
    @settings(max_examples=50, deadline=None)
    def test_total_released_never_exceeds_locked(self, gaps):
        """PROPERTY: Cumulative pool releases never exceed the initially locked amount."""
        token = new_token()
        now = T0
        released = 0
        for gap in gaps:
            now = now + timedelta(days=gap)
            released += int(token.release_pool(env(now), sender(POOL)).attr("released"))
        assert released <= POOL_LOCKED
        assert token.balance(POOL) == POOL_IMMEDIATE + released


class TestIdempotencyExamples:

    def test_vesting_each_tranche_once(self):
        token = new_token()
        for year in (1, 1, 2, 2, 3, 3, 4):
            token.release_vested(env(T0 + year * ONE_YEAR), sender(CREATOR))
        assert token.balance(CREATOR) == OWNER_LOCKED

    def test_pool_second_release_same_time_is_zero(self):
        token = new_token()
        first = token.release_pool(env(T0 + SIX_MONTHS), sender(POOL))
        second = token.release_pool(env(T0 + SIX_MONTHS), sender(POOL))
        assert first.attr("released") == "50000000"
        assert second.attr("released") == "0"

    def test_exhausted_schedule_stays_queryable(self):
        token = new_token()
        token.release_pool(env(T0 + 4 * SIX_MONTHS), sender(POOL))
        response = token.release_pool(env(T0 + 10 * SIX_MONTHS), sender(POOL))
        assert response.attr("released") == "0"
        assert token.pool_release_info(POOL).is_exhausted
