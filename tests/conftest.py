"""
conftest.py - Shared pytest fixtures for token ledger tests

Provides common fixtures used across unit, conformance and functional tests:
- Empty contracts (default and lenient policy)
- Instantiated contracts with the standard 1,000,000,000 distribution
- Helpers for building messages and environments
"""

import pytest
from datetime import datetime
from typing import Dict

from token_ledger import (
    TokenContract, Env, MessageInfo, InstantiateMsg,
    iter_balances,
    LENIENT_DISTRIBUTION_POLICY,
)


# =============================================================================
# CONSTANTS
# =============================================================================

T0 = datetime(2025, 1, 1)

CREATOR = "creator"
TEAM = "team"
POOL = "pool"

SUPPLY = 1_000_000_000
TEAM_AMOUNT = 200_000_000
POOL_IMMEDIATE = 400_000_000
POOL_LOCKED = 100_000_000
OWNER_LOCKED = 300_000_000

METADATA_URL = "https://example.com/token.json"


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def env(time: datetime = T0) -> Env:
    return Env(time=time)


def sender(address: str) -> MessageInfo:
    return MessageInfo(sender=address)


def make_msg(**overrides) -> InstantiateMsg:
    """Standard InstantiateMsg with optional field overrides."""
    fields = dict(
        name="Seint",
        symbol="SEINT",
        decimals=6,
        initial_supply=SUPPLY,
        team_address=TEAM,
        pool_address=POOL,
        metadata_url=METADATA_URL,
    )
    fields.update(overrides)
    return InstantiateMsg(**fields)


def new_token(initial_supply: int = SUPPLY, start: datetime = T0, **kwargs) -> TokenContract:
    """Create and instantiate a contract. Non-default supplies use the lenient policy."""
    if initial_supply != SUPPLY:
        kwargs.setdefault('policy', LENIENT_DISTRIBUTION_POLICY)
    contract = TokenContract(verbose=False, **kwargs)
    contract.instantiate(env(start), sender(CREATOR), make_msg(initial_supply=initial_supply))
    return contract


def all_balances(contract: TokenContract) -> Dict[str, int]:
    """Snapshot of every balance entry."""
    return dict(iter_balances(contract.store))


def assert_supply_invariant(contract: TokenContract) -> None:
    result = contract.verify_invariants()
    assert result['valid'], result['discrepancies']


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def contract():
    """Empty, not yet instantiated contract (default policy)."""
    return TokenContract(verbose=False)


@pytest.fixture
def lenient_contract():
    """Empty contract that accepts any non-zero initial supply."""
    return TokenContract(verbose=False, policy=LENIENT_DISTRIBUTION_POLICY)


@pytest.fixture
def token():
    """Contract instantiated at T0 with the standard supply."""
    return new_token()

