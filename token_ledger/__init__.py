"""
token_ledger - Fungible Token Ledger with Time-Gated Release Schedules

A deterministic single-asset ledger: balances, a fixed initial distribution,
owner vesting and pool gradual release.

Usage:
    from datetime import datetime
    from token_ledger import TokenContract, Env, MessageInfo, InstantiateMsg

    contract = TokenContract(verbose=False)
    start = Env(time=datetime(2025, 1, 1))
    contract.instantiate(start, MessageInfo("creator"), InstantiateMsg(
        name="Seint", symbol="SEINT", decimals=6,
        initial_supply=1_000_000_000,
        team_address="team", pool_address="pool",
        metadata_url="https://example.com/seint.json",
    ))

    # Team share is spendable immediately
    contract.transfer(start, MessageInfo("team"), "alice", 100)

    # One year later the first owner tranche unlocks
    later = Env(time=datetime(2026, 1, 1))
    contract.release_vested(later, MessageInfo("creator"))
"""

# Core types
from .core import (
    TokenInfo,
    ReleaseEntry,
    ReleaseSchedule,
    ContractVersion,
    LedgerError,
    InvalidDecimals,
    InvalidInitialSupply,
    InvalidTokenInfo,
    DuplicateAddresses,
    InvalidMetadataUrl,
    InvalidAddress,
    InvalidAmount,
    AlreadyInstantiated,
    Unauthorized,
    NotFound,
    Overflow,
    InvariantViolation,
    InsufficientBalance,
    U128_MAX,
    MAX_DECIMALS,
    CONTRACT_NAME,
    CONTRACT_VERSION,
    u128_add,
    u128_sub,
    multiply_ratio,
)

# Store
from .store import (
    KeyValueStore,
    MemoryStore,
    StoreOverlay,
    encode_record,
    decode_record,
)

from .state import ScheduleKind

# Balance ledger
from .balances import (
    get_balance,
    iter_balances,
    credit,
    debit,
    transfer,
    burn,
)

# Release schedules
from .release import (
    ReleasePolicy,
    ReleaseOutcome,
    OWNER_VESTING_POLICY,
    POOL_RELEASE_POLICY,
    ONE_YEAR,
    SIX_MONTHS,
    build_schedule,
    calculate_release,
    get_schedule,
    process_release,
)

# Distribution
from .distribution import (
    DistributionPolicy,
    Allocation,
    DEFAULT_DISTRIBUTION_POLICY,
    LENIENT_DISTRIBUTION_POLICY,
    REQUIRED_INITIAL_SUPPLY,
    calculate_allocation,
    validate_creation,
    distribute,
)

# Metadata
from .metadata import (
    validate_metadata_url,
    get_metadata,
    update_metadata,
)

# Contract
from .contract import (
    TokenContract,
    Env,
    MessageInfo,
    InstantiateMsg,
    Response,
    AddressValidator,
    default_address_validator,
)

__all__ = [
    # Core
    'TokenInfo', 'ReleaseEntry', 'ReleaseSchedule', 'ContractVersion',
    'LedgerError', 'InvalidDecimals', 'InvalidInitialSupply', 'InvalidTokenInfo',
    'DuplicateAddresses', 'InvalidMetadataUrl', 'InvalidAddress', 'InvalidAmount',
    'AlreadyInstantiated', 'Unauthorized', 'NotFound', 'Overflow',
    'InvariantViolation', 'InsufficientBalance',
    'U128_MAX', 'MAX_DECIMALS', 'CONTRACT_NAME', 'CONTRACT_VERSION',
    'u128_add', 'u128_sub', 'multiply_ratio',
    # Store
    'KeyValueStore', 'MemoryStore', 'StoreOverlay', 'encode_record', 'decode_record',
    'ScheduleKind',
    # Balances
    'get_balance', 'iter_balances', 'credit', 'debit', 'transfer', 'burn',
    # Release
    'ReleasePolicy', 'ReleaseOutcome', 'OWNER_VESTING_POLICY', 'POOL_RELEASE_POLICY',
    'ONE_YEAR', 'SIX_MONTHS',
    'build_schedule', 'calculate_release', 'get_schedule', 'process_release',
    # Distribution
    'DistributionPolicy', 'Allocation', 'DEFAULT_DISTRIBUTION_POLICY',
    'LENIENT_DISTRIBUTION_POLICY', 'REQUIRED_INITIAL_SUPPLY',
    'calculate_allocation', 'validate_creation', 'distribute',
    # Metadata
    'validate_metadata_url', 'get_metadata', 'update_metadata',
    # Contract
    'TokenContract', 'Env', 'MessageInfo', 'InstantiateMsg', 'Response',
    'AddressValidator', 'default_address_validator',
]

__version__ = '0.1.0'
