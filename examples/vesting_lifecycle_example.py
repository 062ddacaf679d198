"""
Example: A token's first five years.

Creates a token with the standard 1,000,000,000 supply, trades and burns
some of it, then walks the clock forward through every unlock of the
owner vesting and pool release schedules. Each applied call prints its
trace; the supply check runs after every phase.
"""

from datetime import datetime

from token_ledger import (
    TokenContract, Env, MessageInfo, InstantiateMsg,
    InsufficientBalance, Unauthorized,
    ONE_YEAR, SIX_MONTHS,
)


def show_state(contract, addresses):
    info = contract.token_info()
    print()
    print(f"  total_supply: {info.total_supply:,}")
    for address in addresses:
        print(f"  {address:<10} {contract.balance(address):>15,}")
    vesting = contract.vesting_info("creator")
    pool = contract.pool_release_info("pool")
    print(f"  {'vesting':<10} {vesting.locked_amount:>15,} locked, next {vesting.next_unlock_time()}")
    print(f"  {'pool':<10} {pool.locked_amount:>15,} locked, next {pool.next_unlock_time()}")
    result = contract.verify_invariants()
    print(f"  supply check: {'OK' if result['valid'] else result['discrepancies']}")
    print()


def main():
    print("=" * 80)
    print("TOKEN LEDGER - Vesting and Pool Release Lifecycle")
    print("=" * 80)
    print()

    start = datetime(2025, 1, 1)
    contract = TokenContract(verbose=True)
    addresses = ["creator", "team", "pool", "alice", "bob"]

    print("Phase 1: Instantiate")
    print("-" * 80)
    contract.instantiate(Env(start), MessageInfo("creator"), InstantiateMsg(
        name="Seint",
        symbol="SEINT",
        decimals=6,
        initial_supply=1_000_000_000,
        team_address="team",
        pool_address="pool",
        metadata_url="https://example.com/seint.json",
    ))
    show_state(contract, addresses)

    print("Phase 2: Trading on day one")
    print("-" * 80)
    contract.transfer(Env(start), MessageInfo("team"), "alice", 5_000_000)
    contract.transfer(Env(start), MessageInfo("pool"), "bob", 10_000_000)
    contract.burn(Env(start), MessageInfo("bob"), 1_000_000)

    print("The creator's share is locked, so spending it fails:")
    try:
        contract.transfer(Env(start), MessageInfo("creator"), "alice", 1)
    except InsufficientBalance as e:
        print(f"  -> {e}")

    print("Only the owner may change the metadata URL:")
    try:
        contract.update_metadata(Env(start), MessageInfo("alice"), "https://evil.example/x.json")
    except Unauthorized as e:
        print(f"  -> {e}")
    contract.update_metadata(Env(start), MessageInfo("creator"), "https://example.com/seint-v2.json")
    show_state(contract, addresses)

    print("Phase 3: Walking the clock through every unlock")
    print("-" * 80)
    checkpoints = [
        ("+6 months", start + SIX_MONTHS),
        ("+1 year", start + ONE_YEAR),
        ("+18 months", start + 3 * SIX_MONTHS),
        ("+2 years", start + 2 * ONE_YEAR),
        ("+5 years", start + 5 * ONE_YEAR),
    ]
    for label, when in checkpoints:
        print(f"--- {label} ({when.date()}) ---")
        contract.release_pool(Env(when), MessageInfo("pool"))
        contract.release_vested(Env(when), MessageInfo("creator"))
        show_state(contract, addresses)

    print("Releasing again at the same time credits nothing:")
    response = contract.release_vested(Env(start + 5 * ONE_YEAR), MessageInfo("creator"))
    print(f"  -> released {response.attr('released')}")

    print()
    print("=" * 80)
    print(f"Calls applied: {len(contract.call_log)}")
    print(f"Metadata URL:  {contract.metadata()}")
    print(f"Contract:      {contract.contract_version()}")
    print("=" * 80)


if __name__ == "__main__":
    main()
