"""
balances.py - Balance Ledger

Credit/debit primitives over the balance map, plus the two user-facing
operations built on them:

    credit(store, address, amount)
    debit(store, address, amount)
    transfer(store, sender, recipient, amount)
    burn(store, sender, amount)

INVARIANT: sum of all balances + sum of locked amounts == TokenInfo.total_supply.

credit and debit on their own move the sum; callers keep the invariant by
pairing them (transfer), by pairing a debit with a supply decrease (burn), or
by crediting amounts that were already counted in total_supply (distribution
and releases of locked amounts).
"""

from __future__ import annotations
from dataclasses import replace
from typing import Iterator, Tuple

from .core import (
    TokenInfo,
    InsufficientBalance, InvalidAmount,
    require_u128, u128_add, u128_sub,
)
from .state import (
    load_balance, save_balance, scan_balances,
    load_token_info, save_token_info,
)
from .store import KeyValueStore


def get_balance(store: KeyValueStore, address: str) -> int:
    """Return the spendable balance of address (0 if it never held tokens)."""
    return load_balance(store, address)


def iter_balances(store: KeyValueStore) -> Iterator[Tuple[str, int]]:
    """Iterate over every (address, balance) entry in address order."""
    return scan_balances(store)


def credit(store: KeyValueStore, address: str, amount: int) -> int:
    """
    Add amount to address's balance.

    Returns:
        The new balance.

    Raises:
        Overflow: If the new balance would exceed u128.
    """
    require_u128(amount)
    new_balance = u128_add(load_balance(store, address), amount)
    save_balance(store, address, new_balance)
    return new_balance


def debit(store: KeyValueStore, address: str, amount: int) -> int:
    """
    Subtract amount from address's balance.

    Returns:
        The new balance.

    Raises:
        InsufficientBalance: If the balance is smaller than amount.
    """
    require_u128(amount)
    available = load_balance(store, address)
    if available < amount:
        raise InsufficientBalance(required=amount, available=available)
    new_balance = available - amount
    save_balance(store, address, new_balance)
    return new_balance


def _require_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"Invalid amount: expected int, got {type(amount).__name__}")
    try:
        require_u128(amount)
    except ValueError as e:
        raise InvalidAmount(f"Invalid amount: {e}") from e


def transfer(store: KeyValueStore, sender: str, recipient: str, amount: int) -> None:
    """
    Move amount from sender to recipient.

    The debit happens first. If it fails nothing has been written. A transfer
    to oneself is a net no-op but still requires a sufficient balance. A zero
    amount is accepted and moves nothing.

    Raises:
        InvalidAmount: If amount is not a u128.
        InsufficientBalance: If sender holds less than amount.
    """
    _require_amount(amount)
    debit(store, sender, amount)
    credit(store, recipient, amount)


def burn(store: KeyValueStore, sender: str, amount: int) -> TokenInfo:
    """
    Destroy amount from sender's balance and reduce total supply.

    A zero amount is accepted and leaves the supply unchanged.

    Returns:
        The updated TokenInfo.

    Raises:
        InvalidAmount: If amount is not a u128.
        InsufficientBalance: If sender holds less than amount.
        Overflow: If total_supply is smaller than amount. With the supply
            invariant intact this cannot happen; it is still checked.
    """
    _require_amount(amount)
    debit(store, sender, amount)
    info = load_token_info(store)
    updated = replace(info, total_supply=u128_sub(info.total_supply, amount))
    save_token_info(store, updated)
    return updated
