"""
contract.py - Token Contract Entry Points

TokenContract is the stateful front of the package. It plays the host's part
for every call:

    - takes the caller (MessageInfo) and the logical time (Env) explicitly
    - runs the operation against a StoreOverlay over its store
    - commits the overlay on success, discards it on any failure
    - refuses calls whose logical time is earlier than the last accepted call

Execute operations return a Response whose attributes begin with
("method", <operation>). Queries read the committed store and never write.

Example:
    contract = TokenContract(verbose=False)
    env = Env(time=datetime(2025, 1, 1))
    contract.instantiate(env, MessageInfo("creator"), InstantiateMsg(
        name="Seint", symbol="SEINT", decimals=6,
        initial_supply=1_000_000_000,
        team_address="team", pool_address="pool",
        metadata_url="https://example.com/seint.json",
    ))
    contract.transfer(env, MessageInfo("team"), "alice", 100)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from .core import (
    TokenInfo, ReleaseSchedule, ContractVersion,
    CONTRACT_NAME, CONTRACT_VERSION,
    InvalidAddress, AlreadyInstantiated, InvariantViolation,
    require_naive,
)
from .balances import get_balance, iter_balances, transfer as transfer_balance, burn as burn_balance
from .distribution import DistributionPolicy, DEFAULT_DISTRIBUTION_POLICY, distribute
from .metadata import get_metadata, update_metadata as replace_metadata
from .release import get_schedule, process_release
from .state import (
    ScheduleKind,
    has_token_info, load_token_info,
    load_contract_version, save_contract_version,
    schedule_from_dict,
)
from .store import KeyValueStore, MemoryStore, StoreOverlay, decode_record


# Validates an address and returns its canonical form, or raises InvalidAddress.
AddressValidator = Callable[[str], str]


def default_address_validator(address: str) -> str:
    """Accept any non-empty string without surrounding whitespace."""
    if not isinstance(address, str) or not address or address != address.strip():
        raise InvalidAddress(f"Invalid address: {address!r}")
    return address


# ============================================================================
# CALL CONTEXT AND RESULTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class Env:
    """Host-supplied environment for one call. time is the logical clock."""
    time: datetime

    def __post_init__(self):
        require_naive(self.time, "Env time")


@dataclass(frozen=True, slots=True)
class MessageInfo:
    """Authenticated caller of one call."""
    sender: str

    def __post_init__(self):
        if not self.sender or not self.sender.strip():
            raise ValueError("MessageInfo sender cannot be empty")


@dataclass(frozen=True, slots=True)
class InstantiateMsg:
    """Creation parameters for the token."""
    name: str
    symbol: str
    decimals: int
    initial_supply: int
    team_address: str
    pool_address: str
    metadata_url: str


@dataclass(frozen=True, slots=True)
class Response:
    """
    Record of one applied execute call.

    Attributes:
        method: Operation name ("instantiate", "transfer", ...)
        sender: Caller address
        time: Logical time of the call
        sequence_number: Monotonic position among applied calls
        attributes: Ordered (key, value) facts, starting with ("method", method)
    """
    method: str
    sender: str
    time: datetime
    sequence_number: int
    attributes: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def attr(self, key: str) -> Optional[str]:
        """Return the first attribute value for key, or None."""
        for k, v in self.attributes:
            if k == key:
                return v
        return None

    def __repr__(self) -> str:
        w = 80
        bar = "─" * w

        def pad(text: str) -> str:
            if len(text) > w:
                return text[:w-3] + "..."
            return text + " " * (w - len(text))

        lines = [
            f"┌{bar}┐",
            f"│{pad(f' Call #{self.sequence_number}: {self.method}')}│",
            f"├{bar}┤",
            f"│{pad('   sender : ' + self.sender)}│",
            f"│{pad('   time   : ' + self.time.isoformat())}│",
        ]
        for key, value in self.attributes:
            if key == "method":
                continue
            lines.append(f"│{pad(f'   {key:<7}: {value}')}│")
        lines.append(f"└{bar}┘")
        return "\n".join(lines)


# ============================================================================
# CONTRACT
# ============================================================================

class TokenContract:
    """
    Fungible token with owner vesting and pool gradual release.

    Thread Safety:
        Not thread-safe. Calls must be serialized by the host.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        *,
        policy: DistributionPolicy = DEFAULT_DISTRIBUTION_POLICY,
        address_validator: Optional[AddressValidator] = None,
        verbose: bool = True,
    ):
        """
        Create a contract over a store.

        Args:
            store: Persistent state (default: a new MemoryStore)
            policy: Distribution and release constants used by instantiate
            address_validator: Host address check (default: non-empty, trimmed)
            verbose: Print a trace of every applied or rejected call
        """
        self.store: KeyValueStore = store if store is not None else MemoryStore()
        self.policy = policy
        self.address_validator = address_validator or default_address_validator
        self.verbose = verbose
        self.call_log: List[Response] = []
        self._last_time: Optional[datetime] = None

    # ========================================================================
    # EXECUTION
    # ========================================================================

    @property
    def last_time(self) -> Optional[datetime]:
        """Logical time of the most recent accepted call."""
        return self._last_time

    def _check_time(self, now: datetime) -> None:
        if self._last_time is not None and now < self._last_time:
            raise ValueError(
                f"Cannot move time backwards: {now} < {self._last_time}"
            )

    def _validate_address(self, address: str) -> str:
        return self.address_validator(address)

    def _run(
        self,
        method: str,
        env: Env,
        info: MessageInfo,
        handler: Callable[[KeyValueStore], List[Tuple[str, Any]]],
    ) -> Response:
        """
        Run handler atomically against a write buffer.

        The handler returns the response attributes. Any exception discards
        every buffered write and propagates unchanged.
        """
        self._check_time(env.time)
        overlay = StoreOverlay(self.store)
        try:
            facts = handler(overlay)
        except Exception as e:
            overlay.discard()
            if self.verbose:
                print(f"✗ REJECTED {method} from {info.sender}: {e}")
            raise
        overlay.commit()
        self._last_time = env.time

        response = Response(
            method=method,
            sender=info.sender,
            time=env.time,
            sequence_number=len(self.call_log),
            attributes=(("method", method),) + tuple((k, str(v)) for k, v in facts),
        )
        self.call_log.append(response)
        if self.verbose:
            print(repr(response))
        return response

    def instantiate(self, env: Env, info: MessageInfo, msg: InstantiateMsg) -> Response:
        """
        Create the token and distribute the initial supply.

        Raises:
            AlreadyInstantiated, InvalidAddress, InvalidDecimals, InvalidTokenInfo,
            InvalidInitialSupply, DuplicateAddresses, InvalidMetadataUrl
        """
        def handler(store: KeyValueStore):
            if has_token_info(store):
                raise AlreadyInstantiated("Token already instantiated")
            creator = self._validate_address(info.sender)
            team = self._validate_address(msg.team_address)
            pool = self._validate_address(msg.pool_address)
            allocation = distribute(
                store,
                name=msg.name,
                symbol=msg.symbol,
                decimals=msg.decimals,
                initial_supply=msg.initial_supply,
                creator=creator,
                team_address=team,
                pool_address=pool,
                metadata_url=msg.metadata_url,
                start_time=env.time,
                policy=self.policy,
            )
            save_contract_version(store, ContractVersion(CONTRACT_NAME, CONTRACT_VERSION))
            return [
                ("owner", creator),
                ("total_supply", msg.initial_supply),
                ("team_amount", allocation.team_immediate),
                ("pool_amount", allocation.pool_immediate),
                ("pool_locked", allocation.pool_locked),
                ("owner_locked", allocation.owner_locked),
            ]

        return self._run("instantiate", env, info, handler)

    def transfer(self, env: Env, info: MessageInfo, recipient: str, amount: int) -> Response:
        """
        Move amount from the caller to recipient.

        Raises:
            InvalidAddress, InvalidAmount, InsufficientBalance
        """
        def handler(store: KeyValueStore):
            to = self._validate_address(recipient)
            transfer_balance(store, info.sender, to, amount)
            return [("from", info.sender), ("to", to), ("amount", amount)]

        return self._run("transfer", env, info, handler)

    def burn(self, env: Env, info: MessageInfo, amount: int) -> Response:
        """
        Destroy amount from the caller's balance and reduce total supply.

        Raises:
            InvalidAmount, InsufficientBalance, Overflow
        """
        def handler(store: KeyValueStore):
            updated = burn_balance(store, info.sender, amount)
            return [("from", info.sender), ("amount", amount), ("total_supply", updated.total_supply)]

        return self._run("burn", env, info, handler)

    def _release(self, method: str, kind: ScheduleKind, env: Env, info: MessageInfo) -> Response:
        def handler(store: KeyValueStore):
            outcome = process_release(store, kind, info.sender, env.time)
            return [
                ("holder", info.sender),
                ("released", outcome.released),
                ("locked", outcome.schedule.locked_amount),
            ]

        return self._run(method, env, info, handler)

    def release_vested(self, env: Env, info: MessageInfo) -> Response:
        """
        Release the caller's vested amounts that are due at env.time.

        Raises:
            NotFound: If the caller has no vesting schedule.
        """
        return self._release("release_vested", ScheduleKind.VESTING, env, info)

    def release_pool(self, env: Env, info: MessageInfo) -> Response:
        """
        Release the caller's pool amounts that are due at env.time.

        Raises:
            NotFound: If the caller has no pool release schedule.
        """
        return self._release("release_pool", ScheduleKind.POOL_RELEASE, env, info)

    def update_metadata(self, env: Env, info: MessageInfo, metadata_url: str) -> Response:
        """
        Replace the metadata URL (owner only).

        Raises:
            Unauthorized, InvalidMetadataUrl
        """
        def handler(store: KeyValueStore):
            replace_metadata(store, info.sender, metadata_url)
            return [("metadata_url", metadata_url)]

        return self._run("update_metadata", env, info, handler)

    # ========================================================================
    # QUERIES (read-only)
    # ========================================================================

    def token_info(self) -> TokenInfo:
        return load_token_info(self.store)

    def balance(self, address: str) -> int:
        """Spendable balance of address; zero for addresses that never held tokens."""
        return get_balance(self.store, self._validate_address(address))

    def vesting_info(self, address: str) -> ReleaseSchedule:
        """
        Vesting schedule of address.

        Raises:
            NotFound: If address has no vesting schedule.
        """
        return get_schedule(self.store, ScheduleKind.VESTING, self._validate_address(address))

    def pool_release_info(self, address: str) -> ReleaseSchedule:
        """
        Pool release schedule of address.

        Raises:
            NotFound: If address has no pool release schedule.
        """
        return get_schedule(self.store, ScheduleKind.POOL_RELEASE, self._validate_address(address))

    def metadata(self) -> str:
        return get_metadata(self.store)

    def contract_version(self) -> ContractVersion:
        return load_contract_version(self.store)

    # ========================================================================
    # VERIFICATION
    # ========================================================================

    def verify_invariants(self) -> Dict[str, Any]:
        """
        Verify the supply and schedule invariants over the committed store.

        Locked amounts are counted in total_supply from creation on, so the
        supply check is:

            sum(balances) + sum(locked_amount over all schedules) == total_supply

        Every stored schedule is also rebuilt, which re-checks
        locked_amount == sum(entry amounts) and entry ordering.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every check passed
            - 'total_supply': int
            - 'balance_sum': int
            - 'locked_sum': int
            - 'discrepancies': List[Dict] - one entry per failed check
        """
        info = load_token_info(self.store)
        balance_sum = sum(amount for _, amount in iter_balances(self.store))
        locked_sum = 0
        discrepancies: List[Dict[str, Any]] = []

        for kind in ScheduleKind:
            for key, raw in self.store.scan(kind.prefix):
                try:
                    schedule = schedule_from_dict(decode_record(raw))
                except InvariantViolation as e:
                    discrepancies.append({'check': 'schedule', 'key': key, 'error': str(e)})
                    continue
                locked_sum += schedule.locked_amount

        if balance_sum + locked_sum != info.total_supply:
            discrepancies.append({
                'check': 'supply',
                'expected': info.total_supply,
                'actual': balance_sum + locked_sum,
                'difference': balance_sum + locked_sum - info.total_supply,
            })

        return {
            'valid': len(discrepancies) == 0,
            'total_supply': info.total_supply,
            'balance_sum': balance_sum,
            'locked_sum': locked_sum,
            'discrepancies': discrepancies,
        }
