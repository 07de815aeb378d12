"""In-process execution environment for the pair and ILP manager contracts.

The chain owns everything the contracts share: block time, the table of
deployed contracts (which doubles as the code-presence check), and the event
log. It also provides call atomicity. Each external contract call runs inside
`Chain.atomic()`, which snapshots the state of every deployed contract and
the log on entry and restores them if the call raises, at every nesting
level, so a failed call leaves no trace.
"""

from __future__ import annotations

import copy
import hashlib
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

import structlog

from kdex.models.events import Event
from kdex.models.types import normalize_address

if TYPE_CHECKING:
    from kdex.chain.contract import Contract

logger = structlog.get_logger()

C = TypeVar("C", bound="Contract")

# Default genesis time (2023-11-14T22:13:20Z)
GENESIS_TIMESTAMP = 1_700_000_000


@dataclass(frozen=True)
class Context:
    """Caller identity for a contract call (msg.sender)."""

    sender: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "sender", normalize_address(self.sender))


class Chain:
    """Deployed contracts, block time, and the event log."""

    def __init__(self, timestamp: int = GENESIS_TIMESTAMP) -> None:
        self.timestamp = timestamp
        self._contracts: dict[str, Contract] = {}
        self._logs: list[Event] = []
        self._depth = 0

    # --- Time ---

    def advance_time(self, seconds: int) -> int:
        """Move block time forward and return the new timestamp."""
        if seconds < 0:
            raise ValueError(f"Cannot move time backwards by {seconds}s")
        self.timestamp += seconds
        return self.timestamp

    def set_timestamp(self, timestamp: int) -> None:
        if timestamp < self.timestamp:
            raise ValueError(f"Timestamp {timestamp} is before current time {self.timestamp}")
        self.timestamp = timestamp

    # --- Contracts ---

    def register(self, contract: Contract) -> None:
        """Deploy a contract at its address."""
        if contract.address in self._contracts:
            raise ValueError(f"Address already has code: {contract.address}")
        self._contracts[contract.address] = contract
        logger.debug(
            "contract_deployed",
            kind=type(contract).__name__,
            address=contract.address[-8:],
        )

    def has_code(self, address: str) -> bool:
        return normalize_address(address) in self._contracts

    def contract_at(self, address: str) -> Contract | None:
        return self._contracts.get(normalize_address(address))

    def get(self, address: str, kind: type[C]) -> C:
        """Look up a deployed contract and check its type.

        Raises:
            LookupError: If nothing of that type is deployed at address
        """
        contract = self.contract_at(address)
        if not isinstance(contract, kind):
            raise LookupError(f"No {kind.__name__} deployed at {address}")
        return contract

    def derive_address(self, *parts: str) -> str:
        """Deterministic 20-byte address from a list of seed strings."""
        digest = hashlib.sha256("|".join(normalize_address(p) for p in parts).encode()).hexdigest()
        return "0x" + digest[-40:]

    # --- Events ---

    def emit(self, event: Event) -> None:
        self._logs.append(event)

    def events(self, kind: type[Event] | None = None, emitter: str | None = None) -> list[Event]:
        """Return logged events, optionally filtered by type and emitter."""
        emitter_norm = normalize_address(emitter) if emitter is not None else None
        return [
            e
            for e in self._logs
            if (kind is None or isinstance(e, kind))
            and (emitter_norm is None or e.emitter == emitter_norm)
        ]

    # --- Atomicity ---

    @property
    def in_call(self) -> bool:
        """True while an external call is executing."""
        return self._depth > 0

    @contextmanager
    def atomic(self, label: str) -> Iterator[None]:
        """Run a block as a single all-or-nothing unit of work.

        On any exception, contract state, deployments made inside the block,
        and events emitted inside it are rolled back before re-raising.
        """
        contracts = dict(self._contracts)
        states = {address: copy.deepcopy(c.state) for address, c in contracts.items()}
        log_length = len(self._logs)
        self._depth += 1
        try:
            yield
        except Exception as exc:
            self._contracts = contracts
            for address, contract in contracts.items():
                contract.state = states[address]
            del self._logs[log_length:]
            logger.debug(
                "call_reverted",
                call=label,
                depth=self._depth,
                reason=str(exc),
                error=type(exc).__name__,
            )
            raise
        finally:
            self._depth -= 1
