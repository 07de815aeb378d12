"""Accumulated ILP fees per (pair, token)."""

from __future__ import annotations

from dataclasses import dataclass, field

from kdex.models.types import normalize_address
from kdex.safe_int import S


@dataclass
class FeeLedger:
    """Running fee totals keyed by (pair, token).

    Entries are created on first deposit and never removed; a rebalance only
    sets them back to zero.
    """

    entries: dict[tuple[str, str], int] = field(default_factory=dict)

    def credit(self, pair: str, token: str, amount: int) -> int:
        """Add amount to an entry and return the new total."""
        key = (normalize_address(pair), normalize_address(token))
        total = (S(self.entries.get(key, 0)) + amount).to_uint(256)
        self.entries[key] = total
        return total

    def amount(self, pair: str, token: str) -> int:
        return self.entries.get((normalize_address(pair), normalize_address(token)), 0)

    def pair_fees(self, pair: str, token0: str, token1: str) -> tuple[int, int]:
        return self.amount(pair, token0), self.amount(pair, token1)

    def reset(self, pair: str, *tokens: str) -> None:
        for token in tokens:
            self.entries[(normalize_address(pair), normalize_address(token))] = 0
