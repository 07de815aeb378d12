"""Reserve ledger of a pair: reserves, last sync time, cumulative prices."""

from __future__ import annotations

from dataclasses import dataclass

from kdex.errors import Overflow
from kdex.math.fixed_point import TIMESTAMP_BITS, UQ112x112, accumulate
from kdex.safe_int import S


@dataclass
class ReserveLedger:
    """Reserves as last synced, plus the TWAP accumulators.

    `block_timestamp_last` is stored modulo 2**32 and the elapsed time between
    updates is computed with the same wraparound, so a ledger keeps working
    past the year 2106.
    """

    reserve0: int = 0
    reserve1: int = 0
    block_timestamp_last: int = 0
    price0_cumulative_last: int = 0
    price1_cumulative_last: int = 0

    def get_reserves(self) -> tuple[int, int, int]:
        return self.reserve0, self.reserve1, self.block_timestamp_last

    def update(self, balance0: int, balance1: int, now: int) -> int:
        """Store new balances as reserves, advancing the price accumulators first.

        Args:
            balance0: Custodied balance of token0
            balance1: Custodied balance of token1
            now: Current block timestamp (any width; truncated to uint32)

        Returns:
            Seconds elapsed since the previous update (mod 2**32)

        Raises:
            Overflow: If either balance exceeds uint112
        """
        if not S(balance0).is_uint(112) or not S(balance1).is_uint(112):
            raise Overflow()

        block_timestamp = S(now).wrapping_add(0, TIMESTAMP_BITS).value
        elapsed = S(block_timestamp).wrapping_sub(self.block_timestamp_last, TIMESTAMP_BITS).value

        if elapsed > 0 and self.reserve0 != 0 and self.reserve1 != 0:
            self.price0_cumulative_last = accumulate(
                self.price0_cumulative_last,
                UQ112x112.from_ratio(self.reserve1, self.reserve0),
                elapsed,
            )
            self.price1_cumulative_last = accumulate(
                self.price1_cumulative_last,
                UQ112x112.from_ratio(self.reserve0, self.reserve1),
                elapsed,
            )

        self.reserve0 = balance0
        self.reserve1 = balance1
        self.block_timestamp_last = block_timestamp
        return elapsed

    @property
    def k(self) -> int:
        return self.reserve0 * self.reserve1
