"""Engine error classes.

Every failure aborts the current call: the chain rolls back all state
touched since the call began and re-raises. Each error carries the short
reason string the on-chain contracts revert with.
"""


class KdexError(Exception):
    """Base error for engine operations."""

    reason = "KDEX: FAILED"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason)


# --- Pair ---


class InsufficientLiquidity(KdexError):
    """Requested output exceeds the reserve."""

    reason = "UniswapV2: INSUFFICIENT_LIQUIDITY"


class InsufficientLiquidityMinted(InsufficientLiquidity):
    """Deposit would mint zero shares."""

    reason = "UniswapV2: INSUFFICIENT_LIQUIDITY_MINTED"


class InsufficientLiquidityBurned(InsufficientLiquidity):
    """Burn would return zero of either token."""

    reason = "UniswapV2: INSUFFICIENT_LIQUIDITY_BURNED"


class InsufficientInputAmount(KdexError):
    reason = "UniswapV2: INSUFFICIENT_INPUT_AMOUNT"


class InsufficientOutputAmount(KdexError):
    reason = "UniswapV2: INSUFFICIENT_OUTPUT_AMOUNT"


class KInvariantViolation(KdexError):
    """Fee-adjusted post-swap balances fail the constant-product check."""

    reason = "UniswapV2: K"


class InvalidTo(KdexError):
    """Swap output directed at one of the pair's own tokens."""

    reason = "UniswapV2: INVALID_TO"


class Overflow(KdexError):
    """Balance does not fit in a uint112 reserve slot."""

    reason = "UniswapV2: OVERFLOW"


class Locked(KdexError):
    """Re-entrant call into a locked pair."""

    reason = "UniswapV2: LOCKED"


class Forbidden(KdexError):
    """Caller lacks the required role."""

    reason = "UniswapV2: FORBIDDEN"


class InvalidFeeRate(KdexError):
    reason = "UniswapV2: INVALID_FEE_RATE"


# --- Registry ---


class IdenticalAddresses(KdexError):
    reason = "UniswapV2: IDENTICAL_ADDRESSES"


class ZeroAddress(KdexError):
    reason = "UniswapV2: ZERO_ADDRESS"


class PairExists(KdexError):
    reason = "UniswapV2: PAIR_EXISTS"


class PairNotFound(KdexError):
    """Address is not a pair known to the registry."""

    reason = "KDEX: PAIR_NOT_FOUND"


# --- ILP manager ---


class SenderNotPair(KdexError):
    """Fee deposit from an address that is not a registered pair."""

    reason = "ILPManager: SENDER_NOT_PAIR"


class TreasuryNotSet(KdexError):
    """Distribution attempted with no treasury configured."""

    reason = "ILPManager: TREASURY_NOT_SET"


class InvalidPerformData(KdexError):
    """perform_data does not decode to a single address."""

    reason = "ILPManager: INVALID_PERFORM_DATA"


# --- Token ---


class TokenError(KdexError):
    """Base error for token transfers."""

    reason = "ERC20: FAILED"


class InsufficientBalance(TokenError):
    reason = "ERC20: INSUFFICIENT_BALANCE"


class InsufficientAllowance(TokenError):
    reason = "ERC20: INSUFFICIENT_ALLOWANCE"
