"""Pairswap error classes.

Every failure aborts the whole call: the execution host restores all pair,
factory and token state to what it was before the call, so no partial
reserve, share or balance mutation is ever observable. The class hierarchy
only tells callers *why* a call was rejected.
"""


class PairswapError(Exception):
    """Base error for exchange operations."""

    pass


# =============================================================================
# Caller errors, rejected before any state mutation
# =============================================================================


class PreconditionViolation(PairswapError):
    """The caller supplied arguments that can never succeed."""

    pass


class InvalidAsset(PreconditionViolation):
    """An asset identity is not a well-formed 20-byte address."""

    pass


class IdenticalAssets(PreconditionViolation):
    """Both sides of a pair are the same asset."""

    pass


class ZeroAsset(PreconditionViolation):
    """An asset identity is the null address."""

    pass


class PairExists(PreconditionViolation):
    """A pair already exists for this unordered asset pair."""

    pass


class InsufficientAmount(PreconditionViolation):
    """A quoted amount is zero."""

    pass


class InsufficientInputAmount(PreconditionViolation):
    """A swap input is zero (quote) or no input was received (swap)."""

    pass


class InvalidPath(PreconditionViolation):
    """A swap path has fewer than two assets."""

    pass


class InvalidRecipient(PreconditionViolation):
    """Swap output would be sent to one of the pair's own assets."""

    pass


class Expired(PreconditionViolation):
    """The current block timestamp is past the caller's deadline."""

    pass


class Forbidden(PreconditionViolation):
    """The sender is not allowed to perform this operation."""

    pass


# =============================================================================
# Invariant failures
# =============================================================================


class InvariantViolation(PairswapError):
    """The fee-adjusted constant product would decrease."""

    pass


class K(InvariantViolation):
    """Post-trade balances, net of the 0.3% fee, fall below reserve0 * reserve1."""

    pass


# =============================================================================
# Economically invalid trades and deposits
# =============================================================================


class LiquidityBoundsViolation(PairswapError):
    """The trade or deposit is not valid given current reserves."""

    pass


class InsufficientLiquidity(LiquidityBoundsViolation):
    """A reserve is zero, or a requested output is not below its reserve."""

    pass


class InsufficientInitialLiquidity(LiquidityBoundsViolation):
    """The first deposit does not exceed MINIMUM_LIQUIDITY shares."""

    pass


class InsufficientLiquidityMinted(LiquidityBoundsViolation):
    """A deposit would mint zero shares."""

    pass


class InsufficientLiquidityBurned(LiquidityBoundsViolation):
    """A withdrawal would return zero of either asset."""

    pass


class InsufficientOutputAmount(LiquidityBoundsViolation):
    """A swap requests no output, or delivers less than the caller's floor."""

    pass


class ExcessiveInputAmount(LiquidityBoundsViolation):
    """An exact-output swap needs more input than the caller's ceiling."""

    pass


class InsufficientAAmount(LiquidityBoundsViolation):
    """Deposit or withdrawal of asset A is below the caller's floor."""

    pass


class InsufficientBAmount(LiquidityBoundsViolation):
    """Deposit or withdrawal of asset B is below the caller's floor."""

    pass


class Overflow(LiquidityBoundsViolation, ArithmeticError):
    """A balance does not fit in a uint112 reserve slot."""

    pass


# =============================================================================
# Reentrancy
# =============================================================================


class ReentrancyViolation(PairswapError):
    """A mutating entry point was re-entered on the same pair."""

    pass


class Locked(ReentrancyViolation):
    """The pair is already executing a mutating call."""

    pass


# =============================================================================
# Asset ledger errors
# =============================================================================


class TokenError(PairswapError):
    """Base error for fungible asset ledger operations."""

    pass


class InsufficientBalance(TokenError):
    """Transfer or burn exceeds the holder's balance."""

    pass


class InsufficientAllowance(TokenError):
    """transfer_from exceeds the spender's allowance."""

    pass


class TransferFailed(TokenError):
    """An asset reported a failed transfer."""

    pass


# =============================================================================
# Execution host errors
# =============================================================================


class ChainError(PairswapError):
    """Base error for the execution host."""

    pass


class AddressCollision(ChainError):
    """A contract is already deployed at this address."""

    pass


class UnknownContract(ChainError):
    """No contract is deployed at this address."""

    pass
