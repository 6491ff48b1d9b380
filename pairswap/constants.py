"""Protocol constants for the pairswap exchange core.

Centralizes integer bounds, fee parameters and well-known addresses.
"""

from pairswap.models.types import is_valid_address

# Integer widths used by the pair state
UINT112_MAX = 2**112 - 1
UINT256_MAX = 2**256 - 1

# Block timestamps are stored modulo 2**32
TIMESTAMP_MODULUS = 2**32

# Shares permanently locked on the first deposit into a pair
MINIMUM_LIQUIDITY = 10**3

# Swap fee of 0.3%: inputs are scaled by 997/1000 before the product check
FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000
FEE_TAKEN = FEE_DENOMINATOR - FEE_NUMERATOR  # = 3

# Protocol fee is 1/6 of fee growth: denominator multiplier for sqrt(k)
PROTOCOL_FEE_DIVISOR = 5

# All traded assets use 18 decimals, pairs never renormalize
DECIMALS = 18
ONE = 10**DECIMALS


def _validate_address(name: str, address: str) -> str:
    """Validate and return a well-known address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# The null identity. Also receives the permanently locked MINIMUM_LIQUIDITY.
ZERO_ADDRESS = _validate_address("ZERO_ADDRESS", "0x" + "00" * 20)

# Default namespace salt for deterministic pair addresses (keccak256 of the
# pair creation code in the original deployment)
DEFAULT_INIT_CODE_HASH = "0x96e8ac4277198ff8b6f785478aa9a39f403cb768dd02cbee326c3e7da348845f"
