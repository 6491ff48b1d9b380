"""Stateless arithmetic for pricing trades against constant-product pairs.

Formula: amount_out = (amount_in * 997 * reserve_out) / (reserve_in * 1000 + amount_in * 997)

The 997/1000 factor accounts for the 0.3% fee. Every rounding step favors
the pair: outputs round down, required inputs round up.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from eth_abi.packed import encode_packed
from eth_utils import keccak

from pairswap.constants import (
    DEFAULT_INIT_CODE_HASH,
    FEE_DENOMINATOR,
    FEE_NUMERATOR,
    ZERO_ADDRESS,
)
from pairswap.errors import (
    IdenticalAssets,
    InsufficientAmount,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    InvalidAsset,
    InvalidPath,
    ZeroAsset,
)
from pairswap.models.types import normalize_address
from pairswap.safe_int import S

if TYPE_CHECKING:
    from pairswap.pools.factory import Factory


def canonical_order(token_a: str, token_b: str) -> tuple[str, str]:
    """Return the pair in canonical order (ascending address).

    Addresses are compared as normalized lowercase hex of equal length,
    which orders them exactly like their 160-bit integer values.

    Raises:
        InvalidAsset: If either address is not 0x + 40 hex chars
        IdenticalAssets: If both addresses are the same asset
        ZeroAsset: If either address is the null address
    """
    a = _asset_address(token_a)
    b = _asset_address(token_b)
    if a == b:
        raise IdenticalAssets(f"Identical assets: {a}")
    token0, token1 = (a, b) if a < b else (b, a)
    if token0 == ZERO_ADDRESS:
        raise ZeroAsset("Asset address is the zero address")
    return token0, token1


def pair_for(
    factory: str,
    token_a: str,
    token_b: str,
    init_code_hash: str = DEFAULT_INIT_CODE_HASH,
) -> str:
    """Derive a pair's address without any lookup (CREATE2 scheme).

    address = keccak256(0xff ++ factory ++ keccak256(token0 ++ token1) ++ init_code_hash)[12:]
    """
    token0, token1 = canonical_order(token_a, token_b)
    salt = keccak(encode_packed(["address", "address"], [_to_bytes(token0), _to_bytes(token1)]))
    digest = keccak(
        encode_packed(
            ["bytes1", "address", "bytes32", "bytes32"],
            [
                b"\xff",
                _to_bytes(normalize_address(factory, validate=True)),
                salt,
                bytes.fromhex(init_code_hash[2:]),
            ],
        )
    )
    return "0x" + digest[12:].hex()


def get_reserves(factory: Factory, token_a: str, token_b: str) -> tuple[int, int]:
    """Fetch a pair's reserves ordered as (reserve_a, reserve_b).

    Raises:
        InsufficientLiquidity: If no pair exists for the assets
    """
    token0, _ = canonical_order(token_a, token_b)
    pair = factory.pair_at(pair_for(factory.address, token_a, token_b, factory.init_code_hash))
    if pair is None:
        raise InsufficientLiquidity(f"No pair for {token_a}/{token_b}")
    reserve0, reserve1, _ = pair.get_reserves()
    if normalize_address(token_a) == token0:
        return reserve0, reserve1
    return reserve1, reserve0


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Amount of B worth amount_a of A at the current reserve ratio (no fee).

    Used to size a proportional deposit.

    Raises:
        InsufficientAmount: If amount_a is zero
        InsufficientLiquidity: If either reserve is zero
    """
    if amount_a <= 0:
        raise InsufficientAmount("quote: amount is zero")
    if reserve_a <= 0 or reserve_b <= 0:
        raise InsufficientLiquidity("quote: empty reserves")
    return (S(amount_a) * S(reserve_b) // S(reserve_a)).value


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """Maximum output for an exact input, after the 0.3% fee (rounds down).

    Raises:
        InsufficientInputAmount: If amount_in is zero
        InsufficientLiquidity: If either reserve is zero
    """
    if amount_in <= 0:
        raise InsufficientInputAmount("get_amount_out: amount_in is zero")
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientLiquidity("get_amount_out: empty reserves")

    amount_in_with_fee = S(amount_in) * S(FEE_NUMERATOR)
    numerator = amount_in_with_fee * S(reserve_out)
    denominator = S(reserve_in) * S(FEE_DENOMINATOR) + amount_in_with_fee
    return (numerator // denominator).value


def get_amount_in(amount_out: int, reserve_in: int, reserve_out: int) -> int:
    """Input required for an exact output, after the 0.3% fee.

    Formula: ceil(reserve_in * amount_out * 1000 / ((reserve_out - amount_out) * 997)) + 1

    Raises:
        InsufficientOutputAmount: If amount_out is zero
        InsufficientLiquidity: If either reserve is zero or amount_out >= reserve_out
    """
    if amount_out <= 0:
        raise InsufficientOutputAmount("get_amount_in: amount_out is zero")
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientLiquidity("get_amount_in: empty reserves")
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(
            f"get_amount_in: amount_out {amount_out} >= reserve_out {reserve_out}"
        )

    numerator = S(reserve_in) * S(amount_out) * S(FEE_DENOMINATOR)
    denominator = (S(reserve_out) - S(amount_out)) * S(FEE_NUMERATOR)
    return (numerator.ceiling_div(denominator) + S(1)).value


def get_amounts_out(factory: Factory, amount_in: int, path: Sequence[str]) -> list[int]:
    """Chain get_amount_out across every hop of path.

    Returns:
        [amount_in, out_hop_1, ..., out_hop_n]

    Raises:
        InvalidPath: If path has fewer than two assets
    """
    if len(path) < 2:
        raise InvalidPath(f"Path needs at least 2 assets, got {len(path)}")
    amounts = [amount_in]
    for i in range(len(path) - 1):
        reserve_in, reserve_out = get_reserves(factory, path[i], path[i + 1])
        amounts.append(get_amount_out(amounts[i], reserve_in, reserve_out))
    return amounts


def get_amounts_in(factory: Factory, amount_out: int, path: Sequence[str]) -> list[int]:
    """Chain get_amount_in backwards across every hop of path.

    Returns:
        [in_hop_1, ..., in_hop_n, amount_out]

    Raises:
        InvalidPath: If path has fewer than two assets
    """
    if len(path) < 2:
        raise InvalidPath(f"Path needs at least 2 assets, got {len(path)}")
    amounts = [0] * len(path)
    amounts[-1] = amount_out
    for i in range(len(path) - 1, 0, -1):
        reserve_in, reserve_out = get_reserves(factory, path[i - 1], path[i])
        amounts[i - 1] = get_amount_in(amounts[i], reserve_in, reserve_out)
    return amounts


def _to_bytes(address: str) -> bytes:
    return bytes.fromhex(address[2:])


def _asset_address(token: str) -> str:
    try:
        return normalize_address(token, validate=True)
    except ValueError as err:
        raise InvalidAsset(str(err)) from err
