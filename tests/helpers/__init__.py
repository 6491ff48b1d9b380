"""Test helpers module for shared test utilities.

- constants: Account and asset addresses, common amounts
- factories: Token, liquidity and flash swap callee builders
"""

from tests.helpers.constants import (
    BORROWER,
    FAR_DEADLINE,
    FEE_TO_SETTER,
    OTHER,
    START_TIMESTAMP,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    WALLET,
    WALLET_BALANCE,
    expand_to_18_decimals,
)
from tests.helpers.factories import (
    FlashCall,
    MintableToken,
    ReentrantCallee,
    RepayingCallee,
    add_liquidity,
    deploy_token,
    token_at,
)

__all__ = [
    # Constants
    "WALLET",
    "OTHER",
    "FEE_TO_SETTER",
    "BORROWER",
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "WALLET_BALANCE",
    "FAR_DEADLINE",
    "START_TIMESTAMP",
    "expand_to_18_decimals",
    # Factories
    "MintableToken",
    "deploy_token",
    "token_at",
    "add_liquidity",
    "FlashCall",
    "RepayingCallee",
    "ReentrantCallee",
]
