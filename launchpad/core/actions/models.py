"""
Action result models.

Each launchpad action returns one of these; rendering to text lives in
``formatting``.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from ..execution.models import BuyQuote, TokenSaleInfo


@dataclass
class ContractInfo:
    owner: str
    fee_percent: int
    fee_denominator: int
    accumulated_fee: int
    quote_token: str
    bonding_curve: str
    erc20_factory: str
    payer: bytes

    @property
    def fee_ratio(self) -> Decimal:
        if not self.fee_denominator:
            return Decimal(0)
        return Decimal(self.fee_percent) / Decimal(self.fee_denominator)


@dataclass
class TokenDetails:
    address: str
    info: TokenSaleInfo
    neon_address: bytes


@dataclass
class QuoteResult:
    token: str
    amount: int
    quote: BuyQuote


@dataclass
class SaleCreated:
    name: str
    symbol: str
    decimals: int
    funding_goal: int
    initial_supply: int
    funding_supply: int
    tx_hash: str
    token_address: Optional[str] = None


@dataclass
class LiquidityAdded:
    """Emitted when a purchase crosses the funding goal and a pool is created."""
    pool_id: bytes
    lp_amount: int
    lp_lock_nft: bytes


@dataclass
class PurchaseResult:
    token: str
    amount: int
    tx_hash: str
    approved: bool = False
    liquidity: Optional[LiquidityAdded] = None


@dataclass
class FeeClaimed:
    amount: int
    tx_hash: str
    gas_estimate: Optional[int] = None


@dataclass
class FeeUpdated:
    basis_points: int
    tx_hash: str


@dataclass
class WalletStatus:
    address: str
    native_balance: int
    block_number: int
    quote_token: str
    quote_symbol: str
    quote_balance: int
    allowance: int

    @property
    def has_quote_balance(self) -> bool:
        return self.quote_balance > 0

    @property
    def has_allowance(self) -> bool:
        return self.allowance > 0


class DebugCheck(str, Enum):
    """Checks run by the buy diagnostics, in execution order."""
    STATE = "state"
    AMOUNT = "amount"
    BALANCE = "balance"
    QUOTE = "quote"
    GAS = "gas"


@dataclass
class DebugFragment:
    check: DebugCheck
    passed: bool
    lines: List[Tuple[str, str]] = field(default_factory=list)
    error: Optional[str] = None
    decoded_error: Optional[str] = None


@dataclass
class DebugReport:
    token: str
    amount_text: str
    fragments: List[DebugFragment] = field(default_factory=list)
    halted_at: Optional[DebugCheck] = None

    @property
    def checks(self) -> List[DebugCheck]:
        return [fragment.check for fragment in self.fragments]

    @property
    def passed(self) -> bool:
        return (
            self.halted_at is None
            and bool(self.fragments)
            and self.fragments[-1].check == DebugCheck.GAS
            and all(fragment.passed for fragment in self.fragments)
        )
