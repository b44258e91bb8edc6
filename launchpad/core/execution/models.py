"""
Transaction execution models and types.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple


# uint256 max, used for one-time unlimited approvals
MAX_UINT256 = 2**256 - 1


class TokenState(IntEnum):
    """Lifecycle of a token sale as stored by the launchpad contract."""
    NOT_CREATED = 0
    FUNDING = 1
    TRADING = 2

    @classmethod
    def parse(cls, raw: Any) -> "TokenState":
        try:
            return cls(int(raw))
        except ValueError:
            raise ValueError(f"Unknown token state {raw!r}")


@dataclass(frozen=True)
class ContractCall:
    """A method invocation against the launchpad or an ERC-20 token.

    ``address=None`` targets the launchpad contract; any other address is
    called through the minimal ERC-20 ABI.
    """
    method: str
    args: Tuple[Any, ...] = ()
    address: Optional[str] = None

    @property
    def label(self) -> str:
        target = self.address or "launchpad"
        return f"{target}.{self.method}"


@dataclass
class PendingTransaction:
    """A submitted write call that has not been finalized yet."""
    tx_hash: str
    call: ContractCall
    raw: Any = None


@dataclass
class LogEntry:
    """One log entry from a finalized receipt, in on-chain order."""
    address: str
    topics: List[str]
    data: str
    log_index: int = 0
    raw: Any = None


@dataclass
class Receipt:
    """A finalized transaction."""
    tx_hash: str
    status: bool
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    logs: List[LogEntry] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return self.status


@dataclass
class DecodedEvent:
    """A log entry interpreted against the contract's event schema."""
    name: str
    args: Dict[str, Any]
    log_index: int = 0
    address: Optional[str] = None

    def __getitem__(self, key: str) -> Any:
        return self.args[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.args.get(key, default)


def _field(raw: Any, name: str, index: int) -> Any:
    """Read a struct member by name, falling back to tuple position."""
    if isinstance(raw, Mapping):
        return raw[name]
    if hasattr(raw, name):
        return getattr(raw, name)
    return raw[index]


@dataclass
class TokenSaleInfo:
    """Sale record returned by ``tokens(address)``; amounts are fixed-point."""
    state: TokenState
    funding_goal: int
    collateral_amount: int
    initial_supply: int
    funding_supply: int

    @property
    def is_funding(self) -> bool:
        return self.state == TokenState.FUNDING

    @classmethod
    def from_raw(cls, raw: Any) -> "TokenSaleInfo":
        return cls(
            state=TokenState.parse(_field(raw, "state", 4)),
            funding_goal=int(_field(raw, "fundingGoal", 0)),
            collateral_amount=int(_field(raw, "collateralAmount", 3)),
            initial_supply=int(_field(raw, "initialSupply", 1)),
            funding_supply=int(_field(raw, "fundingSupply", 2)),
        )


@dataclass
class BuyQuote:
    """Result of ``calculateBuyAmount``; amounts are fixed-point."""
    receive_amount: int
    available_supply: int
    total_supply: int
    contribution_without_fee: int

    @classmethod
    def from_raw(cls, raw: Any) -> "BuyQuote":
        return cls(
            receive_amount=int(_field(raw, "receiveAmount", 0)),
            available_supply=int(_field(raw, "availableSupply", 1)),
            total_supply=int(_field(raw, "totalSupply", 2)),
            contribution_without_fee=int(_field(raw, "contributionWithoutFee", 3)),
        )


class ProgressKind(str, Enum):
    """Milestones an action reports while it runs."""
    APPROVING = "approving"
    APPROVED = "approved"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"


@dataclass
class ProgressEvent:
    kind: ProgressKind
    tx_hash: Optional[str] = None
    label: str = ""


ProgressCallback = Callable[[ProgressEvent], Awaitable[None]]


async def report(progress: Optional[ProgressCallback], event: ProgressEvent) -> None:
    if progress is not None:
        await progress(event)
