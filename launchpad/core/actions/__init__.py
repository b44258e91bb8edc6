"""
Launchpad Actions Module

End-to-end operator actions, buy diagnostics and text rendering of their
results.
"""

from .models import (
    ContractInfo,
    TokenDetails,
    QuoteResult,
    SaleCreated,
    LiquidityAdded,
    PurchaseResult,
    FeeClaimed,
    FeeUpdated,
    WalletStatus,
    DebugCheck,
    DebugFragment,
    DebugReport,
)
from .executor import LaunchpadActions
from .debug import DebugPipeline
from .formatting import TextFormatter

__all__ = [
    # Actions
    "LaunchpadActions",
    "DebugPipeline",
    "TextFormatter",
    # Results
    "ContractInfo",
    "TokenDetails",
    "QuoteResult",
    "SaleCreated",
    "LiquidityAdded",
    "PurchaseResult",
    "FeeClaimed",
    "FeeUpdated",
    "WalletStatus",
    "DebugCheck",
    "DebugFragment",
    "DebugReport",
]
