"""
Transaction Execution Layer

Building blocks shared by every launchpad action:
- TransactionWaiter: submits write calls and waits for finalization
- AllowanceGuard: one-time unlimited approval of the quote asset
- EventExtractor: finds named events in receipt logs
- ErrorDecoder: maps revert selectors to readable names

Usage:
    from launchpad.core.execution import TransactionWaiter, ContractCall

    waiter = TransactionWaiter(ledger)
    receipt = await waiter.submit_and_wait(ContractCall("setFeePercent", (100,)))
"""

from .models import (
    MAX_UINT256,
    TokenState,
    ContractCall,
    PendingTransaction,
    LogEntry,
    Receipt,
    DecodedEvent,
    TokenSaleInfo,
    BuyQuote,
    ProgressKind,
    ProgressEvent,
    ProgressCallback,
)

from .waiter import TransactionWaiter
from .allowance import AllowanceGuard
from .events import EventExtractor, TOKEN_SALE_CREATED, TOKEN_LIQUIDITY_ADDED
from .revert import ErrorDecoder, RevertInfo, KNOWN_SELECTORS

__all__ = [
    # Models
    "MAX_UINT256",
    "TokenState",
    "ContractCall",
    "PendingTransaction",
    "LogEntry",
    "Receipt",
    "DecodedEvent",
    "TokenSaleInfo",
    "BuyQuote",
    "ProgressKind",
    "ProgressEvent",
    "ProgressCallback",
    # Orchestration
    "TransactionWaiter",
    "AllowanceGuard",
    "EventExtractor",
    "TOKEN_SALE_CREATED",
    "TOKEN_LIQUIDITY_ADDED",
    "ErrorDecoder",
    "RevertInfo",
    "KNOWN_SELECTORS",
]
