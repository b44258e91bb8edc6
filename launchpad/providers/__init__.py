"""Ledger providers."""

from .base import LedgerProvider
from .neon import NeonLedger, ERC20_ABI, load_abi

__all__ = ["LedgerProvider", "NeonLedger", "ERC20_ABI", "load_abi"]
