from abc import ABC, abstractmethod
from typing import Any

from ..core.execution.models import (
    ContractCall,
    DecodedEvent,
    LogEntry,
    PendingTransaction,
    Receipt,
)


class LedgerProvider(ABC):
    """Ledger access the orchestration core needs.

    Failures surface as ``ChainError`` (with revert data when the node
    returns it); ``decode_log`` raises ``LogDecodeError`` for entries that
    match no event in the contract schema.
    """

    name: str

    @property
    @abstractmethod
    def signer_address(self) -> str:
        """Address of the wallet that signs every write call"""

    @property
    @abstractmethod
    def contract_address(self) -> str:
        """Address of the launchpad contract"""

    @abstractmethod
    async def read(self, call: ContractCall) -> Any:
        """Side-effect free contract call; safe to run concurrently"""

    @abstractmethod
    async def submit(self, call: ContractCall) -> PendingTransaction:
        """Sign and broadcast a write call"""

    @abstractmethod
    async def wait(self, pending: PendingTransaction) -> Receipt:
        """Block the calling flow until the transaction is finalized"""

    @abstractmethod
    async def estimate_gas(self, call: ContractCall) -> int:
        """Dry-run a write call from the signer"""

    @abstractmethod
    def decode_log(self, entry: LogEntry) -> DecodedEvent:
        """Interpret a log entry against the contract's event schema"""

    @abstractmethod
    async def native_balance(self, address: str) -> int:
        """Native gas token balance in wei"""

    @abstractmethod
    async def block_number(self) -> int:
        pass
