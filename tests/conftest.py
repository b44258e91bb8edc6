"""
Shared fixtures: an in-memory ledger standing in for the Neon provider.
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from launchpad.core.actions import DebugPipeline, LaunchpadActions, TextFormatter
from launchpad.core.conversation import ConversationEngine, SessionStore
from launchpad.core.errors import LogDecodeError
from launchpad.core.execution import (
    ContractCall,
    DecodedEvent,
    LogEntry,
    PendingTransaction,
    Receipt,
    TokenState,
)
from launchpad.providers.base import LedgerProvider


SIGNER = "0x1111111111111111111111111111111111111111"
CONTRACT = "0x2222222222222222222222222222222222222222"
WSOL = "0x3333333333333333333333333333333333333333"
TOKEN = "0x4444444444444444444444444444444444444444"
OTHER = "0x5555555555555555555555555555555555555555"

UNIT = 10**9


def sale_record(state: TokenState = TokenState.FUNDING, goal: int = 1000 * UNIT) -> Dict[str, int]:
    return {
        "fundingGoal": goal,
        "initialSupply": 1_000_000 * UNIT,
        "fundingSupply": 800_000 * UNIT,
        "collateralAmount": 250 * UNIT,
        "state": int(state),
    }


class FakeLedger(LedgerProvider):
    """Scriptable ledger: reads come from a table, writes are recorded."""

    name = "fake"

    def __init__(self):
        self.reads: Dict[Tuple[Optional[str], str], Any] = {}
        self.read_calls: List[ContractCall] = []
        self.submitted: List[ContractCall] = []
        self.submit_errors: Dict[str, Exception] = {}
        self.reverted: set = set()
        self.logs: Dict[str, List[LogEntry]] = {}
        self.gas = 210_000
        self.gas_error: Optional[Exception] = None
        self.gas_calls: List[ContractCall] = []
        self.native = 5 * 10**18
        self.block = 4242

    # Scripting helpers

    def set_read(self, method: str, value: Any, address: Optional[str] = None) -> None:
        self.reads[(address.lower() if address else None, method)] = value

    def writes(self, method: Optional[str] = None) -> List[ContractCall]:
        return [c for c in self.submitted if method is None or c.method == method]

    # LedgerProvider

    @property
    def signer_address(self) -> str:
        return SIGNER

    @property
    def contract_address(self) -> str:
        return CONTRACT

    async def read(self, call: ContractCall) -> Any:
        self.read_calls.append(call)
        key = (call.address.lower() if call.address else None, call.method)
        value = self.reads[key]
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return value(*call.args)
        return value

    async def submit(self, call: ContractCall) -> PendingTransaction:
        if call.method in self.submit_errors:
            raise self.submit_errors[call.method]
        self.submitted.append(call)
        if call.method == "approve" and call.address:
            self.set_read("allowance", call.args[1], address=call.address)
        tx_hash = "0x" + f"{len(self.submitted):064x}"
        return PendingTransaction(tx_hash=tx_hash, call=call)

    async def wait(self, pending: PendingTransaction) -> Receipt:
        return Receipt(
            tx_hash=pending.tx_hash,
            status=pending.call.method not in self.reverted,
            block_number=self.block,
            gas_used=self.gas,
            logs=list(self.logs.get(pending.call.method, [])),
        )

    async def estimate_gas(self, call: ContractCall) -> int:
        self.gas_calls.append(call)
        if self.gas_error is not None:
            raise self.gas_error
        return self.gas

    def decode_log(self, entry: LogEntry) -> DecodedEvent:
        if not isinstance(entry.raw, DecodedEvent):
            raise LogDecodeError("Unknown event topic", topic=entry.topics[0] if entry.topics else None)
        return entry.raw

    async def native_balance(self, address: str) -> int:
        return self.native

    async def block_number(self) -> int:
        return self.block


def event_log(name: str, args: Dict[str, Any], log_index: int = 0) -> LogEntry:
    """A log entry the fake ledger decodes to ``name``."""
    return LogEntry(
        address=CONTRACT,
        topics=["0x" + f"{hash(name) & (2**256 - 1):064x}"],
        data="0x",
        log_index=log_index,
        raw=DecodedEvent(name=name, args=args, log_index=log_index, address=CONTRACT),
    )


def foreign_log(log_index: int = 0) -> LogEntry:
    """A log entry (e.g. an ERC-20 Transfer) outside the launchpad schema."""
    return LogEntry(
        address=WSOL,
        topics=["0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"],
        data="0x" + "00" * 32,
        log_index=log_index,
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def ledger() -> FakeLedger:
    """Ledger in a healthy state: FUNDING sale, 100 WSOL, allowance 1000."""
    fake = FakeLedger()
    fake.set_read("owner", SIGNER)
    fake.set_read("feePercent", 100)
    fake.set_read("fee", 5 * UNIT // 10)
    fake.set_read("FEE_DENOMINATOR", 10_000)
    fake.set_read("wsolToken", WSOL)
    fake.set_read("bondingCurve", "0x6666666666666666666666666666666666666666")
    fake.set_read("erc20ForSplFactory", "0x7777777777777777777777777777777777777777")
    fake.set_read("getPayer", b"\x01" * 32)
    fake.set_read("tokens", lambda token: sale_record())
    fake.set_read("getNeonAddress", lambda token: b"\x02" * 32)
    fake.set_read(
        "calculateBuyAmount",
        lambda token, units: {
            "receiveAmount": units * 800,
            "availableSupply": 800_000 * UNIT,
            "totalSupply": 1_000_000 * UNIT,
            "contributionWithoutFee": units * 99 // 100,
        },
    )
    fake.set_read("balanceOf", 100 * UNIT, address=WSOL)
    fake.set_read("allowance", 1000 * UNIT, address=WSOL)
    fake.set_read("symbol", "WSOL", address=WSOL)
    return fake


@pytest.fixture
def actions(ledger: FakeLedger) -> LaunchpadActions:
    return LaunchpadActions(ledger)


@pytest.fixture
def pipeline(actions: LaunchpadActions) -> DebugPipeline:
    return DebugPipeline(actions)


@pytest.fixture
def formatter() -> TextFormatter:
    """Plain-text formatter, as used by the terminal front-end."""
    return TextFormatter(
        explorer_tx_url="https://explorer.test/tx/",
        explorer_address_url="https://explorer.test/address/",
        faucet_url="https://faucet.test/",
        markdown=False,
    )


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def engine(actions: LaunchpadActions, formatter: TextFormatter, store: SessionStore, pipeline) -> ConversationEngine:
    return ConversationEngine(
        actions,
        formatter=formatter,
        store=store,
        pipeline=pipeline,
        network_name="Neon Testnet",
    )
