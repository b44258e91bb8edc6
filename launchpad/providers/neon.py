"""
Neon EVM ledger provider.

Talks JSON-RPC through ``web3.AsyncWeb3``: view calls return dicts keyed by
the ABI output names, writes are signed locally with the operator key and
receipts are polled until finalized. Node failures become ``ChainError``
with the revert data attached when the node returns any.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from eth_account import Account
from eth_utils import is_same_address, keccak, to_checksum_address
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from ..core.errors import ChainError, ConfigError, LogDecodeError, ValidationError
from ..core.execution.models import (
    ContractCall,
    DecodedEvent,
    LogEntry,
    PendingTransaction,
    Receipt,
)
from ..core.execution.revert import abi_signature
from .base import LedgerProvider


logger = logging.getLogger(__name__)


ERC20_ABI: List[Dict[str, Any]] = [
    {
        "type": "function",
        "name": "balanceOf",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "allowance",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "approve",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "symbol",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "type": "function",
        "name": "decimals",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
]


def load_abi(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """Load a contract ABI from a bare ABI list or a Hardhat/Foundry artifact."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"ABI file not found: {path}", missing=["abi_path"])
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    if isinstance(data, dict):
        data = data.get("abi")
    if not isinstance(data, list):
        raise ConfigError(f"No ABI list in {path}")
    return data


def _hex(value: Any) -> str:
    return AsyncWeb3.to_hex(value) if not isinstance(value, str) else value


def _shape(value: Any, params: Sequence[Mapping[str, Any]]) -> Any:
    """Key tuple results by their ABI names so callers can read fields by name."""
    if len(params) == 1:
        param = params[0]
        if param.get("type") == "tuple" and param.get("components"):
            return _shape(value, param["components"])
        return value
    names = [p.get("name") for p in params]
    if not all(names) or not isinstance(value, (list, tuple)):
        return value
    return {
        name: _shape(item, [p]) if p.get("type") == "tuple" else item
        for name, item, p in zip(names, value, params)
    }


def _checksum_args(args: Sequence[Any], params: Sequence[Mapping[str, Any]]) -> Tuple[Any, ...]:
    """Checksum every ``address`` argument; web3 refuses lowercase addresses."""
    normalized = []
    for value, param in zip(args, params):
        if param.get("type") == "address" and isinstance(value, str):
            try:
                value = to_checksum_address(value.strip())
            except ValueError:
                raise ValidationError(f"'{value}' is not a valid address")
        normalized.append(value)
    return tuple(normalized)


def _revert_data(error: Exception) -> Optional[str]:
    data = getattr(error, "data", None)
    if isinstance(data, (bytes, bytearray)):
        return _hex(bytes(data))
    if isinstance(data, str) and data.startswith("0x"):
        return data
    return None


class NeonLedger(LedgerProvider):
    """``LedgerProvider`` over web3.py for the launchpad contract on Neon EVM."""

    name = "neon"

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        abi: List[Dict[str, Any]],
        private_key: str,
        chain_id: Optional[int] = None,
        receipt_timeout: float = 600,
        poll_interval: float = 1.0,
        web3: Optional[AsyncWeb3] = None,
    ):
        self.w3 = web3 or AsyncWeb3(AsyncHTTPProvider(rpc_url))
        self.abi = abi
        self.account = Account.from_key(private_key)
        self.chain_id = chain_id
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval
        self._contract_address = to_checksum_address(contract_address)
        self.contract = self.w3.eth.contract(address=self._contract_address, abi=abi)
        self._tokens: Dict[str, Any] = {}
        # Writes from different users share one signer; nonces must not collide
        self._submit_lock = asyncio.Lock()
        self._events = {
            "0x" + keccak(text=abi_signature(entry)).hex(): entry
            for entry in abi
            if entry.get("type") == "event" and not entry.get("anonymous")
        }

    @classmethod
    def from_settings(cls, settings) -> "NeonLedger":
        settings.require("neon_rpc", "contract_address", "private_key_owner")
        return cls(
            rpc_url=settings.neon_rpc,
            contract_address=settings.contract_address,
            abi=load_abi(settings.abi_path),
            private_key=settings.private_key_owner,
            chain_id=settings.chain_id,
            receipt_timeout=settings.tx_receipt_timeout_seconds,
            poll_interval=settings.tx_poll_interval_seconds,
        )

    @property
    def signer_address(self) -> str:
        return self.account.address

    @property
    def contract_address(self) -> str:
        return self._contract_address

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def _target(self, call: ContractCall):
        if call.address is None or is_same_address(call.address, self._contract_address):
            return self.contract, self.abi
        address = to_checksum_address(call.address)
        if address not in self._tokens:
            self._tokens[address] = self.w3.eth.contract(address=address, abi=ERC20_ABI)
        return self._tokens[address], ERC20_ABI

    def _function(self, call: ContractCall):
        contract, abi = self._target(call)
        entry = next(
            (
                e for e in abi
                if e.get("type") == "function"
                and e.get("name") == call.method
                and len(e.get("inputs", [])) == len(call.args)
            ),
            None,
        )
        if entry is None:
            raise ChainError(f"{call.label} is not in the contract ABI")
        args = _checksum_args(call.args, entry.get("inputs", []))
        return contract.functions[call.method](*args), entry

    def _error(self, call: ContractCall, error: Exception, tx_hash: Optional[str] = None) -> ChainError:
        if isinstance(error, ContractLogicError):
            message = f"{call.method} reverted: {getattr(error, 'message', None) or error}"
        else:
            message = f"{call.method} failed: {error}"
        return ChainError(message, tx_hash=tx_hash, revert_data=_revert_data(error))

    async def read(self, call: ContractCall) -> Any:
        function, entry = self._function(call)
        try:
            value = await function.call()
        except (Web3Exception, ValueError) as e:
            raise self._error(call, e)
        return _shape(value, entry.get("outputs", []))

    async def estimate_gas(self, call: ContractCall) -> int:
        function, _ = self._function(call)
        try:
            return await function.estimate_gas({"from": self.signer_address})
        except (Web3Exception, ValueError) as e:
            raise self._error(call, e)

    async def submit(self, call: ContractCall) -> PendingTransaction:
        function, _ = self._function(call)
        async with self._submit_lock:
            try:
                nonce = await self.w3.eth.get_transaction_count(self.signer_address, "pending")
                params: Dict[str, Any] = {"from": self.signer_address, "nonce": nonce}
                if self.chain_id is not None:
                    params["chainId"] = self.chain_id
                tx = await function.build_transaction(params)
                signed = self.account.sign_transaction(tx)
                tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
            except (Web3Exception, ValueError) as e:
                raise self._error(call, e)

        tx_hash = _hex(tx_hash)
        logger.info(f"Submitted {call.label} as {tx_hash} (nonce {nonce})")
        return PendingTransaction(tx_hash=tx_hash, call=call, raw=tx)

    async def wait(self, pending: PendingTransaction) -> Receipt:
        try:
            raw = await self.w3.eth.wait_for_transaction_receipt(
                pending.tx_hash,
                timeout=self.receipt_timeout,
                poll_latency=self.poll_interval,
            )
        except TimeExhausted:
            raise ChainError(
                f"No receipt for {pending.call.method} after {self.receipt_timeout}s",
                tx_hash=pending.tx_hash,
            )
        except (Web3Exception, ValueError) as e:
            raise self._error(pending.call, e, tx_hash=pending.tx_hash)

        return Receipt(
            tx_hash=pending.tx_hash,
            status=raw["status"] == 1,
            block_number=raw.get("blockNumber"),
            gas_used=raw.get("gasUsed"),
            logs=[
                LogEntry(
                    address=log["address"],
                    topics=[_hex(t) for t in log["topics"]],
                    data=_hex(log["data"]),
                    log_index=log.get("logIndex", i),
                    raw=log,
                )
                for i, log in enumerate(raw.get("logs", []))
            ],
        )

    # ------------------------------------------------------------------
    # Logs and chain state
    # ------------------------------------------------------------------

    def decode_log(self, entry: LogEntry) -> DecodedEvent:
        if not entry.topics:
            raise LogDecodeError("Anonymous log entry", log_index=entry.log_index)
        if not is_same_address(entry.address, self._contract_address):
            raise LogDecodeError("Log emitted by another contract", address=entry.address)

        event_abi = self._events.get(entry.topics[0].lower())
        if event_abi is None or entry.raw is None:
            raise LogDecodeError("Unknown event topic", topic=entry.topics[0])

        try:
            decoded = self.contract.events[event_abi["name"]]().process_log(entry.raw)
        except (Web3Exception, ValueError) as e:
            raise LogDecodeError(f"Cannot decode {event_abi['name']}: {e}")

        return DecodedEvent(
            name=decoded["event"],
            args=dict(decoded["args"]),
            log_index=entry.log_index,
            address=entry.address,
        )

    async def native_balance(self, address: str) -> int:
        try:
            return await self.w3.eth.get_balance(to_checksum_address(address))
        except Exception as e:
            raise ChainError(f"Balance lookup failed: {e}")

    async def block_number(self) -> int:
        try:
            return await self.w3.eth.block_number
        except Exception as e:
            raise ChainError(f"Block number lookup failed: {e}")
