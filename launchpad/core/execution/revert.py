"""
Revert selector decoding.

Maps the leading four bytes of revert data to a readable error name. The
table is advisory: an unknown selector yields ``None``, never an exception.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from eth_abi import decode as abi_decode
from eth_utils import keccak


KNOWN_SELECTORS: Dict[str, str] = {
    "0xe450d38c": "InvalidTokenSale()",
    "0x340dabef": "InvalidInputAmount()",
    "0x9ebda18b": "InvalidTokenSale()",
    "0xa0fa7c8f": "InvalidTokenSaleFee()",
    "0x3ee5aeb5": "ReentrancyGuardReentrantCall()",
}

ERROR_STRING_SELECTOR = "0x08c379a0"   # Error(string)
PANIC_SELECTOR = "0x4e487b71"          # Panic(uint256)

PANIC_REASONS: Dict[int, str] = {
    0x01: "Assertion failed",
    0x11: "Arithmetic overflow/underflow",
    0x12: "Division by zero",
    0x21: "Invalid enum value",
    0x31: "Pop from empty array",
    0x32: "Array index out of bounds",
    0x41: "Out of memory",
}


@dataclass(frozen=True)
class RevertInfo:
    """Revert data split into selector and, when known, a readable name."""
    raw: Optional[str]
    selector: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_decoded(self) -> bool:
        return self.name is not None

    def describe(self) -> str:
        if self.name:
            return self.name
        if self.selector:
            return f"unknown error {self.selector}"
        return "no revert data"


def _normalize(data: Union[str, bytes, None]) -> Optional[str]:
    if data is None:
        return None
    if isinstance(data, (bytes, bytearray)):
        return "0x" + bytes(data).hex()
    text = str(data).strip().lower()
    if not text:
        return None
    return text if text.startswith("0x") else "0x" + text


def _canonical_type(param: Mapping[str, Any]) -> str:
    kind = param.get("type", "")
    if kind.startswith("tuple"):
        inner = ",".join(_canonical_type(c) for c in param.get("components", []))
        return f"({inner}){kind[len('tuple'):]}"
    return kind


def abi_signature(entry: Mapping[str, Any]) -> str:
    types = ",".join(_canonical_type(p) for p in entry.get("inputs", []))
    return f"{entry['name']}({types})"


def error_selector(signature: str) -> str:
    return "0x" + keccak(text=signature)[:4].hex()


class ErrorDecoder:
    """Looks up revert selectors in a fixed table."""

    def __init__(self, table: Optional[Mapping[str, str]] = None):
        source = KNOWN_SELECTORS if table is None else table
        self.table: Dict[str, str] = {k.lower(): v for k, v in source.items()}

    @classmethod
    def with_abi_errors(cls, abi: Iterable[Mapping[str, Any]]) -> "ErrorDecoder":
        """Known table extended with the custom errors declared in ``abi``."""
        decoder = cls()
        for entry in abi:
            if entry.get("type") != "error" or not entry.get("name"):
                continue
            signature = abi_signature(entry)
            decoder.table.setdefault(error_selector(signature), signature)
        return decoder

    def inspect(self, data: Union[str, bytes, None]) -> RevertInfo:
        raw = _normalize(data)
        if raw is None or len(raw) < 10:
            return RevertInfo(raw=raw)

        selector = raw[:10]
        name = self.table.get(selector)
        if name is None and selector == ERROR_STRING_SELECTOR:
            name = self._error_string(raw)
        elif name is None and selector == PANIC_SELECTOR:
            name = self._panic(raw)
        return RevertInfo(raw=raw, selector=selector, name=name)

    def decode(self, data: Union[str, bytes, None]) -> Optional[str]:
        return self.inspect(data).name

    @staticmethod
    def _error_string(raw: str) -> Optional[str]:
        try:
            (reason,) = abi_decode(["string"], bytes.fromhex(raw[10:]))
        except Exception:
            return None
        return f"Error({reason!r})"

    @staticmethod
    def _panic(raw: str) -> Optional[str]:
        try:
            (code,) = abi_decode(["uint256"], bytes.fromhex(raw[10:]))
        except Exception:
            return None
        return f"Panic({PANIC_REASONS.get(code, hex(code))})"
