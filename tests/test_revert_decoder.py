"""
Tests for ErrorDecoder revert selector lookup.
"""

import pytest
from eth_abi import encode
from eth_utils import keccak

from launchpad.core.execution import KNOWN_SELECTORS, ErrorDecoder


@pytest.fixture
def decoder() -> ErrorDecoder:
    return ErrorDecoder()


@pytest.mark.parametrize("selector,name", sorted(KNOWN_SELECTORS.items()))
def test_known_selectors(decoder, selector, name):
    assert decoder.decode(selector + "00" * 32) == name


def test_deployed_contract_table(decoder):
    assert decoder.decode("0xe450d38c") == "InvalidTokenSale()"
    assert decoder.decode("0x9ebda18b") == "InvalidTokenSale()"
    assert decoder.decode("0x340dabef") == "InvalidInputAmount()"
    assert decoder.decode("0xa0fa7c8f") == "InvalidTokenSaleFee()"
    assert decoder.decode("0x3ee5aeb5") == "ReentrancyGuardReentrantCall()"


def test_unknown_selector_returns_none(decoder):
    assert decoder.decode("0xdeadbeef") is None

    info = decoder.inspect("0xdeadbeef0000")
    assert info.selector == "0xdeadbeef"
    assert not info.is_decoded
    assert info.describe() == "unknown error 0xdeadbeef"


@pytest.mark.parametrize("data", [None, "", "0x", "0x1234", "not hex at all", b"\x01"])
def test_never_raises_on_malformed_data(decoder, data):
    assert decoder.decode(data) is None


def test_accepts_bytes_and_mixed_case(decoder):
    assert decoder.decode(bytes.fromhex("340dabef")) == "InvalidInputAmount()"
    assert decoder.decode("0xE450D38C") == "InvalidTokenSale()"
    assert decoder.decode("a0fa7c8f") == "InvalidTokenSaleFee()"


def test_error_string_reason(decoder):
    data = "0x08c379a0" + encode(["string"], ["Sale closed"]).hex()

    assert decoder.decode(data) == "Error('Sale closed')"


def test_truncated_error_string_is_not_decoded(decoder):
    assert decoder.decode("0x08c379a0" + "00" * 4) is None


def test_panic_code(decoder):
    data = "0x4e487b71" + encode(["uint256"], [0x11]).hex()

    assert decoder.decode(data) == "Panic(Arithmetic overflow/underflow)"


def test_with_abi_errors_extends_table():
    abi = [
        {"type": "error", "name": "SaleNotFound", "inputs": [{"name": "token", "type": "address"}]},
        {"type": "function", "name": "buy", "inputs": [], "outputs": []},
    ]
    selector = "0x" + keccak(text="SaleNotFound(address)")[:4].hex()

    decoder = ErrorDecoder.with_abi_errors(abi)

    assert decoder.decode(selector + "00" * 32) == "SaleNotFound(address)"
    assert decoder.decode("0xe450d38c") == "InvalidTokenSale()"


def test_custom_table_replaces_defaults():
    decoder = ErrorDecoder({"0xAABBCCDD": "Custom()"})

    assert decoder.decode("0xaabbccdd") == "Custom()"
    assert decoder.decode("0xe450d38c") is None
