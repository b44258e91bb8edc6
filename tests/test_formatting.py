"""
Tests for TextFormatter rendering.
"""

import base58
import pytest

from launchpad.core.actions import (
    ContractInfo,
    DebugCheck,
    DebugFragment,
    DebugReport,
    LiquidityAdded,
    PurchaseResult,
    SaleCreated,
    TextFormatter,
    WalletStatus,
)
from launchpad.core.errors import AuthorizationError, ChainError, PreconditionError
from launchpad.core.execution import ProgressEvent, ProgressKind

from conftest import CONTRACT, OTHER, SIGNER, TOKEN, UNIT, WSOL


@pytest.fixture
def markdown() -> TextFormatter:
    return TextFormatter(
        explorer_tx_url="https://explorer.test/tx/",
        explorer_address_url="https://explorer.test/address/",
        markdown=True,
    )


def test_contract_info(formatter):
    info = ContractInfo(
        owner=SIGNER,
        fee_percent=100,
        fee_denominator=10_000,
        accumulated_fee=1_500_000_000,
        quote_token=WSOL,
        bonding_curve=OTHER,
        erc20_factory=CONTRACT,
        payer=b"\x01" * 32,
    )

    text = formatter.contract_info(info)

    assert "Fee: 100/10000 (1.00%)" in text
    assert "Accumulated Fee: 1.5 WSOL" in text
    assert base58.b58encode(b"\x01" * 32).decode() in text


def test_sale_created_without_address(formatter):
    result = SaleCreated("Meme", "MEME", 9, 1, 1, 1, tx_hash="0xabc")

    assert formatter.sale_created(result).endswith("Address: N/A")


def test_sale_created_links_address(markdown):
    result = SaleCreated("Meme", "MEME", 9, 1, 1, 1, tx_hash="0xabc", token_address=TOKEN)

    assert f"[{TOKEN}](https://explorer.test/address/{TOKEN})" in markdown.sale_created(result)


def test_purchase_with_liquidity(formatter):
    result = PurchaseResult(
        token=TOKEN,
        amount=50 * UNIT,
        tx_hash="0xabc",
        liquidity=LiquidityAdded(pool_id=b"\xab" * 32, lp_amount=42 * UNIT, lp_lock_nft=b"\x07" * 32),
    )

    text = formatter.purchase(result)

    assert "Funding goal reached" in text
    assert "LP Amount: 42.0" in text
    assert base58.b58encode(b"\xab" * 32).decode() in text


def test_plain_purchase(formatter):
    text = formatter.purchase(PurchaseResult(token=TOKEN, amount=1, tx_hash="0xabc"))

    assert text == "✅ Tokens purchased!"


def test_wallet_status_warns(formatter):
    status = WalletStatus(
        address=SIGNER,
        native_balance=2 * 10**18,
        block_number=7,
        quote_token=WSOL,
        quote_symbol="WSOL",
        quote_balance=0,
        allowance=0,
    )

    text = formatter.wallet_status(status)

    assert "NEON Balance: 2.0 NEON" in text
    assert "Need tokens from faucet" in text
    assert "Will auto-approve on buy" in text
    assert "https://faucet.test/" in text


def test_progress_messages(formatter, markdown):
    submitted = ProgressEvent(ProgressKind.SUBMITTED, tx_hash="0xabc")

    assert formatter.progress(ProgressEvent(ProgressKind.APPROVING)) == "⏳ Approving WSOL..."
    assert "Tx submitted: 0xabc" in formatter.progress(submitted)
    assert "[0xabc](https://explorer.test/tx/0xabc)" in markdown.progress(submitted)
    assert markdown.progress(ProgressEvent(ProgressKind.CONFIRMED, tx_hash="0xabc")).startswith("✅ Tx confirmed")


def test_debug_report_passed(formatter):
    report = DebugReport(
        token=TOKEN,
        amount_text="50",
        fragments=[DebugFragment(check=c, passed=True) for c in DebugCheck],
    )

    text = formatter.debug_report(report)

    assert "Gas Estimation" in text
    assert "All checks passed" in text


def test_debug_report_halted(formatter):
    report = DebugReport(
        token=TOKEN,
        amount_text="50",
        fragments=[
            DebugFragment(
                check=DebugCheck.STATE,
                passed=False,
                lines=[("State", "TRADING")],
                error="Token is not in FUNDING state",
            )
        ],
        halted_at=DebugCheck.STATE,
    )

    text = formatter.debug_report(report)

    assert "• State: TRADING" in text
    assert "ERROR: Token is not in FUNDING state" in text
    assert "All checks passed" not in text
    assert "Balance Check" not in text


class TestErrors:
    def test_chain_error_shows_decoded_name(self, formatter):
        error = ChainError("buy reverted", tx_hash="0xabc", decoded="InvalidTokenSale()")

        text = formatter.error(error, "buying tokens")

        assert text.startswith("❌ Error buying tokens: buy reverted")
        assert "Custom error: InvalidTokenSale()" in text
        assert "Tx: 0xabc" in text

    def test_authorization_error_names_owner(self, formatter):
        text = formatter.error(AuthorizationError(required=OTHER, actual=SIGNER))

        assert f"Contract owner: {OTHER}" in text
        assert f"Current wallet: {SIGNER}" in text

    def test_precondition_details(self, formatter):
        text = formatter.error(PreconditionError("Insufficient WSOL balance", required="50.0"))

        assert "• Required: 50.0" in text

    def test_unexpected_error(self, formatter):
        assert formatter.error(RuntimeError("boom")) == "❌ Error: boom"

    def test_markdown_escapes_user_text(self, markdown):
        text = markdown.error(PreconditionError("bad_name *here*"))

        assert "bad\\_name \\*here\\*" in text
