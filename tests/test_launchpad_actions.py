"""
Tests for LaunchpadActions against the in-memory ledger.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from launchpad.core.errors import (
    AuthorizationError,
    ChainError,
    PreconditionError,
    ValidationError,
)
from launchpad.core.execution import (
    MAX_UINT256,
    TOKEN_LIQUIDITY_ADDED,
    TOKEN_SALE_CREATED,
    ProgressKind,
    TokenState,
)

from conftest import CONTRACT, OTHER, SIGNER, TOKEN, UNIT, WSOL, event_log, foreign_log, sale_record


# =============================================================================
# Read-only actions
# =============================================================================


@pytest.mark.asyncio
async def test_contract_info(actions, ledger):
    info = await actions.contract_info()

    assert info.owner == SIGNER
    assert info.fee_percent == 100
    assert info.fee_denominator == 10_000
    assert info.fee_ratio == Decimal("0.01")
    assert info.accumulated_fee == 5 * UNIT // 10
    assert info.quote_token == WSOL
    assert info.payer == b"\x01" * 32
    assert {c.method for c in ledger.read_calls} == {
        "owner",
        "feePercent",
        "fee",
        "FEE_DENOMINATOR",
        "wsolToken",
        "bondingCurve",
        "erc20ForSplFactory",
        "getPayer",
    }


@pytest.mark.asyncio
async def test_contract_info_read_failure_is_chain_error(actions, ledger):
    ledger.set_read("owner", RuntimeError("rpc unavailable"))

    with pytest.raises(ChainError, match="rpc unavailable"):
        await actions.contract_info()


@pytest.mark.asyncio
async def test_token_info(actions):
    details = await actions.token_info(TOKEN)

    assert details.address == TOKEN
    assert details.info.state == TokenState.FUNDING
    assert details.info.funding_goal == 1000 * UNIT
    assert details.info.collateral_amount == 250 * UNIT
    assert details.neon_address == b"\x02" * 32


@pytest.mark.asyncio
async def test_token_info_accepts_positional_struct(actions, ledger):
    ledger.set_read("tokens", lambda token: (10, 20, 30, 40, 2))

    details = await actions.token_info(TOKEN)

    assert details.info.funding_goal == 10
    assert details.info.initial_supply == 20
    assert details.info.funding_supply == 30
    assert details.info.collateral_amount == 40
    assert details.info.state == TokenState.TRADING


@pytest.mark.asyncio
async def test_quote_converts_amount(actions, ledger):
    result = await actions.quote(TOKEN, "2.5")

    assert result.amount == 2_500_000_000
    assert result.quote.receive_amount == 2_500_000_000 * 800
    assert ledger.read_calls[-1].args == (TOKEN, 2_500_000_000)


@pytest.mark.asyncio
async def test_wallet_setup(actions, ledger):
    status = await actions.wallet_setup()

    assert status.address == SIGNER
    assert status.native_balance == ledger.native
    assert status.block_number == ledger.block
    assert status.quote_token == WSOL
    assert status.quote_symbol == "WSOL"
    assert status.quote_balance == 100 * UNIT
    assert status.has_allowance


@pytest.mark.asyncio
async def test_wallet_setup_transport_failure(actions, ledger):
    ledger.block_number = AsyncMock(side_effect=ConnectionError("connection reset"))

    with pytest.raises(ChainError, match="connection reset"):
        await actions.wallet_setup()


# =============================================================================
# Buy
# =============================================================================


class TestBuy:
    @pytest.mark.asyncio
    async def test_funded_and_approved_buys_once(self, actions, ledger):
        """Balance 100, amount 50, allowance 1000: one buy, no approval."""
        result = await actions.buy(TOKEN, "50")

        writes = ledger.writes()
        assert [w.method for w in writes] == ["buy"]
        assert writes[0].args == (TOKEN, 50 * UNIT)
        assert writes[0].address is None
        assert result.approved is False
        assert result.liquidity is None
        assert result.tx_hash.startswith("0x")

    @pytest.mark.asyncio
    async def test_short_allowance_approves_before_buy(self, actions, ledger):
        ledger.set_read("allowance", 10 * UNIT, address=WSOL)
        events = []

        async def progress(event):
            events.append(event.kind)

        result = await actions.buy(TOKEN, "50", progress=progress)

        writes = ledger.writes()
        assert [w.method for w in writes] == ["approve", "buy"]
        assert writes[0].address == WSOL
        assert writes[0].args == (CONTRACT, MAX_UINT256)
        assert result.approved is True
        assert events == [
            ProgressKind.APPROVING,
            ProgressKind.APPROVED,
            ProgressKind.SUBMITTED,
            ProgressKind.CONFIRMED,
        ]

    @pytest.mark.asyncio
    async def test_liquidity_event_is_reported(self, actions, ledger):
        ledger.logs["buy"] = [
            foreign_log(0),
            event_log(
                TOKEN_LIQUIDITY_ADDED,
                {
                    "poolId": "0x" + "ab" * 32,
                    "lpAmount": 42 * UNIT,
                    "lpLockPositionNFTAccount": b"\x07" * 32,
                },
                log_index=1,
            ),
        ]

        result = await actions.buy(TOKEN, "50")

        assert result.liquidity is not None
        assert result.liquidity.pool_id == b"\xab" * 32
        assert result.liquidity.lp_amount == 42 * UNIT
        assert result.liquidity.lp_lock_nft == b"\x07" * 32

    @pytest.mark.asyncio
    async def test_sale_not_funding(self, actions, ledger):
        ledger.set_read("tokens", lambda token: sale_record(TokenState.TRADING))

        with pytest.raises(PreconditionError, match="TRADING"):
            await actions.buy(TOKEN, "50")

        assert ledger.writes() == []

    @pytest.mark.asyncio
    async def test_insufficient_balance(self, actions, ledger):
        with pytest.raises(PreconditionError) as exc_info:
            await actions.buy(TOKEN, "150")

        assert exc_info.value.details == {"required": "150.0", "available": "100.0"}
        assert ledger.writes() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-1"])
    async def test_non_positive_amount(self, actions, ledger, amount):
        with pytest.raises(ValidationError):
            await actions.buy(TOKEN, amount)

        assert ledger.read_calls == []

    @pytest.mark.asyncio
    async def test_revert_is_decoded(self, actions, ledger):
        ledger.submit_errors["buy"] = ChainError("buy reverted", revert_data="0x340dabef")

        with pytest.raises(ChainError) as exc_info:
            await actions.buy(TOKEN, "50")

        assert exc_info.value.decoded == "InvalidInputAmount()"
        assert exc_info.value.details["decoded"] == "InvalidInputAmount()"


# =============================================================================
# Owner actions
# =============================================================================


class TestClaimFees:
    @pytest.mark.asyncio
    async def test_owner_claims(self, actions, ledger):
        result = await actions.claim_fees()

        assert [w.method for w in ledger.writes()] == ["claimTokenSaleFee"]
        assert [c.method for c in ledger.gas_calls] == ["claimTokenSaleFee"]
        assert result.amount == 5 * UNIT // 10
        assert result.gas_estimate == ledger.gas

    @pytest.mark.asyncio
    async def test_non_owner_is_rejected_without_transaction(self, actions, ledger):
        ledger.set_read("owner", OTHER)

        with pytest.raises(AuthorizationError) as exc_info:
            await actions.claim_fees()

        assert exc_info.value.required == OTHER
        assert exc_info.value.actual == SIGNER
        assert ledger.writes() == []
        assert ledger.gas_calls == []

    @pytest.mark.asyncio
    async def test_nothing_to_claim(self, actions, ledger):
        ledger.set_read("fee", 0)

        with pytest.raises(PreconditionError):
            await actions.claim_fees()

        assert ledger.writes() == []

    @pytest.mark.asyncio
    async def test_gas_estimate_revert_is_decoded(self, actions, ledger):
        ledger.gas_error = ChainError("claimTokenSaleFee reverted", revert_data="0x3ee5aeb5")

        with pytest.raises(ChainError) as exc_info:
            await actions.claim_fees()

        assert exc_info.value.decoded == "ReentrancyGuardReentrantCall()"
        assert ledger.writes() == []


class TestSetFee:
    @pytest.mark.asyncio
    async def test_integer_basis_points(self, actions, ledger):
        result = await actions.set_fee(" 250 ")

        assert result.basis_points == 250
        assert ledger.writes()[0].args == (250,)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["abc", "2.5", ""])
    async def test_rejects_non_integers(self, actions, ledger, value):
        with pytest.raises(ValidationError):
            await actions.set_fee(value)

        assert ledger.writes() == []


# =============================================================================
# Create sale
# =============================================================================


class TestCreateSale:
    @pytest.mark.asyncio
    async def test_creates_and_extracts_token(self, actions, ledger):
        ledger.logs["createTokenSale"] = [event_log(TOKEN_SALE_CREATED, {"token": TOKEN})]

        result = await actions.create_sale("Meme", "MEME", None, "1000", "1000000", "800000")

        call = ledger.writes()[0]
        assert call.method == "createTokenSale"
        assert call.args == ("Meme", "MEME", 9, 1000 * UNIT, 1_000_000 * UNIT, 800_000 * UNIT)
        assert result.token_address == TOKEN
        assert result.decimals == 9

    @pytest.mark.asyncio
    async def test_missing_event_gives_no_address(self, actions, ledger):
        result = await actions.create_sale("Meme", "MEME", 6, "1", "2", "1")

        assert result.token_address is None
        assert ledger.writes()[0].args[2] == 6

    @pytest.mark.asyncio
    async def test_missing_fields(self, actions, ledger):
        with pytest.raises(ValidationError):
            await actions.create_sale("Meme", "", 9, "1", "2", "1")

        assert ledger.writes() == []

    @pytest.mark.asyncio
    async def test_non_numeric_goal(self, actions, ledger):
        with pytest.raises(ValidationError):
            await actions.create_sale("Meme", "MEME", 9, "lots", "2", "1")

        assert ledger.writes() == []
