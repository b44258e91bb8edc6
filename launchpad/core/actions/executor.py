"""
Launchpad actions.

Each public coroutine is one end-to-end operator action: it reads what it
needs (in parallel where the reads are independent), runs its pre-checks,
submits through the TransactionWaiter and interprets the receipt. Failures
are raised as ``LaunchpadError`` subclasses for the conversation layer to
report; nothing here talks to a front-end directly.
"""

import asyncio
import logging
from typing import Any, Optional, Union

from eth_utils import is_same_address

from ..amounts import AmountCodec
from ..errors import (
    AuthorizationError,
    ChainError,
    LaunchpadError,
    PreconditionError,
    ValidationError,
)
from ..execution import (
    AllowanceGuard,
    ContractCall,
    ErrorDecoder,
    EventExtractor,
    ProgressCallback,
    Receipt,
    TOKEN_LIQUIDITY_ADDED,
    TOKEN_SALE_CREATED,
    TokenSaleInfo,
    BuyQuote,
    TransactionWaiter,
)
from .models import (
    ContractInfo,
    FeeClaimed,
    FeeUpdated,
    LiquidityAdded,
    PurchaseResult,
    QuoteResult,
    SaleCreated,
    TokenDetails,
    WalletStatus,
)


logger = logging.getLogger(__name__)


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    text = str(value)
    return bytes.fromhex(text[2:] if text.startswith("0x") else text)


class LaunchpadActions:
    """
    Orchestrates operator actions against the launchpad contract.

    Collaborators default to instances built on the same ledger; tests and
    the bootstrap code can inject their own.
    """

    def __init__(
        self,
        ledger,
        codec: Optional[AmountCodec] = None,
        decoder: Optional[ErrorDecoder] = None,
        waiter: Optional[TransactionWaiter] = None,
        allowance: Optional[AllowanceGuard] = None,
        events: Optional[EventExtractor] = None,
        default_token_decimals: int = 9,
    ):
        self.ledger = ledger
        self.codec = codec or AmountCodec()
        self.decoder = decoder or ErrorDecoder()
        self.waiter = waiter or TransactionWaiter(ledger)
        self.allowance = allowance or AllowanceGuard(ledger, self.waiter)
        self.events = events or EventExtractor(ledger)
        self.default_token_decimals = default_token_decimals

    # ------------------------------------------------------------------
    # Ledger helpers
    # ------------------------------------------------------------------

    async def read(self, method: str, *args: Any, address: Optional[str] = None) -> Any:
        """Read call with failures normalized to ``ChainError``."""
        call = ContractCall(method, tuple(args), address=address)
        try:
            return await self.ledger.read(call)
        except LaunchpadError as e:
            if isinstance(e, ChainError):
                self.annotate(e)
            raise
        except Exception as e:
            logger.error(f"Read {call.label} failed: {e}")
            raise ChainError(f"{method} failed: {e}")

    async def native_balance(self, address: str) -> int:
        try:
            return int(await self.ledger.native_balance(address))
        except LaunchpadError:
            raise
        except Exception as e:
            logger.error(f"Native balance lookup for {address} failed: {e}")
            raise ChainError(f"native_balance failed: {e}")

    async def block_number(self) -> int:
        try:
            return int(await self.ledger.block_number())
        except LaunchpadError:
            raise
        except Exception as e:
            logger.error(f"Block number lookup failed: {e}")
            raise ChainError(f"block_number failed: {e}")

    def annotate(self, error: ChainError) -> ChainError:
        """Attach the decoded revert name when the selector is known."""
        if error.revert_data and not error.decoded:
            error.decoded = self.decoder.decode(error.revert_data)
            if error.decoded:
                error.details["decoded"] = error.decoded
        return error

    async def transact(
        self,
        method: str,
        *args: Any,
        progress: Optional[ProgressCallback] = None,
        address: Optional[str] = None,
    ) -> Receipt:
        try:
            return await self.waiter.submit_and_wait(
                ContractCall(method, tuple(args), address=address),
                progress=progress,
            )
        except ChainError as e:
            raise self.annotate(e)

    async def estimate_gas(self, method: str, *args: Any) -> int:
        call = ContractCall(method, tuple(args))
        try:
            return int(await self.ledger.estimate_gas(call))
        except ChainError as e:
            raise self.annotate(e)
        except LaunchpadError:
            raise
        except Exception as e:
            raise ChainError(f"Gas estimation for {method} failed: {e}")

    async def quote_token(self) -> str:
        return await self.read("wsolToken")

    async def sale_info(self, token: str) -> TokenSaleInfo:
        return TokenSaleInfo.from_raw(await self.read("tokens", token))

    def to_units(self, amount: Union[str, int]) -> int:
        if isinstance(amount, int):
            return amount
        return self.codec.to_units(amount)

    # ------------------------------------------------------------------
    # Read-only actions
    # ------------------------------------------------------------------

    async def contract_info(self) -> ContractInfo:
        (
            owner,
            fee_percent,
            fee,
            denominator,
            wsol,
            bonding_curve,
            factory,
            payer,
        ) = await asyncio.gather(
            self.read("owner"),
            self.read("feePercent"),
            self.read("fee"),
            self.read("FEE_DENOMINATOR"),
            self.read("wsolToken"),
            self.read("bondingCurve"),
            self.read("erc20ForSplFactory"),
            self.read("getPayer"),
        )
        return ContractInfo(
            owner=owner,
            fee_percent=int(fee_percent),
            fee_denominator=int(denominator),
            accumulated_fee=int(fee),
            quote_token=wsol,
            bonding_curve=bonding_curve,
            erc20_factory=factory,
            payer=_as_bytes(payer),
        )

    async def token_info(self, token: str) -> TokenDetails:
        raw_info, neon_address = await asyncio.gather(
            self.read("tokens", token),
            self.read("getNeonAddress", token),
        )
        return TokenDetails(
            address=token,
            info=TokenSaleInfo.from_raw(raw_info),
            neon_address=_as_bytes(neon_address),
        )

    async def quote(self, token: str, amount: Union[str, int]) -> QuoteResult:
        units = self.to_units(amount)
        raw = await self.read("calculateBuyAmount", token, units)
        return QuoteResult(token=token, amount=units, quote=BuyQuote.from_raw(raw))

    async def wallet_setup(self) -> WalletStatus:
        signer = self.ledger.signer_address
        native, block, wsol = await asyncio.gather(
            self.native_balance(signer),
            self.block_number(),
            self.quote_token(),
        )
        balance, allowance, symbol = await asyncio.gather(
            self.read("balanceOf", signer, address=wsol),
            self.read("allowance", signer, self.ledger.contract_address, address=wsol),
            self.read("symbol", address=wsol),
        )
        return WalletStatus(
            address=signer,
            native_balance=int(native),
            block_number=int(block),
            quote_token=wsol,
            quote_symbol=str(symbol),
            quote_balance=int(balance),
            allowance=int(allowance),
        )

    # ------------------------------------------------------------------
    # Write actions
    # ------------------------------------------------------------------

    async def create_sale(
        self,
        name: Optional[str],
        symbol: Optional[str],
        decimals: Optional[Union[int, str]],
        funding_goal: Optional[str],
        initial_supply: Optional[str],
        funding_supply: Optional[str],
        progress: Optional[ProgressCallback] = None,
    ) -> SaleCreated:
        if not all([name, symbol, funding_goal, initial_supply, funding_supply]):
            raise ValidationError("Missing required fields for the token sale")

        if decimals in (None, ""):
            token_decimals = self.default_token_decimals
        else:
            try:
                token_decimals = int(decimals)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid decimals value '{decimals}'")

        goal = self.codec.to_units(funding_goal)
        initial = self.codec.to_units(initial_supply)
        funding = self.codec.to_units(funding_supply)

        logger.info("Creating token sale %s (%s)", name, symbol)
        receipt = await self.transact(
            "createTokenSale",
            name,
            symbol,
            token_decimals,
            goal,
            initial,
            funding,
            progress=progress,
        )

        event = self.events.find_event(receipt, TOKEN_SALE_CREATED)
        token_address = event.get("token") if event else None
        if token_address is None:
            logger.warning("No %s event in %s", TOKEN_SALE_CREATED, receipt.tx_hash)

        return SaleCreated(
            name=name,
            symbol=symbol,
            decimals=token_decimals,
            funding_goal=goal,
            initial_supply=initial,
            funding_supply=funding,
            tx_hash=receipt.tx_hash,
            token_address=token_address,
        )

    async def buy(
        self,
        token: str,
        amount: Union[str, int],
        progress: Optional[ProgressCallback] = None,
    ) -> PurchaseResult:
        units = self.to_units(amount)
        if units <= 0:
            raise ValidationError("Amount must be greater than 0")

        signer = self.ledger.signer_address
        spender = self.ledger.contract_address

        info, wsol = await asyncio.gather(self.sale_info(token), self.quote_token())
        if not info.is_funding:
            raise PreconditionError(
                f"Token sale is {info.state.name}, purchases need FUNDING",
                state=info.state.name,
            )

        balance = int(await self.read("balanceOf", signer, address=wsol))
        if balance < units:
            raise PreconditionError(
                "Insufficient WSOL balance",
                required=self.codec.format(units),
                available=self.codec.format(balance),
            )

        approved = await self.allowance.ensure(wsol, signer, spender, units, progress=progress)

        receipt = await self.transact("buy", token, units, progress=progress)

        liquidity = None
        event = self.events.find_event(receipt, TOKEN_LIQUIDITY_ADDED)
        if event is not None:
            liquidity = LiquidityAdded(
                pool_id=_as_bytes(event["poolId"]),
                lp_amount=int(event["lpAmount"]),
                lp_lock_nft=_as_bytes(event["lpLockPositionNFTAccount"]),
            )
            logger.info("Funding goal reached for %s", token)

        return PurchaseResult(
            token=token,
            amount=units,
            tx_hash=receipt.tx_hash,
            approved=approved,
            liquidity=liquidity,
        )

    async def claim_fees(self, progress: Optional[ProgressCallback] = None) -> FeeClaimed:
        signer = self.ledger.signer_address
        owner, fee = await asyncio.gather(self.read("owner"), self.read("fee"))

        if not is_same_address(signer, owner):
            raise AuthorizationError(
                "Only the contract owner can claim fees",
                required=owner,
                actual=signer,
            )

        fee = int(fee)
        if fee == 0:
            raise PreconditionError("No fees to claim (accumulated fee is 0)")

        gas = await self.estimate_gas("claimTokenSaleFee")
        logger.info("Claiming %s fee units, estimated gas %s", fee, gas)

        receipt = await self.transact("claimTokenSaleFee", progress=progress)
        return FeeClaimed(amount=fee, tx_hash=receipt.tx_hash, gas_estimate=gas)

    async def set_fee(
        self,
        basis_points: Union[int, str],
        progress: Optional[ProgressCallback] = None,
    ) -> FeeUpdated:
        try:
            points = int(str(basis_points).strip())
        except ValueError:
            raise ValidationError(f"'{basis_points}' is not a whole number of basis points")

        receipt = await self.transact("setFeePercent", points, progress=progress)
        return FeeUpdated(basis_points=points, tx_hash=receipt.tx_hash)
