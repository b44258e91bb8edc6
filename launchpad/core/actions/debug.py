"""
Buy diagnostics.

Runs the checks a purchase depends on, in order, and stops at the first one
that fails. Every check appends a fragment to the report, so the caller
always gets everything that was learned up to the failure.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Tuple

from ..amounts import AmountCodec
from ..errors import ChainError, LaunchpadError
from ..execution.models import BuyQuote, TokenSaleInfo
from .executor import LaunchpadActions
from .models import DebugCheck, DebugFragment, DebugReport


logger = logging.getLogger(__name__)


@dataclass
class DebugRun:
    """State shared between checks of one pipeline run."""
    token: str
    amount_text: str
    amount: int = 0
    info: Optional[TokenSaleInfo] = None
    quote_token: Optional[str] = None
    quote: Optional[BuyQuote] = None


Check = Callable[[DebugRun], Awaitable[DebugFragment]]


class DebugPipeline:
    """Short-circuiting buy diagnostics built on ``LaunchpadActions``."""

    def __init__(self, actions: LaunchpadActions, native_decimals: int = 18):
        self.actions = actions
        self.codec = actions.codec
        self.native_codec = AmountCodec(native_decimals)
        self.ledger = actions.ledger
        self.checks: List[Tuple[DebugCheck, Check]] = [
            (DebugCheck.STATE, self.check_state),
            (DebugCheck.AMOUNT, self.check_amount),
            (DebugCheck.BALANCE, self.check_balance),
            (DebugCheck.QUOTE, self.check_quote),
            (DebugCheck.GAS, self.probe_gas),
        ]

    async def run(self, token: str, amount_text: str) -> DebugReport:
        report = DebugReport(token=token, amount_text=amount_text)
        state = DebugRun(token=token, amount_text=amount_text)

        for check, method in self.checks:
            try:
                fragment = await method(state)
            except LaunchpadError as e:
                fragment = self._failed(check, e)
            except Exception as e:
                logger.exception(f"Unexpected error in {check.value} check: {e}")
                fragment = self._failed(check, ChainError(f"{check.value} check failed: {e}"))

            report.fragments.append(fragment)
            if not fragment.passed:
                report.halted_at = check
                logger.info("Buy diagnostics for %s halted at %s", token, check.value)
                break

        return report

    def _failed(self, check: DebugCheck, error: LaunchpadError) -> DebugFragment:
        decoded = None
        if isinstance(error, ChainError):
            self.actions.annotate(error)
            decoded = error.decoded
        return DebugFragment(check=check, passed=False, error=error.message, decoded_error=decoded)

    async def check_state(self, run: DebugRun) -> DebugFragment:
        run.info = await self.actions.sale_info(run.token)
        info = run.info
        return DebugFragment(
            check=DebugCheck.STATE,
            passed=info.is_funding,
            lines=[
                ("Address", run.token),
                ("State", info.state.name),
                ("Funding Goal", self.codec.format(info.funding_goal)),
                ("Collateral", self.codec.format(info.collateral_amount)),
            ],
            error=None if info.is_funding else "Token is not in FUNDING state",
        )

    async def check_amount(self, run: DebugRun) -> DebugFragment:
        run.amount = self.codec.to_units(run.amount_text)
        valid = run.amount > 0
        return DebugFragment(
            check=DebugCheck.AMOUNT,
            passed=valid,
            lines=[("Amount", run.amount_text), ("Units", str(run.amount))],
            error=None if valid else "Amount must be greater than 0",
        )

    async def check_balance(self, run: DebugRun) -> DebugFragment:
        signer = self.ledger.signer_address
        native, run.quote_token = await asyncio.gather(
            self.actions.native_balance(signer),
            self.actions.quote_token(),
        )
        balance, allowance = await asyncio.gather(
            self.actions.read("balanceOf", signer, address=run.quote_token),
            self.actions.read("allowance", signer, self.ledger.contract_address, address=run.quote_token),
        )
        balance, allowance = int(balance), int(allowance)
        sufficient = balance >= run.amount

        lines = [
            ("Native", self.native_codec.format(native)),
            ("Quote Balance", self.codec.format(balance)),
            ("Allowance", self.codec.format(allowance)),
            ("Sufficient", "yes" if sufficient else "no"),
        ]
        if not sufficient:
            lines.append(("Required", self.codec.format(run.amount)))
        return DebugFragment(
            check=DebugCheck.BALANCE,
            passed=sufficient,
            lines=lines,
            error=None if sufficient else "Insufficient WSOL balance",
        )

    async def check_quote(self, run: DebugRun) -> DebugFragment:
        result = await self.actions.quote(run.token, run.amount)
        run.quote = result.quote
        return DebugFragment(
            check=DebugCheck.QUOTE,
            passed=True,
            lines=[
                ("Tokens to receive", self.codec.format(run.quote.receive_amount)),
                ("Available supply", self.codec.format(run.quote.available_supply)),
                ("After fee", self.codec.format(run.quote.contribution_without_fee)),
            ],
        )

    async def probe_gas(self, run: DebugRun) -> DebugFragment:
        gas = await self.actions.estimate_gas("buy", run.token, run.amount)
        return DebugFragment(
            check=DebugCheck.GAS,
            passed=True,
            lines=[("Estimated gas", str(gas))],
        )
