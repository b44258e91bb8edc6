"""
Text rendering of action results.

The same formatter serves both front-ends: Telegram gets legacy Markdown
(bold, inline code, explorer links), the terminal gets plain text.
"""

from typing import List, Optional

import base58

from ..amounts import AmountCodec
from ..errors import AuthorizationError, ChainError, LaunchpadError, PreconditionError
from ..execution.models import ProgressEvent, ProgressKind
from .models import (
    ContractInfo,
    DebugCheck,
    DebugReport,
    FeeClaimed,
    FeeUpdated,
    PurchaseResult,
    QuoteResult,
    SaleCreated,
    TokenDetails,
    WalletStatus,
)


DEBUG_TITLES = {
    DebugCheck.STATE: "📊 Token State",
    DebugCheck.AMOUNT: "💰 Amount Check",
    DebugCheck.BALANCE: "💼 Balance Check",
    DebugCheck.QUOTE: "🧮 Buy Calculation",
    DebugCheck.GAS: "⛽ Gas Estimation",
}

MARKDOWN_SPECIALS = ("\\", "_", "*", "`", "[")


def encode_base58(raw: bytes) -> str:
    return base58.b58encode(raw).decode("ascii")


class TextFormatter:
    """Renders results, progress milestones and errors as operator text."""

    def __init__(
        self,
        codec: Optional[AmountCodec] = None,
        native_codec: Optional[AmountCodec] = None,
        quote_symbol: str = "WSOL",
        native_symbol: str = "NEON",
        explorer_tx_url: str = "",
        explorer_address_url: str = "",
        faucet_url: str = "",
        markdown: bool = True,
    ):
        self.codec = codec or AmountCodec(9)
        self.native_codec = native_codec or AmountCodec(18)
        self.quote_symbol = quote_symbol
        self.native_symbol = native_symbol
        self.explorer_tx_url = explorer_tx_url
        self.explorer_address_url = explorer_address_url
        self.faucet_url = faucet_url
        self.markdown = markdown

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def escape(self, text: str) -> str:
        if not self.markdown:
            return text
        for char in MARKDOWN_SPECIALS:
            text = text.replace(char, "\\" + char)
        return text

    def bold(self, text: str) -> str:
        return f"*{text}*" if self.markdown else text

    def code(self, text: str) -> str:
        return f"`{text}`" if self.markdown else text

    def tx_link(self, tx_hash: str) -> str:
        if self.markdown and self.explorer_tx_url:
            return f"[{tx_hash}]({self.explorer_tx_url}{tx_hash})"
        return tx_hash

    def address_link(self, address: str) -> str:
        if self.markdown and self.explorer_address_url:
            return f"[{address}]({self.explorer_address_url}{address})"
        return address

    def quote_amount(self, units: int) -> str:
        return f"{self.codec.format(units)} {self.quote_symbol}"

    def tokens(self, units: int) -> str:
        return f"{self.codec.format(units)} tokens"

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def contract_info(self, info: ContractInfo) -> str:
        percent = f"{info.fee_ratio * 100:.2f}"
        return "\n".join([
            f"📊 {self.bold('Contract Info')}",
            f"👤 Owner: {self.address_link(info.owner)}",
            f"💰 Fee: {info.fee_percent}/{info.fee_denominator} ({percent}%)",
            f"💳 Accumulated Fee: {self.quote_amount(info.accumulated_fee)}",
            f"🪙 {self.quote_symbol} Token: {self.address_link(info.quote_token)}",
            f"📈 Bonding Curve: {self.address_link(info.bonding_curve)}",
            f"🏭 ERC20 Factory: {self.address_link(info.erc20_factory)}",
            f"💼 Payer: {self.code(encode_base58(info.payer))}",
        ])

    def token_details(self, details: TokenDetails) -> str:
        info = details.info
        return "\n".join([
            f"📊 {self.bold('Token Info')}",
            f"📍 Address: {self.code(details.address)}",
            f"🎯 Funding Goal: {self.quote_amount(info.funding_goal)}",
            f"💰 Collateral: {self.quote_amount(info.collateral_amount)}",
            f"📦 Initial Supply: {self.tokens(info.initial_supply)}",
            f"📦 Funding Supply: {self.tokens(info.funding_supply)}",
            f"⚡ State: {info.state.name}",
            f"🔗 Neon: {self.code(encode_base58(details.neon_address))}",
        ])

    def quote(self, result: QuoteResult) -> str:
        quote = result.quote
        return "\n".join([
            f"💰 {self.bold('Buy Calculation')}",
            f"🪙 {self.quote_symbol}: {self.codec.format(result.amount)}",
            f"🎯 Receive: {self.tokens(quote.receive_amount)}",
            f"📦 Available: {self.tokens(quote.available_supply)}",
            f"📊 Total: {self.tokens(quote.total_supply)}",
            f"💳 After Fee: {self.quote_amount(quote.contribution_without_fee)}",
        ])

    def sale_summary(
        self,
        name: str,
        symbol: str,
        decimals: int,
        funding_goal: str,
        initial_supply: str,
        funding_supply: str,
    ) -> str:
        return "\n".join([
            f"🚀 Creating sale: {self.bold(self.escape(f'{name} ({symbol})'))}",
            f"📋 {self.bold('Token Sale Parameters:')}",
            f"• Name: {self.escape(name)}",
            f"• Symbol: {self.escape(symbol)}",
            f"• Decimals: {decimals}",
            f"• Funding Goal: {funding_goal} {self.quote_symbol}",
            f"• Initial Supply: {initial_supply} tokens",
            f"• Funding Supply: {funding_supply} tokens",
        ])

    def sale_created(self, result: SaleCreated) -> str:
        address = self.address_link(result.token_address) if result.token_address else "N/A"
        return f"✅ Token sale created!\n📍 Address: {address}"

    def purchase_intro(self, token: str, amount_text: str) -> str:
        return f"🛒 Buying {self.bold(f'{self.escape(amount_text)} {self.quote_symbol}')} from {self.code(token)}"

    def purchase(self, result: PurchaseResult) -> str:
        lines = ["✅ Tokens purchased!"]
        if result.liquidity is not None:
            liquidity = result.liquidity
            lines += [
                "🎉 Funding goal reached! Pool created:",
                f"Pool: {self.code(encode_base58(liquidity.pool_id))}",
                f"LP Amount: {self.codec.format(liquidity.lp_amount)}",
                f"LP Lock NFT: {self.code(encode_base58(liquidity.lp_lock_nft))}",
            ]
        return "\n".join(lines)

    def fee_claimed(self, result: FeeClaimed) -> str:
        return f"✅ Fees claimed! ({self.quote_amount(result.amount)})"

    def fee_updated(self, result: FeeUpdated) -> str:
        return f"✅ Fee updated to {result.basis_points} bp"

    def wallet_status(self, status: WalletStatus) -> str:
        symbol = status.quote_symbol or self.quote_symbol
        balance_ok = "✅" if status.has_quote_balance else "❌"
        allowance_ok = "✅" if status.has_allowance else "⚠️"
        lines = [
            f"🔍 {self.bold('Wallet Setup Check')}",
            "",
            f"✅ {self.bold('Neon EVM Wallet:')}",
            f"• Address: {self.address_link(status.address)}",
            f"• {self.native_symbol} Balance: {self.native_codec.format(status.native_balance)} {self.native_symbol}",
            f"• Block: {status.block_number}",
            "",
            f"🪙 {self.bold(f'{self.quote_symbol} Setup:')}",
            f"• Contract: {self.address_link(status.quote_token)}",
            f"• Balance: {self.codec.format(status.quote_balance)} {symbol}",
            f"• Allowance: {self.codec.format(status.allowance)} {symbol}",
            "",
            f"{balance_ok} {self.quote_symbol} Balance: "
            + ("OK" if status.has_quote_balance else "Need tokens from faucet"),
            f"{allowance_ok} Allowance: "
            + ("OK" if status.has_allowance else "Will auto-approve on buy"),
        ]
        if self.faucet_url:
            lines += ["", f"💡 {self.bold(f'Need {self.quote_symbol}?')} Visit: {self.faucet_url}"]
        return "\n".join(lines)

    def debug_intro(self, token: str, amount_text: str) -> str:
        return f"🩺 Debugging purchase of {self.escape(amount_text)} {self.quote_symbol} from {self.code(token)}..."

    def debug_report(self, report: DebugReport) -> str:
        lines: List[str] = [f"🔍 {self.bold('Debug Report')}", ""]
        for fragment in report.fragments:
            lines.append(f"{DEBUG_TITLES[fragment.check]}:")
            for label, value in fragment.lines:
                lines.append(f"• {label}: {self.escape(value)}")
            status = "✅ OK" if fragment.passed else "❌ Failed"
            lines.append(f"• Status: {status}")
            if fragment.error:
                lines.append(f"❌ {self.bold('ERROR:')} {self.escape(fragment.error)}")
            if fragment.decoded_error:
                lines.append(f"• Decoded error: {self.escape(fragment.decoded_error)}")
            lines.append("")

        if report.passed:
            lines.append(f"✅ {self.bold('All checks passed!')} Transaction should work.")
        return "\n".join(lines).rstrip()

    # ------------------------------------------------------------------
    # Progress and errors
    # ------------------------------------------------------------------

    def progress(self, event: ProgressEvent) -> str:
        if event.kind == ProgressKind.APPROVING:
            return f"⏳ Approving {self.quote_symbol}..."
        if event.kind == ProgressKind.APPROVED:
            return f"✅ {self.quote_symbol} approved!"
        if event.kind == ProgressKind.SUBMITTED:
            return f"📝 Tx submitted: {self.tx_link(event.tx_hash or '')}\n⏳ Waiting for confirmation..."
        return f"✅ Tx confirmed: {self.tx_link(event.tx_hash or '')}"

    def error(self, error: Exception, action: Optional[str] = None) -> str:
        prefix = f"❌ Error {action}: " if action else "❌ Error: "
        if not isinstance(error, LaunchpadError):
            return prefix + self.escape(str(error))

        lines = [prefix + self.escape(error.message)]
        if isinstance(error, AuthorizationError):
            if error.required:
                lines.append(f"Contract owner: {self.code(error.required)}")
            if error.actual:
                lines.append(f"Current wallet: {self.code(error.actual)}")
        elif isinstance(error, PreconditionError):
            for key, value in error.details.items():
                lines.append(f"• {key.replace('_', ' ').title()}: {self.escape(str(value))}")
        elif isinstance(error, ChainError):
            if error.decoded:
                lines.append(f"❌ Custom error: {self.escape(error.decoded)}")
            if error.tx_hash:
                lines.append(f"Tx: {self.tx_link(error.tx_hash)}")
        return "\n".join(lines)
