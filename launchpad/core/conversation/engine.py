"""
Conversation Engine

Front-end independent driver for operator conversations. A menu selection
either runs an immediate action or opens a Session; free text then fills the
session's form step by step, and the last step runs the flow's action.

Every produced message is handed to the optional ``render`` callback as soon
as it exists (so progress shows up while a transaction is pending) and is
also returned, in order, to the caller. Nothing raised by an action escapes
``select`` or ``handle``.
"""

import logging
from typing import Any, Awaitable, Callable, List, Optional, Union

import structlog

from ..actions.debug import DebugPipeline
from ..actions.executor import LaunchpadActions
from ..actions.formatting import TextFormatter
from ..amounts import AmountCodec
from ..errors import LaunchpadError, ValidationError
from ..execution.models import ProgressEvent
from .models import (
    ACTION_FLOWS,
    MENU_ORDER,
    Action,
    Flow,
    InputKind,
    MessageKind,
    OutboundMessage,
    Session,
    StepSpec,
)
from .store import SessionStore


logger = logging.getLogger(__name__)

Renderer = Callable[[OutboundMessage], Awaitable[None]]

SKIP_WORDS = ("", "skip", "default")

ACTION_LABELS = {
    Action.CONTRACT_INFO: "fetching contract info",
    Action.TOKEN_INFO: "fetching token info",
    Action.CALCULATE_BUY: "calculating buy",
    Action.CREATE_TOKEN: "creating token sale",
    Action.BUY_TOKENS: "buying tokens",
    Action.CLAIM_FEES: "claiming fees",
    Action.SET_FEE: "setting fee",
    Action.WALLET_SETUP: "checking wallet setup",
    Action.DEBUG_BUY: "debugging buy",
}


def parse_step_input(expected: StepSpec, text: str, codec: AmountCodec) -> Any:
    """Validate ``text`` for ``expected``; raises ``ValidationError`` with the reprompt reason."""
    raw = (text or "").strip()

    if expected.kind == InputKind.TEXT:
        if not raw:
            raise ValidationError(expected.invalid)
        return raw

    if expected.kind == InputKind.AMOUNT:
        try:
            codec.to_units(raw)
        except ValidationError as e:
            raise ValidationError(f"{expected.invalid} ({e.message})")
        return raw

    if expected.kind == InputKind.INTEGER:
        try:
            return int(raw)
        except ValueError:
            raise ValidationError(expected.invalid)

    if expected.kind == InputKind.DECIMALS:
        if raw.lower() in SKIP_WORDS:
            return None
        try:
            value = int(raw)
        except ValueError:
            raise ValidationError(expected.invalid)
        if not 0 <= value <= 255:
            raise ValidationError(expected.invalid)
        return value

    raise ValueError(f"Unknown input kind: {expected.kind}")


class Outbox:
    """Collects messages for one inbound event and streams them to ``render``."""

    def __init__(self, render: Optional[Renderer] = None, markdown: bool = False):
        self.render = render
        self.markdown = markdown
        self.messages: List[OutboundMessage] = []

    async def emit(self, text: str, kind: MessageKind = MessageKind.INFO, menu: bool = False) -> None:
        message = OutboundMessage(text=text, kind=kind, markdown=self.markdown, menu=menu)
        self.messages.append(message)
        if self.render is None:
            return
        try:
            await self.render(message)
        except Exception as e:
            logger.error(f"Failed to render {kind.value} message: {e}")


class ConversationEngine:
    """
    Per-user multi-step input collection over a SessionStore.

    Events from the same user are serialized with the store's per-user lock;
    events from different users interleave freely.
    """

    def __init__(
        self,
        actions: LaunchpadActions,
        formatter: Optional[TextFormatter] = None,
        store: Optional[SessionStore] = None,
        pipeline: Optional[DebugPipeline] = None,
        network_name: str = "Neon EVM Devnet",
    ):
        self.actions = actions
        self.formatter = formatter or TextFormatter(codec=actions.codec)
        self.store = store or SessionStore()
        self.pipeline = pipeline or DebugPipeline(actions)
        self.network_name = network_name

    @property
    def codec(self) -> AmountCodec:
        return self.actions.codec

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    async def select(
        self,
        user_id: Union[str, int],
        action: Union[Action, str],
        render: Optional[Renderer] = None,
    ) -> List[OutboundMessage]:
        """Handle a menu selection."""
        user_id = str(user_id)
        outbox = self._outbox(render)
        chosen = Action.parse(action)

        async with self.store.lock_for(user_id):
            with structlog.contextvars.bound_contextvars(
                user_id=user_id, action=chosen.value if chosen else str(action)
            ):
                if chosen is None:
                    await self._menu_reply(outbox)
                else:
                    await self._select(user_id, chosen, outbox)
        return outbox.messages

    async def handle(
        self,
        user_id: Union[str, int],
        text: str,
        render: Optional[Renderer] = None,
    ) -> List[OutboundMessage]:
        """Handle free text: the next step's input, or a menu selection by name."""
        user_id = str(user_id)
        outbox = self._outbox(render)

        async with self.store.lock_for(user_id):
            session = self.store.get(user_id)
            if session is None:
                chosen = Action.parse(text)
                with structlog.contextvars.bound_contextvars(
                    user_id=user_id, action=chosen.value if chosen else None
                ):
                    if chosen is None:
                        await self._menu_reply(outbox)
                    else:
                        await self._select(user_id, chosen, outbox)
                return outbox.messages

            with structlog.contextvars.bound_contextvars(
                user_id=user_id, action=session.spec.action.value, step=session.step.value
            ):
                await self._advance(session, text, outbox)
        return outbox.messages

    # ------------------------------------------------------------------
    # Banner and help
    # ------------------------------------------------------------------

    async def welcome(self) -> str:
        ledger = self.actions.ledger
        try:
            block = str(await ledger.block_number())
        except Exception as e:
            logger.warning(f"Could not read block number for the banner: {e}")
            block = "unavailable"

        fmt = self.formatter
        return "\n".join([
            f"🚀 {fmt.bold('Meme Launchpad Operator')}",
            "",
            f"🌐 Network: {self.network_name}",
            f"📍 Contract: {fmt.code(ledger.contract_address)}",
            f"👛 Wallet: {fmt.code(ledger.signer_address)}",
            f"📦 Block: {block}",
            "",
            "Choose an action:",
        ])

    def help(self) -> str:
        fmt = self.formatter
        symbol = fmt.quote_symbol
        return "\n".join([
            f"❓ {fmt.bold('Available actions')}",
            "",
            "• 📊 Contract Info → owner, fees and linked contracts",
            "• 🔍 Token Info → enter token address → sale details",
            f"• 💰 Calculate Buy → enter token & {symbol} → estimated tokens",
            "• 🚀 Create Token Sale → name, symbol, decimals, goal, supplies",
            f"• 🛒 Buy Tokens → enter token & {symbol} → approve if needed, then buy",
            "• 💎 Claim Fees → owner only, claims accumulated fees",
            "• ⚙️ Set Fee % → owner only, fee in basis points",
            f"• 🔧 Wallet Setup → native and {symbol} balances, allowance",
            "• 🩺 Debug Buy → step-by-step purchase diagnostics",
            "",
            f"Amounts use {self.codec.decimals} decimals, e.g. 0.5 {symbol}.",
        ])

    def menu(self) -> str:
        return "\n".join(f"{i}. {action.label}" for i, action in enumerate(MENU_ORDER, start=1))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _outbox(self, render: Optional[Renderer]) -> Outbox:
        return Outbox(render, markdown=self.formatter.markdown)

    async def _menu_reply(self, outbox: Outbox) -> None:
        await outbox.emit("Please choose from the menu.", MessageKind.INFO, menu=True)

    async def _select(self, user_id: str, action: Action, outbox: Outbox) -> None:
        flow = ACTION_FLOWS.get(action)
        if flow is not None:
            session = self.store.start(user_id, flow)
            logger.info("Started %s flow", flow.value)
            await outbox.emit(session.current.prompt, MessageKind.PROMPT)
            return

        if action == Action.HELP:
            await outbox.emit(self.help(), MessageKind.INFO, menu=True)
        elif action == Action.CONTRACT_INFO:
            await self._run(outbox, action, self._contract_info)
        elif action == Action.CLAIM_FEES:
            await self._run(outbox, action, self._claim_fees)
        elif action == Action.WALLET_SETUP:
            await self._run(outbox, action, self._wallet_setup)

    async def _advance(self, session: Session, text: str, outbox: Outbox) -> None:
        expected = session.current
        try:
            value = parse_step_input(expected, text, self.codec)
        except ValidationError as e:
            logger.info("Rejected input for %s: %s", expected.step.value, e.message)
            await outbox.emit(f"❌ {e.message}. {expected.prompt}", MessageKind.REPROMPT)
            return

        session.store(value)
        following = session.advance()
        if following is not None:
            await outbox.emit(following.prompt, MessageKind.PROMPT)
            return

        self.store.discard(session.user_id)
        await self._run(outbox, session.spec.action, lambda out: self._complete(session, out))

    async def _run(
        self,
        outbox: Outbox,
        action: Action,
        body: Callable[[Outbox], Awaitable[None]],
    ) -> None:
        label = ACTION_LABELS.get(action)
        try:
            await body(outbox)
        except LaunchpadError as e:
            logger.warning(f"Action {action.value} failed: {e.message}")
            await outbox.emit(self.formatter.error(e, label), MessageKind.ERROR, menu=True)
        except Exception as e:
            logger.exception(f"Unexpected error in {action.value}: {e}")
            await outbox.emit(self.formatter.error(e, label), MessageKind.ERROR, menu=True)

    def _progress(self, outbox: Outbox):
        async def report(event: ProgressEvent) -> None:
            await outbox.emit(self.formatter.progress(event), MessageKind.PROGRESS)
        return report

    async def _result(self, outbox: Outbox, text: str) -> None:
        await outbox.emit(text, MessageKind.RESULT, menu=True)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def _contract_info(self, outbox: Outbox) -> None:
        info = await self.actions.contract_info()
        await self._result(outbox, self.formatter.contract_info(info))

    async def _claim_fees(self, outbox: Outbox) -> None:
        await outbox.emit("💎 Claiming fees...", MessageKind.INFO)
        result = await self.actions.claim_fees(progress=self._progress(outbox))
        await self._result(outbox, self.formatter.fee_claimed(result))

    async def _wallet_setup(self, outbox: Outbox) -> None:
        status = await self.actions.wallet_setup()
        await self._result(outbox, self.formatter.wallet_status(status))

    async def _complete(self, session: Session, outbox: Outbox) -> None:
        form = session.form
        fmt = self.formatter
        progress = self._progress(outbox)

        if session.flow == Flow.TOKEN_INFO:
            details = await self.actions.token_info(form.token)
            await self._result(outbox, fmt.token_details(details))

        elif session.flow == Flow.QUOTE:
            quote = await self.actions.quote(form.token, form.amount)
            await self._result(outbox, fmt.quote(quote))

        elif session.flow == Flow.CREATE_SALE:
            decimals = self.actions.default_token_decimals if form.decimals is None else form.decimals
            await outbox.emit(
                fmt.sale_summary(
                    form.name,
                    form.symbol,
                    decimals,
                    form.funding_goal,
                    form.initial_supply,
                    form.funding_supply,
                ),
                MessageKind.INFO,
            )
            created = await self.actions.create_sale(
                form.name,
                form.symbol,
                decimals,
                form.funding_goal,
                form.initial_supply,
                form.funding_supply,
                progress=progress,
            )
            await self._result(outbox, fmt.sale_created(created))

        elif session.flow == Flow.BUY:
            await outbox.emit(fmt.purchase_intro(form.token, form.amount), MessageKind.INFO)
            purchase = await self.actions.buy(form.token, form.amount, progress=progress)
            await self._result(outbox, fmt.purchase(purchase))

        elif session.flow == Flow.SET_FEE:
            updated = await self.actions.set_fee(form.basis_points, progress=progress)
            await self._result(outbox, fmt.fee_updated(updated))

        elif session.flow == Flow.DEBUG_BUY:
            await outbox.emit(fmt.debug_intro(form.token, form.amount), MessageKind.INFO)
            report = await self.pipeline.run(form.token, form.amount)
            await self._result(outbox, fmt.debug_report(report))
