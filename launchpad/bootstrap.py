"""Wiring: settings -> ledger -> actions -> engine."""

import logging
from typing import Optional

from .config import Settings, settings as default_settings
from .core.actions import DebugPipeline, LaunchpadActions, TextFormatter
from .core.amounts import AmountCodec
from .core.conversation import ConversationEngine, SessionStore
from .core.execution import ErrorDecoder
from .providers import LedgerProvider, NeonLedger


logger = logging.getLogger(__name__)


def build_formatter(settings: Settings, markdown: bool = True) -> TextFormatter:
    return TextFormatter(
        codec=AmountCodec(settings.amount_decimals),
        native_codec=AmountCodec(settings.native_decimals),
        quote_symbol=settings.quote_symbol,
        native_symbol=settings.native_symbol,
        explorer_tx_url=settings.explorer_tx_url,
        explorer_address_url=settings.explorer_address_url,
        faucet_url=settings.faucet_url,
        markdown=markdown,
    )


def build_actions(
    settings: Optional[Settings] = None,
    ledger: Optional[LedgerProvider] = None,
) -> LaunchpadActions:
    """Actions over ``ledger``, or over a NeonLedger built from settings."""
    settings = settings or default_settings
    decoder = ErrorDecoder()
    if ledger is None:
        ledger = NeonLedger.from_settings(settings)
        decoder = ErrorDecoder.with_abi_errors(ledger.abi)
    logger.info(
        "Ledger ready",
        extra={"network": settings.network_name, "contract": ledger.contract_address},
    )
    return LaunchpadActions(
        ledger,
        codec=AmountCodec(settings.amount_decimals),
        decoder=decoder,
        default_token_decimals=settings.default_token_decimals,
    )


def build_engine(
    settings: Optional[Settings] = None,
    ledger: Optional[LedgerProvider] = None,
    markdown: bool = True,
) -> ConversationEngine:
    settings = settings or default_settings
    actions = build_actions(settings, ledger)
    return ConversationEngine(
        actions,
        formatter=build_formatter(settings, markdown=markdown),
        store=SessionStore(),
        pipeline=DebugPipeline(actions, native_decimals=settings.native_decimals),
        network_name=settings.network_name,
    )
