"""
Conversation Module

Per-user multi-step input collection shared by the terminal and Telegram
front-ends.

Usage:
    from launchpad.core.conversation import ConversationEngine, Action

    engine = ConversationEngine(actions)
    await engine.select(user_id, Action.BUY_TOKENS)
    messages = await engine.handle(user_id, "0xToken...")
"""

from .models import (
    Action,
    Flow,
    Step,
    InputKind,
    Session,
    OutboundMessage,
    MessageKind,
    MENU_ORDER,
    FLOWS,
)
from .store import SessionStore
from .engine import ConversationEngine, Renderer, parse_step_input

__all__ = [
    "ConversationEngine",
    "SessionStore",
    "Renderer",
    "parse_step_input",
    # Models
    "Action",
    "Flow",
    "Step",
    "InputKind",
    "Session",
    "OutboundMessage",
    "MessageKind",
    "MENU_ORDER",
    "FLOWS",
]
