"""Front-end adapters: terminal and Telegram."""

from .base import Frontend, OutboundMessage
from .terminal import TerminalFrontend

__all__ = ["Frontend", "OutboundMessage", "TerminalFrontend"]
