"""
Front-end adapter interface.

An adapter owns the transport (terminal, chat) and nothing else: it turns
inbound events into ``ConversationEngine.select`` / ``handle`` calls and
delivers every ``OutboundMessage`` the engine renders.
"""

from abc import ABC, abstractmethod
from typing import Union

from ..core.conversation import ConversationEngine, OutboundMessage


class Frontend(ABC):
    """Transport adapter around a ConversationEngine."""

    name: str

    def __init__(self, engine: ConversationEngine):
        self.engine = engine

    @abstractmethod
    async def deliver(self, user_id: Union[str, int], text: str) -> None:
        """Send plain text to the user"""

    async def render(self, user_id: Union[str, int], message: OutboundMessage) -> None:
        """Deliver one engine message; adapters add menus and markup here"""
        await self.deliver(user_id, message.text)

    def renderer(self, user_id: Union[str, int]):
        """Bind ``render`` to one user for the engine's live callback."""
        async def render(message: OutboundMessage) -> None:
            await self.render(user_id, message)
        return render

    @abstractmethod
    async def run(self) -> None:
        """Serve until stopped"""


__all__ = ["Frontend", "OutboundMessage"]
