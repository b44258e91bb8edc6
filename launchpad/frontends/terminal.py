"""Interactive terminal front-end."""

import asyncio
import logging
from typing import Callable, Union

from ..core.conversation import ConversationEngine, OutboundMessage
from .base import Frontend


logger = logging.getLogger(__name__)

TERMINAL_USER = "terminal"
EXIT_WORDS = ("exit", "quit", "q")


class TerminalFrontend(Frontend):
    """Numbered menu on stdin/stdout for a single local operator."""

    name = "terminal"

    def __init__(
        self,
        engine: ConversationEngine,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ):
        super().__init__(engine)
        self.input = input_func
        self.output = output

    async def deliver(self, user_id: Union[str, int], text: str) -> None:
        self.output(text)

    async def render(self, user_id: Union[str, int], message: OutboundMessage) -> None:
        await self.deliver(user_id, message.text)
        if message.menu:
            self.show_menu()

    def show_menu(self) -> None:
        self.output("")
        self.output(self.engine.menu())
        self.output("Type a number, 'menu' or 'exit'")

    async def run(self) -> None:
        self.output(await self.engine.welcome())
        self.show_menu()
        render = self.renderer(TERMINAL_USER)

        while True:
            try:
                text = (await asyncio.to_thread(self.input, "\n> ")).strip()
            except (KeyboardInterrupt, EOFError):
                self.output("\nGoodbye! 👋")
                break

            if text.lower() in EXIT_WORDS:
                self.output("Goodbye! 👋")
                break
            if text.lower() == "menu":
                self.show_menu()
                continue
            if not text and not self.engine.store.exists(TERMINAL_USER):
                continue

            await self.engine.handle(TERMINAL_USER, text, render=render)
