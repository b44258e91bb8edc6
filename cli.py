#!/usr/bin/env python3
"""Operator CLI for the meme launchpad contract"""

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from launchpad.bootstrap import build_engine
from launchpad.config import settings
from launchpad.core.errors import LaunchpadError
from launchpad.logging_config import setup_logging


async def cli_terminal():
    """Interactive menu in the terminal"""
    from launchpad.frontends import TerminalFrontend

    engine = build_engine(settings, markdown=False)
    await TerminalFrontend(engine).run()


async def cli_telegram():
    """Serve the Telegram bot until interrupted"""
    from launchpad.frontends.telegram import TelegramFrontend

    settings.require("telegram_bot_token")
    engine = build_engine(settings, markdown=True)
    print(f"🤖 Telegram bot starting on {settings.network_name}...")
    await TelegramFrontend(engine, settings.telegram_bot_token).run()


async def cli_debug_buy(token: str, amount: str):
    """Run the buy diagnostics once and print the report"""
    engine = build_engine(settings, markdown=False)
    print(engine.formatter.debug_intro(token, amount))
    report = await engine.pipeline.run(token, amount)
    print(engine.formatter.debug_report(report))
    return 0 if report.passed else 1


async def cli_wallet_setup():
    """Print native and WSOL balances plus the launchpad allowance"""
    engine = build_engine(settings, markdown=False)
    status = await engine.actions.wallet_setup()
    print(engine.formatter.wallet_status(status))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Meme Launchpad operator")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("terminal", help="Interactive terminal menu")
    subparsers.add_parser("telegram", help="Run the Telegram bot")

    debug_parser = subparsers.add_parser("debug-buy", help="Diagnose a token purchase")
    debug_parser.add_argument("token", help="Token address")
    debug_parser.add_argument("amount", help="WSOL amount, e.g. 0.5")

    subparsers.add_parser("wallet-setup", help="Check the operator wallet")

    return parser


async def run(args: argparse.Namespace) -> int:
    command = args.command.lower()

    if command == "terminal":
        await cli_terminal()
    elif command == "telegram":
        await cli_telegram()
    elif command == "debug-buy":
        return await cli_debug_buy(args.token, args.amount)
    elif command == "wallet-setup":
        await cli_wallet_setup()
    else:
        print(f"❌ Unknown command: {command}")
        return 2
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(args.log_level)
    try:
        return asyncio.run(run(args))
    except LaunchpadError as e:
        print(f"❌ {e.message}")
        return 1
    except KeyboardInterrupt:
        print("\nGoodbye! 👋")
        return 0


if __name__ == "__main__":
    sys.exit(main())
