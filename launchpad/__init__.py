"""Operator core for a token-sale launchpad contract."""

__version__ = "0.1.0"
