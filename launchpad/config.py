from pathlib import Path
from typing import Any, List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.errors import ConfigError


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Normalize trailing slashes on explorer templates."""

        super().model_post_init(__context)

        for name in ("explorer_tx_url", "explorer_address_url"):
            value = getattr(self, name)
            if value and not value.endswith("/"):
                object.__setattr__(self, name, value + "/")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Ledger Connection
    neon_rpc: str = Field(
        default="https://devnet.neonevm.org",
        description="JSON-RPC endpoint of the Neon EVM network",
        validation_alias=AliasChoices("neon_rpc", "NEON_RPC", "rpc_url", "RPC_URL"),
    )
    chain_id: int = Field(default=245022926, description="Chain ID of the Neon EVM network")
    network_name: str = Field(default="Neon Devnet", description="Human readable network name")

    # Launchpad Contract
    contract_address: str = Field(default="", description="Launchpad contract address")
    abi_path: Path = Field(
        default=BASE_DIR / "MemeLaunchpad.json",
        description="Hardhat/Foundry artifact (or bare ABI list) for the launchpad contract",
    )

    # Signer
    private_key_owner: str = Field(
        default="",
        description="Private key of the operator wallet",
        validation_alias=AliasChoices("private_key_owner", "PRIVATE_KEY_OWNER", "PRIVATE_KEY"),
    )

    # Chat Front-end
    telegram_bot_token: str = Field(default="", description="Telegram bot token")

    # Amounts
    amount_decimals: int = Field(
        default=9,
        ge=0,
        le=36,
        description="Decimal places of the quote asset (WSOL) and sale tokens",
    )
    native_decimals: int = Field(default=18, description="Decimal places of the native gas token")
    native_symbol: str = Field(default="NEON", description="Symbol of the native gas token")
    quote_symbol: str = Field(default="WSOL", description="Symbol of the quote asset")
    default_token_decimals: int = Field(
        default=9,
        ge=0,
        le=255,
        description="Decimals used for a new sale when the operator skips the step",
    )

    # Presentation
    explorer_tx_url: str = Field(
        default="https://neon-devnet.blockscout.com/tx/",
        description="Explorer URL prefix for transactions",
    )
    explorer_address_url: str = Field(
        default="https://neon-devnet.blockscout.com/address/",
        description="Explorer URL prefix for addresses",
    )
    faucet_url: str = Field(default="https://neonfaucet.org/", description="Where to get test WSOL")

    # Transaction Waiting
    tx_receipt_timeout_seconds: int = Field(
        default=600,
        ge=1,
        description="How long the web3 provider polls for a receipt before giving up",
    )
    tx_poll_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Receipt poll interval",
    )

    def missing(self, *fields: str) -> List[str]:
        return [name for name in fields if not getattr(self, name, None)]

    def require(self, *fields: str) -> None:
        """Raise ``ConfigError`` naming every empty setting in ``fields``."""
        missing = self.missing(*fields)
        if missing:
            names = ", ".join(name.upper() for name in missing)
            raise ConfigError(f"Missing {names} in environment or .env", missing=missing)


# Global settings instance
settings = Settings()
