"""Application configuration using pydantic-settings.

Aggregator endpoints, timeouts and wallet adapter selection are all
driven from environment variables (or a local .env file).
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")
    is_testnet: bool = Field(default=False, description="Use testnet aggregator and explorers")

    # ======================
    # Aggregator (Symbiosis)
    # ======================
    aggregator_api_url: str = Field(
        default="https://api-v2.symbiosis.finance/crosschain",
        description="Mainnet aggregator base URL",
    )
    aggregator_testnet_api_url: str = Field(
        default="https://api.testnet.symbiosis.finance/crosschain",
        description="Testnet aggregator base URL",
    )
    aggregator_timeout: float = Field(
        default=15.0, description="Timeout for quote/execute calls (seconds)"
    )
    routes_timeout: float = Field(
        default=10.0, description="Timeout for the route capability query (seconds)"
    )
    approval_spender: str = Field(
        default="0x6571d6be3d8460CF5F7d6711Cd9961860029D05F",
        description="Aggregator contract approved to spend ERC-20 tokens",
    )

    # ======================
    # Swap defaults
    # ======================
    default_slippage: float = Field(
        default=0.5, description="Default slippage tolerance in percent (0.5 = 0.5%)"
    )
    history_size: int = Field(
        default=20, ge=1, description="Transactions kept in the history view"
    )
    max_sessions: int = Field(
        default=256, ge=1, description="Sessions kept before idle ones are evicted"
    )

    # ======================
    # Wallet
    # ======================
    wallet_mode: str = Field(default="dryrun", description="Wallet adapter: dryrun or rpc")
    wallet_rpc_url: str = Field(
        default="http://127.0.0.1:8545", description="JSON-RPC endpoint of the wallet provider"
    )
    wallet_address: str = Field(
        default="0x000000000000000000000000000000000000dEaD",
        description="Account exposed by the dry-run wallet",
    )
    receipt_poll_interval: float = Field(
        default=2.0, description="Seconds between receipt polls"
    )
    receipt_timeout: Optional[float] = Field(
        default=None, description="Give up waiting for a receipt after this many seconds"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def get_aggregator_url(self, is_testnet: Optional[bool] = None) -> str:
        """Get the aggregator base URL for mainnet or testnet."""
        if is_testnet is None:
            is_testnet = self.is_testnet
        url = self.aggregator_testnet_api_url if is_testnet else self.aggregator_api_url
        return url.rstrip("/")

    def get_safe_dict(self) -> dict:
        """Return settings dict safe for health endpoints."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "is_testnet": self.is_testnet,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "aggregator": {
                "mainnet": self.aggregator_api_url,
                "testnet": self.aggregator_testnet_api_url,
                "timeout": self.aggregator_timeout,
                "routes_timeout": self.routes_timeout,
            },
            "wallet": {
                "mode": self.wallet_mode,
                "rpc": self._redact_url(self.wallet_rpc_url) if self.wallet_mode == "rpc" else None,
            },
            "swap": {
                "default_slippage": self.default_slippage,
                "history_size": self.history_size,
                "max_sessions": self.max_sessions,
            },
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact credentials embedded in an RPC URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            if "@" in rest:
                creds, host = rest.rsplit("@", 1)
                if ":" in creds:
                    user, _ = creds.split(":", 1)
                    return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
