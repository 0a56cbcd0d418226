"""Application configuration using pydantic-settings.

Credentials and endpoints come from the process environment (or a local
``.env`` file). The three credentials have no defaults; everything else
describes the swap and can be overridden per run.
"""

from decimal import Decimal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from permit2swap.exceptions import ConfigError

REQUIRED_VARIABLES = ("PRIVATE_KEY", "ZERO_EX_API_KEY", "RPC_URL")

# Scroll mainnet
SCROLL_CHAIN_ID = 534352
SCROLL_WETH = "0x5300000000000000000000000000000000000004"
SCROLL_WSTETH = "0xf610A9dfB7C89644979b4A0f27063E9e7d7Cda32"


class Settings(BaseSettings):
    """Swap settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Credentials (required)
    # ======================
    private_key: str = Field(description="Hex private key of the taker account")
    zero_ex_api_key: str = Field(description="0x Swap API key")
    rpc_url: str = Field(description="HTTP RPC endpoint of the chain node")

    # ======================
    # 0x Swap API
    # ======================
    zero_ex_api_url: str = Field(default="https://api.0x.org", description="0x API base URL")
    zero_ex_api_version: str = Field(default="v2", description="Value of the 0x-version header")
    http_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")

    # ======================
    # Swap parameters
    # ======================
    chain_id: int = Field(default=SCROLL_CHAIN_ID, description="Chain ID (Scroll by default)")
    sell_token: str = Field(default=SCROLL_WETH, description="Token to sell (WETH)")
    buy_token: str = Field(default=SCROLL_WSTETH, description="Token to buy (wstETH)")
    sell_amount: Decimal = Field(default=Decimal("0.1"), description="Amount to sell in whole tokens")
    affiliate_fee_bps: int = Field(default=100, description="Affiliate fee in basis points")
    surplus_collection: bool = Field(default=True, description="Let 0x collect positive slippage")

    # ======================
    # Chain
    # ======================
    explorer_url: str = Field(default="https://scrollscan.com", description="Block explorer base URL")
    receipt_timeout: int = Field(default=180, description="Seconds to wait for an approval receipt")

    # ======================
    # Runtime
    # ======================
    debug: bool = Field(default=False, description="Enable debug logging")

    @field_validator("private_key", "zero_ex_api_key", "rpc_url")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip().strip("'\"")
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("private_key")
    @classmethod
    def _normalize_key(cls, value: str) -> str:
        if not value.startswith("0x"):
            value = f"0x{value}"
        try:
            int(value, 16)
        except ValueError:
            raise ValueError("private key must be hex") from None
        if len(value) != 66:
            raise ValueError("private key must be 32 bytes")
        return value

    @field_validator("sell_amount")
    @classmethod
    def _positive_amount(cls, value: Decimal) -> Decimal:
        if value <= 0:
            raise ValueError("sell amount must be positive")
        return value

    @property
    def api_headers(self) -> dict[str, str]:
        """Headers sent with every 0x API request."""
        return {
            "Content-Type": "application/json",
            "0x-api-key": self.zero_ex_api_key,
            "0x-version": self.zero_ex_api_version,
        }

    def tx_url(self, tx_hash: str) -> str:
        """Explorer link for a transaction hash."""
        return f"{self.explorer_url.rstrip('/')}/tx/{tx_hash}"

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "chain_id": self.chain_id,
            "rpc_url": self._redact_url(self.rpc_url),
            "zero_ex_api_url": self.zero_ex_api_url,
            "zero_ex_api_key": "***" if self.zero_ex_api_key else "(not set)",
            "private_key": "***" if self.private_key else "(not set)",
            "sell_token": self.sell_token,
            "buy_token": self.buy_token,
            "sell_amount": str(self.sell_amount),
            "affiliate_fee_bps": self.affiliate_fee_bps,
            "surplus_collection": self.surplus_collection,
            "debug": self.debug,
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Hide the path of an RPC URL, where providers put their API keys."""
        if "://" not in url:
            return url
        proto, rest = url.split("://", 1)
        host = rest.split("/", 1)[0]
        if "@" in host:
            host = host.rsplit("@", 1)[1]
        return f"{proto}://{host}/***" if "/" in rest.strip("/") else f"{proto}://{host}"


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, failing fast on missing credentials.

    Raises:
        ConfigError: naming every required variable that is absent or empty.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        missing = []
        invalid = []
        for error in e.errors():
            name = str(error["loc"][0]).upper() if error.get("loc") else "?"
            if name in REQUIRED_VARIABLES and (
                error["type"] == "missing" or "empty" in error.get("msg", "")
            ):
                missing.append(name)
            else:
                invalid.append(f"{name}: {error.get('msg')}")
        if missing:
            raise ConfigError(missing=sorted(set(missing))) from None
        raise ConfigError(message=f"Invalid configuration: {'; '.join(invalid)}") from None

