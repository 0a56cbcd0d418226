"""Abstract interface for the swap-quote service."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from urllib.parse import urlencode

from permit2swap.models import SwapQuote

PRICE_PATH = "/swap/permit2/price"
QUOTE_PATH = "/swap/permit2/quote"
SOURCES_PATH = "/sources"


@dataclass
class PriceRequest:
    """Query parameters shared by the price and quote endpoints."""

    chain_id: int
    sell_token: str
    buy_token: str
    sell_amount: int  # base units
    taker: str
    affiliate_fee_bps: int = 100
    surplus_collection: bool = True

    def to_params(self) -> dict[str, str]:
        """Query string values, all as strings, in a stable order."""
        return {
            "chainId": str(self.chain_id),
            "sellToken": self.sell_token,
            "buyToken": self.buy_token,
            "sellAmount": str(self.sell_amount),
            "taker": self.taker,
            "affiliateFee": str(self.affiliate_fee_bps),
            "surplusCollection": "true" if self.surplus_collection else "false",
        }

    def url_for(self, base_url: str, path: str) -> str:
        """Full request URL, for logging."""
        return f"{base_url.rstrip('/')}{path}?{urlencode(self.to_params())}"


class SwapAPI(ABC):
    """Capabilities the workflow needs from a swap aggregator."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        pass

    @abstractmethod
    async def get_sources(self, chain_id: int) -> list[str]:
        """
        List the liquidity sources available on a chain.

        Args:
            chain_id: EVM chain ID

        Returns:
            Source names, e.g. ["Uniswap_V3", "Aerodrome"]
        """
        pass

    @abstractmethod
    async def get_price(self, request: PriceRequest) -> SwapQuote:
        """Get an indicative price. Reports allowance issues but carries no transaction."""
        pass

    @abstractmethod
    async def get_quote(self, request: PriceRequest) -> SwapQuote:
        """Get a firm quote with a transaction and a Permit2 payload to sign."""
        pass

    async def close(self) -> None:
        """Release any held connections."""
        return None
