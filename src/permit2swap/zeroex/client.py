"""0x Swap API v2 integration.

Uses the Permit2 flow: the taker approves the Permit2 contract once, then
authorizes each trade with an off-chain EIP-712 signature appended to the
settlement calldata.
API docs: https://0x.org/docs/api#tag/Swap
"""

import logging
from typing import Any, Optional

import httpx

from permit2swap.config import Settings
from permit2swap.exceptions import SwapAPIError
from permit2swap.models import SwapQuote
from permit2swap.zeroex.base import PRICE_PATH, QUOTE_PATH, SOURCES_PATH, PriceRequest, SwapAPI

logger = logging.getLogger(__name__)


class ZeroExClient(SwapAPI):
    """0x Swap API client.

    Holds one ``httpx.AsyncClient`` for its lifetime; call ``close()`` (or use
    it as an async context manager) when done.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize 0x client.

        Args:
            settings: Loaded settings providing base URL, headers and timeout
            transport: Optional httpx transport, used by tests to stub the API
        """
        self.base_url = settings.zero_ex_api_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=settings.api_headers,
            timeout=settings.http_timeout,
            transport=transport,
        )

    @property
    def name(self) -> str:
        return "0x"

    async def __aenter__(self) -> "ZeroExClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        """GET a JSON document, raising SwapAPIError on non-2xx responses."""
        logger.debug(f"GET {self.base_url}{path} params={params}")
        response = await self._client.get(path, params=params)

        if not response.is_success:
            logger.warning(f"0x API error: {response.status_code} - {response.text}")
            raise SwapAPIError(response.status_code, response.text, endpoint=path)

        return response.json()

    async def get_sources(self, chain_id: int) -> list[str]:
        data = await self._get(SOURCES_PATH, {"chainId": str(chain_id)})
        sources = data.get("sources") or []
        # v1 returned a mapping of name -> metadata, v2 a plain list
        if isinstance(sources, dict):
            return list(sources.keys())
        return list(sources)

    async def get_price(self, request: PriceRequest) -> SwapQuote:
        logger.debug(f"Fetching price: {request.url_for(self.base_url, PRICE_PATH)}")
        data = await self._get(PRICE_PATH, request.to_params())
        return SwapQuote.from_dict(data)

    async def get_quote(self, request: PriceRequest) -> SwapQuote:
        logger.debug(f"Fetching quote: {request.url_for(self.base_url, QUOTE_PATH)}")
        data = await self._get(QUOTE_PATH, request.to_params())
        return SwapQuote.from_dict(data)


def create_zeroex_client(settings: Settings) -> ZeroExClient:
    """Create a 0x client instance."""
    return ZeroExClient(settings)
