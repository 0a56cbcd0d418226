"""Swap workflow: sources -> price (+approval) -> quote -> permit -> submit.

Each stage awaits the previous one. Sources lookup, price/quote fetch and
submission each log their own failures; a stage that yields nothing stops
the run with a typed error instead of letting a later stage trip over it.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from permit2swap.chain.base import MAX_UINT256, ChainClient
from permit2swap.config import Settings
from permit2swap.exceptions import Permit2SwapError, QuoteUnavailableError
from permit2swap.models import SwapQuote
from permit2swap.permit import sign_permit, splice_signature
from permit2swap.reporting import format_sources, log_liquidity_breakdown, log_token_taxes
from permit2swap.utils.units import from_base_units, to_base_units
from permit2swap.zeroex.base import PRICE_PATH, PriceRequest, SwapAPI

logger = logging.getLogger(__name__)


@dataclass
class SwapResult:
    """Outcome of one workflow run."""
    success: bool
    stage: str
    tx_hash: Optional[str] = None
    explorer_url: Optional[str] = None
    error: Optional[str] = None
    quote: Optional[SwapQuote] = None


class SwapWorkflow:
    """Runs a single Permit2 swap against one chain client and one swap API."""

    def __init__(
        self,
        settings: Settings,
        chain: ChainClient,
        api: SwapAPI,
        dry_run: bool = False,
    ):
        self.settings = settings
        self.chain = chain
        self.api = api
        self.dry_run = dry_run
        self.decimals: Optional[int] = None

    async def report_sources(self) -> list[str]:
        """Log the liquidity sources available on the chain. Never raises."""
        try:
            sources = await self.api.get_sources(self.settings.chain_id)
        except Exception as e:
            logger.error(f"Error fetching liquidity sources from {self.api.name}: {e}")
            return []

        logger.info(f"Liquidity sources for chain {self.settings.chain_id}:")
        logger.info(format_sources(sources))
        return sources

    async def sell_amount(self, amount: Optional[Decimal] = None) -> int:
        """Sell amount in base units of the sell token."""
        self.decimals = await self.chain.get_token_decimals(self.settings.sell_token)
        return to_base_units(amount if amount is not None else self.settings.sell_amount, self.decimals)

    def build_price_request(self, sell_amount: int) -> PriceRequest:
        return PriceRequest(
            chain_id=self.settings.chain_id,
            sell_token=self.settings.sell_token,
            buy_token=self.settings.buy_token,
            sell_amount=sell_amount,
            taker=self.chain.address,
            affiliate_fee_bps=self.settings.affiliate_fee_bps,
            surplus_collection=self.settings.surplus_collection,
        )

    async def fetch_price(self, request: PriceRequest) -> Optional[SwapQuote]:
        """Fetch an indicative price, approving Permit2 first if the API asks for it.

        Returns None on any network, parse or approval failure.
        """
        try:
            logger.info(f"Fetching price to swap {request.sell_amount} base units of {request.sell_token}")
            logger.info(request.url_for(self.settings.zero_ex_api_url, PRICE_PATH))
            price = await self.api.get_price(request)
            logger.debug(f"Price response: {price.raw}")

            if price.needs_approval:
                spender = price.allowance_issue.spender
                logger.info(f"Approving Permit2 ({spender}) to spend {request.sell_token}...")
                await self.chain.approve(request.sell_token, spender, MAX_UINT256)
            else:
                logger.info(f"{request.sell_token} already approved for Permit2")

            return price
        except Exception as e:
            logger.error(f"Error fetching price from {self.api.name}: {e}")
            return None

    async def fetch_quote(self, request: PriceRequest) -> Optional[SwapQuote]:
        """Fetch a firm quote. Returns None on failure."""
        try:
            quote = await self.api.get_quote(request)
            logger.debug(f"Quote response: {quote.raw}")
            return quote
        except Exception as e:
            logger.error(f"Error fetching quote from {self.api.name}: {e}")
            return None

    def report_quote(self, quote: SwapQuote, decimals: Optional[int] = None) -> None:
        if decimals is not None:
            logger.info(
                f"Selling {from_base_units(quote.sell_amount, decimals)} for "
                f"{quote.buy_amount} base units of {quote.buy_token}"
            )
        if quote.route is not None and quote.route.fills:
            log_liquidity_breakdown(quote.route)
        if quote.token_metadata is not None:
            log_token_taxes(quote.token_metadata)

    async def prepare_transaction(self, quote: SwapQuote) -> SwapQuote:
        """Sign the Permit2 payload and append the signature to the calldata."""
        signature = await sign_permit(self.chain, quote)
        return splice_signature(quote, signature)

    async def submit(self, quote: SwapQuote) -> Optional[str]:
        """Sign and broadcast the quote's transaction. Returns the hash, or None on failure."""
        try:
            nonce = await self.chain.get_transaction_count()
            tx_hash = await self.chain.send_transaction(quote.transaction, nonce)
        except Exception as e:
            logger.error(f"Error submitting transaction: {e}")
            return None

        logger.info(f"Transaction hash: {tx_hash}")
        logger.info(f"See tx details at {self.settings.tx_url(tx_hash)}")
        return tx_hash

    async def run(self, amount: Optional[Decimal] = None) -> SwapResult:
        """Run the whole swap once."""
        await self.report_sources()

        try:
            sell_amount = await self.sell_amount(amount)
        except (Permit2SwapError, ValueError) as e:
            logger.error(f"Cannot determine sell amount: {e}")
            return SwapResult(success=False, stage="amount", error=str(e))

        request = self.build_price_request(sell_amount)

        price = await self.fetch_price(request)
        if price is None:
            return self._unavailable("price")
        if not price.liquidity_available:
            logger.error("No liquidity available for this pair")
            return SwapResult(success=False, stage="price", error="No liquidity available", quote=price)

        quote = await self.fetch_quote(request)
        if quote is None or quote.transaction is None:
            return self._unavailable("quote")

        self.report_quote(quote, self.decimals)

        try:
            quote = await self.prepare_transaction(quote)
        except Exception as e:
            logger.error(f"Failed to obtain signature or transaction data: {e}")
            return SwapResult(success=False, stage="sign", error=str(e), quote=quote)

        if self.dry_run:
            logger.info("DRY RUN - transaction signed but not sent")
            return SwapResult(success=True, stage="dry_run", quote=quote)

        tx_hash = await self.submit(quote)
        if tx_hash is None:
            return SwapResult(success=False, stage="submit", error="Transaction not sent", quote=quote)

        return SwapResult(
            success=True,
            stage="submit",
            tx_hash=tx_hash,
            explorer_url=self.settings.tx_url(tx_hash),
            quote=quote,
        )

    @staticmethod
    def _unavailable(stage: str) -> SwapResult:
        error = QuoteUnavailableError(stage)
        logger.error(str(error))
        return SwapResult(success=False, stage=stage, error=str(error))
