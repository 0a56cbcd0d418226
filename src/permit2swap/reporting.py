"""Console formatting for quote metadata."""

import logging
from typing import Iterable

from permit2swap.models import Route, TokenMetadata
from permit2swap.utils.units import bps_to_percent

logger = logging.getLogger(__name__)


def format_sources(sources: Iterable[str]) -> str:
    return ", ".join(sources)


def format_liquidity_breakdown(route: Route) -> list[str]:
    """One ``"source: NN.NN%"`` line per fill."""
    return [f"{fill.source}: {fill.percentage:.2f}%" for fill in route.fills]


def log_liquidity_breakdown(route: Route) -> list[str]:
    lines = format_liquidity_breakdown(route)
    logger.info(f"{len(route.fills)} Sources")
    for line in lines:
        logger.info(line)
    return lines


def format_token_taxes(metadata: TokenMetadata) -> list[str]:
    """Lines for each non-zero buy/sell tax of either token."""
    taxes = [
        ("Buy Token Buy Tax", metadata.buy_token.buy_tax_bps),
        ("Buy Token Sell Tax", metadata.buy_token.sell_tax_bps),
        ("Sell Token Buy Tax", metadata.sell_token.buy_tax_bps),
        ("Sell Token Sell Tax", metadata.sell_token.sell_tax_bps),
    ]
    return [f"{label}: {bps_to_percent(bps):.2f}%" for label, bps in taxes if bps > 0]


def log_token_taxes(metadata: TokenMetadata) -> list[str]:
    lines = format_token_taxes(metadata)
    for line in lines:
        logger.info(line)
    return lines
