"""Main entry point - runs one swap and exits."""

import argparse
import asyncio
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import Optional

from permit2swap.chain.web3_client import create_chain_client
from permit2swap.config import Settings, load_settings
from permit2swap.exceptions import ConfigError
from permit2swap.workflow import SwapResult, SwapWorkflow
from permit2swap.zeroex.client import create_zeroex_client

logger = logging.getLogger(__name__)


def _decimal(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}") from None
    if not amount.is_finite() or amount <= 0:
        raise argparse.ArgumentTypeError(f"amount must be positive: {value!r}")
    return amount


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Swap tokens through the 0x Permit2 API")
    parser.add_argument("--amount", type=_decimal, help="Amount to sell in whole tokens (default: SELL_AMOUNT)")
    parser.add_argument("--dry-run", action="store_true", help="Sign the transaction but do not send it")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


async def run_swap(settings: Settings, amount: Optional[Decimal] = None, dry_run: bool = False) -> SwapResult:
    """Build the clients, run the workflow once, and release the HTTP client."""
    chain = create_chain_client(settings)
    logger.info(f"Taker: {chain.address}")

    async with create_zeroex_client(settings) as api:
        workflow = SwapWorkflow(settings, chain, api, dry_run=dry_run)
        return await workflow.run(amount)


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as e:
        configure_logging(args.debug)
        logger.error(str(e))
        sys.exit(1)

    configure_logging(args.debug or settings.debug)
    logger.info("Starting permit2-swap...")
    logger.debug(f"Settings: {settings.get_safe_dict()}")
    logger.info(
        f"Swap: {args.amount or settings.sell_amount} of {settings.sell_token} -> "
        f"{settings.buy_token} on chain {settings.chain_id}"
    )

    try:
        result = asyncio.run(run_swap(settings, amount=args.amount, dry_run=args.dry_run))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        sys.exit(130)

    if not result.success:
        logger.error(f"Swap failed at stage '{result.stage}': {result.error}")
        sys.exit(1)


if __name__ == "__main__":
    main()
