"""Permit2 signature handling.

The settlement contract reads the taker's Permit2 signature from the end of
the calldata: a 32-byte big-endian length followed by the signature bytes.
"""

import logging

from permit2swap.chain.base import ChainClient
from permit2swap.exceptions import SignatureError
from permit2swap.models import SwapQuote

logger = logging.getLogger(__name__)


def signature_length_prefix(signature: bytes) -> bytes:
    """Length of ``signature`` as an unsigned 32-byte big-endian integer."""
    return len(signature).to_bytes(32, "big")


def append_signature(calldata: str, signature: bytes) -> str:
    """Return ``calldata ++ len32(signature) ++ signature`` as 0x-prefixed hex."""
    if not signature:
        raise SignatureError("Empty signature")
    body = calldata[2:] if calldata.startswith("0x") else calldata
    return "0x" + body + signature_length_prefix(signature).hex() + signature.hex()


async def sign_permit(chain: ChainClient, quote: SwapQuote) -> bytes:
    """Sign the quote's Permit2 EIP-712 payload with the chain client's key."""
    if quote.permit2 is None:
        raise SignatureError("Quote carries no Permit2 payload to sign")

    signature = await chain.sign_typed_data(quote.permit2.eip712)
    if not signature:
        raise SignatureError("Signer returned an empty signature")

    logger.info("Signed permit2 message from quote response")
    return signature


def splice_signature(quote: SwapQuote, signature: bytes) -> SwapQuote:
    """Return a copy of ``quote`` with the signature appended to its calldata."""
    if quote.transaction is None or not quote.transaction.data:
        raise SignatureError("Quote carries no transaction data")
    return quote.with_calldata(append_signature(quote.transaction.data, signature))
