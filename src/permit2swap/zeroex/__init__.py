"""0x Swap API access.

- SwapAPI: capability interface used by the workflow
- ZeroExClient: httpx implementation against api.0x.org
"""

from permit2swap.zeroex.base import PriceRequest, SwapAPI
from permit2swap.zeroex.client import ZeroExClient, create_zeroex_client

__all__ = [
    "PriceRequest",
    "SwapAPI",
    "ZeroExClient",
    "create_zeroex_client",
]
