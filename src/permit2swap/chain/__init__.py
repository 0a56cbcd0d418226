"""Chain access: token reads, signing and broadcasting.

- ChainClient: capability interface used by the workflow
- Web3ChainClient: web3.py implementation bound to one key and one RPC URL
"""

from permit2swap.chain.base import MAX_UINT256, ChainClient
from permit2swap.chain.web3_client import ERC20_ABI, Web3ChainClient, create_chain_client

__all__ = [
    "MAX_UINT256",
    "ERC20_ABI",
    "ChainClient",
    "Web3ChainClient",
    "create_chain_client",
]
