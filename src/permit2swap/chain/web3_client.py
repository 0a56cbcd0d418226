"""web3.py chain client.

Reads ERC-20 metadata, approves the Permit2 contract, signs EIP-712 payloads
and broadcasts signed transactions over a single RPC endpoint.
"""

import logging
from typing import Any, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3

from permit2swap.chain.base import MAX_UINT256, ChainClient
from permit2swap.config import Settings
from permit2swap.exceptions import ApprovalError, ChainError
from permit2swap.models import Transaction

logger = logging.getLogger(__name__)

ERC20_ABI = [
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "spender", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


def _hex(value: Any) -> str:
    """0x-prefixed hex of a hash returned by web3 (HexBytes or bytes)."""
    text = value.hex() if hasattr(value, "hex") else str(value)
    return text if text.startswith("0x") else f"0x{text}"


def normalize_typed_data(typed_data: dict) -> dict:
    """Coerce integer fields given as strings into ints.

    The 0x API serializes uint values (amounts, nonces, deadlines) as
    decimal strings; eth-account encodes only real integers.
    """
    types = typed_data.get("types", {})

    def convert(type_name: str, value: Any) -> Any:
        if type_name.endswith("[]"):
            return [convert(type_name[:-2], v) for v in value]
        if type_name in types:
            return {
                f["name"]: convert(f["type"], value[f["name"]])
                for f in types[type_name]
                if f["name"] in value
            }
        if (type_name.startswith("uint") or type_name.startswith("int")) and isinstance(value, str):
            return int(value, 0)
        return value

    normalized = dict(typed_data)
    normalized["message"] = convert(typed_data["primaryType"], typed_data["message"])
    if "EIP712Domain" in types and "domain" in typed_data:
        normalized["domain"] = convert("EIP712Domain", typed_data["domain"])
    return normalized


class Web3ChainClient(ChainClient):
    """Chain client backed by ``AsyncWeb3`` and a local eth-account key."""

    def __init__(self, settings: Settings, web3: Optional[AsyncWeb3] = None):
        self.settings = settings
        self._chain_id = settings.chain_id
        self._account: LocalAccount = Account.from_key(settings.private_key)
        self._web3 = web3

    @property
    def web3(self) -> AsyncWeb3:
        """Lazy load web3 instance."""
        if self._web3 is None:
            self._web3 = AsyncWeb3(AsyncHTTPProvider(self.settings.rpc_url))
        return self._web3

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def chain_id(self) -> int:
        return self._chain_id

    def _token(self, token: str):
        return self.web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(token),
            abi=ERC20_ABI,
        )

    async def get_token_decimals(self, token: str) -> int:
        try:
            decimals = await self._token(token).functions.decimals().call()
        except Exception as e:
            raise ChainError(f"Failed to read decimals of {token}: {e}") from e
        logger.debug(f"{token} has {decimals} decimals")
        return int(decimals)

    async def approve(self, token: str, spender: str, amount: int = MAX_UINT256) -> str:
        contract = self._token(token)
        spender = AsyncWeb3.to_checksum_address(spender)
        approve_fn = contract.functions.approve(spender, amount)

        # Simulate first so a revert surfaces before we pay gas
        await approve_fn.call({"from": self.address})

        tx = await approve_fn.build_transaction({
            "from": self.address,
            "nonce": await self.get_transaction_count(),
            "chainId": self.chain_id,
        })
        signed = self._account.sign_transaction(tx)
        raw_tx = getattr(signed, "raw_transaction", None) or signed.rawTransaction
        tx_hash = await self.web3.eth.send_raw_transaction(raw_tx)
        tx_hash_hex = _hex(tx_hash)
        logger.info(f"Approving {spender} to spend {token}: {tx_hash_hex}")

        receipt = await self.web3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.settings.receipt_timeout
        )
        if receipt["status"] == 0:
            raise ApprovalError(f"Approval transaction {tx_hash_hex} reverted")

        logger.info(f"Approved {spender} to spend {token} (block {receipt['blockNumber']})")
        return tx_hash_hex

    async def sign_typed_data(self, typed_data: dict) -> bytes:
        signed = self._account.sign_typed_data(full_message=normalize_typed_data(typed_data))
        return bytes(signed.signature)

    async def get_transaction_count(self, address: Optional[str] = None) -> int:
        return await self.web3.eth.get_transaction_count(address or self.address)

    async def send_transaction(self, tx: Transaction, nonce: int) -> str:
        tx_params: dict[str, Any] = {
            "from": self.address,
            "to": AsyncWeb3.to_checksum_address(tx.to),
            "data": tx.data,
            "value": tx.value,
            "nonce": nonce,
            "chainId": self.chain_id,
        }

        if tx.gas is not None:
            tx_params["gas"] = tx.gas
        else:
            tx_params["gas"] = await self.web3.eth.estimate_gas(tx_params)

        if tx.gas_price is not None:
            tx_params["gasPrice"] = tx.gas_price
        else:
            tx_params["gasPrice"] = await self.web3.eth.gas_price

        signed = self._account.sign_transaction(tx_params)

        # eth-account 0.13 renamed rawTransaction to raw_transaction
        raw_tx = getattr(signed, "raw_transaction", None) or signed.rawTransaction
        tx_hash = await self.web3.eth.send_raw_transaction(raw_tx)
        return _hex(tx_hash)


def create_chain_client(settings: Settings) -> Web3ChainClient:
    """Create a chain client bound to the configured key and RPC URL."""
    return Web3ChainClient(settings)
