"""Pytest configuration and fixtures."""

import copy
import os
from typing import Optional

import pytest

# Set test environment
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
os.environ["PRIVATE_KEY"] = TEST_PRIVATE_KEY
os.environ["ZERO_EX_API_KEY"] = "test-api-key"
os.environ["RPC_URL"] = "http://localhost:8545"

from permit2swap.chain.base import MAX_UINT256, ChainClient
from permit2swap.config import SCROLL_WETH, SCROLL_WSTETH, Settings
from permit2swap.models import SwapQuote, Transaction
from permit2swap.zeroex.base import PriceRequest, SwapAPI

TAKER = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"
PERMIT2 = "0x000000000022D473030F116dDEE9F6B43aC78BA3"
SETTLER = "0x7f6cee965959295cc64d0e6c00d99d6532d8e86b"
WETH = SCROLL_WETH
WSTETH = SCROLL_WSTETH

PERMIT2_EIP712 = {
    "types": {
        "PermitTransferFrom": [
            {"name": "permitted", "type": "TokenPermissions"},
            {"name": "spender", "type": "address"},
            {"name": "nonce", "type": "uint256"},
            {"name": "deadline", "type": "uint256"},
        ],
        "TokenPermissions": [
            {"name": "token", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "EIP712Domain": [
            {"name": "name", "type": "string"},
            {"name": "chainId", "type": "uint256"},
            {"name": "verifyingContract", "type": "address"},
        ],
    },
    "domain": {
        "name": "Permit2",
        "chainId": 534352,
        "verifyingContract": PERMIT2.lower(),
    },
    "message": {
        "permitted": {"token": WETH, "amount": "100000000000000000"},
        "spender": SETTLER,
        "nonce": "2241959297937691820908574931991575",
        "deadline": "1733419101",
    },
    "primaryType": "PermitTransferFrom",
}

PRICE_RESPONSE = {
    "blockNumber": "23130000",
    "buyAmount": "84650000000000000",
    "buyToken": WSTETH,
    "sellAmount": "100000000000000000",
    "sellToken": WETH,
    "liquidityAvailable": True,
    "minBuyAmount": "83800000000000000",
    "issues": {
        "allowance": None,
        "balance": None,
        "simulationIncomplete": False,
        "invalidSourcesPassed": [],
    },
    "route": {
        "fills": [
            {"from": WETH, "to": WSTETH, "source": "Ambient", "proportionBps": "6000"},
            {"from": WETH, "to": WSTETH, "source": "Uniswap_V3", "proportionBps": "4000"},
        ],
        "tokens": [{"address": WETH, "symbol": "WETH"}, {"address": WSTETH, "symbol": "wstETH"}],
    },
    "tokenMetadata": {
        "buyToken": {"buyTaxBps": "0", "sellTaxBps": "0"},
        "sellToken": {"buyTaxBps": "0", "sellTaxBps": "0"},
    },
    "zid": "0x111111111111111111111111",
}

QUOTE_RESPONSE = {
    **PRICE_RESPONSE,
    "permit2": {
        "type": "Permit2",
        "hash": "0x" + "ab" * 32,
        "eip712": PERMIT2_EIP712,
    },
    "transaction": {
        "to": SETTLER,
        "data": "0x1fff991f" + "00" * 64,
        "gas": "288079",
        "gasPrice": "4837860000",
        "value": "0",
    },
}


def price_response(allowance_spender: Optional[str] = None) -> dict:
    data = copy.deepcopy(PRICE_RESPONSE)
    if allowance_spender:
        data["issues"]["allowance"] = {"actual": "0", "spender": allowance_spender}
    return data


def quote_response() -> dict:
    return copy.deepcopy(QUOTE_RESPONSE)


class FakeChainClient(ChainClient):
    """Chain client double that records every call in order."""

    def __init__(self, decimals: int = 18, signature: bytes = b"\x11" * 65, fail_send: bool = False):
        self.calls: list[tuple] = []
        self.decimals = decimals
        self.signature = signature
        self.fail_send = fail_send

    @property
    def address(self) -> str:
        return TAKER

    @property
    def chain_id(self) -> int:
        return 534352

    async def get_token_decimals(self, token: str) -> int:
        self.calls.append(("decimals", token))
        return self.decimals

    async def approve(self, token: str, spender: str, amount: int = MAX_UINT256) -> str:
        self.calls.append(("approve", token, spender, amount))
        return "0x" + "aa" * 32

    async def sign_typed_data(self, typed_data: dict) -> bytes:
        self.calls.append(("sign_typed_data", typed_data["primaryType"]))
        return self.signature

    async def get_transaction_count(self, address: Optional[str] = None) -> int:
        self.calls.append(("nonce", address or TAKER))
        return 7

    async def send_transaction(self, tx: Transaction, nonce: int) -> str:
        self.calls.append(("send", tx, nonce))
        if self.fail_send:
            raise RuntimeError("insufficient funds for gas")
        return "0x" + "cd" * 32

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


class FakeSwapAPI(SwapAPI):
    """Swap API double serving canned responses."""

    def __init__(
        self,
        price: Optional[dict] = None,
        quote: Optional[dict] = None,
        sources: Optional[list[str]] = None,
        chain: Optional[FakeChainClient] = None,
        fail: tuple = (),
    ):
        self.price = price if price is not None else price_response()
        self.quote = quote if quote is not None else quote_response()
        self.sources = sources if sources is not None else ["Ambient", "Uniswap_V3"]
        # share the chain's call log so ordering across both doubles is visible
        self.calls = chain.calls if chain is not None else []
        self.fail = fail

    @property
    def name(self) -> str:
        return "fake"

    async def get_sources(self, chain_id: int) -> list[str]:
        self.calls.append(("get_sources", chain_id))
        if "sources" in self.fail:
            raise RuntimeError("sources down")
        return self.sources

    async def get_price(self, request: PriceRequest) -> SwapQuote:
        self.calls.append(("get_price", request))
        if "price" in self.fail:
            raise RuntimeError("price down")
        return SwapQuote.from_dict(self.price)

    async def get_quote(self, request: PriceRequest) -> SwapQuote:
        self.calls.append(("get_quote", request))
        if "quote" in self.fail:
            raise RuntimeError("quote down")
        return SwapQuote.from_dict(self.quote)


@pytest.fixture
def settings() -> Settings:
    """Settings built from the test environment only, ignoring any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def chain() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture
def api(chain) -> FakeSwapAPI:
    return FakeSwapAPI(chain=chain)
