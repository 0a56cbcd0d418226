"""Tests for the web3 chain client with a mocked RPC."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data

from permit2swap.chain.base import MAX_UINT256
from permit2swap.chain.web3_client import ERC20_ABI, Web3ChainClient, normalize_typed_data
from permit2swap.exceptions import ApprovalError, ChainError
from permit2swap.models import SwapQuote

from conftest import PERMIT2, PERMIT2_EIP712, TEST_PRIVATE_KEY, WETH, quote_response

TX_HASH = bytes.fromhex("cd" * 32)


@pytest.fixture
def web3():
    """AsyncWeb3 stand-in with awaitable eth methods."""
    w3 = MagicMock()
    w3.eth.get_transaction_count = AsyncMock(return_value=7)
    w3.eth.send_raw_transaction = AsyncMock(return_value=TX_HASH)
    w3.eth.wait_for_transaction_receipt = AsyncMock(return_value={"status": 1, "blockNumber": 10})
    w3.eth.estimate_gas = AsyncMock(return_value=21000)
    return w3


@pytest.fixture
def client(settings, web3) -> Web3ChainClient:
    return Web3ChainClient(settings, web3=web3)


def test_address_from_private_key(client):
    assert client.address == Account.from_key(TEST_PRIVATE_KEY).address
    assert client.chain_id == 534352


def test_normalize_typed_data_converts_uint_strings():
    normalized = normalize_typed_data(PERMIT2_EIP712)

    assert normalized["message"]["permitted"]["amount"] == 100000000000000000
    assert normalized["message"]["deadline"] == 1733419101
    assert normalized["message"]["spender"] == PERMIT2_EIP712["message"]["spender"]
    # input left untouched
    assert PERMIT2_EIP712["message"]["deadline"] == "1733419101"


@pytest.mark.asyncio
async def test_sign_typed_data_recovers_to_taker(client):
    signature = await client.sign_typed_data(PERMIT2_EIP712)

    assert len(signature) == 65
    signable = encode_typed_data(full_message=normalize_typed_data(PERMIT2_EIP712))
    assert Account.recover_message(signable, signature=signature) == client.address


@pytest.mark.asyncio
async def test_get_token_decimals(client, web3):
    contract = MagicMock()
    contract.functions.decimals.return_value.call = AsyncMock(return_value=18)
    web3.eth.contract.return_value = contract

    assert await client.get_token_decimals(WETH) == 18


@pytest.mark.asyncio
async def test_get_token_decimals_failure(client, web3):
    contract = MagicMock()
    contract.functions.decimals.return_value.call = AsyncMock(side_effect=ValueError("execution reverted"))
    web3.eth.contract.return_value = contract

    with pytest.raises(ChainError):
        await client.get_token_decimals(WETH)


def _approve_contract(client, web3):
    approve_fn = MagicMock()
    approve_fn.call = AsyncMock(return_value=True)
    approve_fn.build_transaction = AsyncMock(return_value={
        "from": client.address,
        "to": WETH,
        "data": "0x095ea7b3" + "00" * 64,
        "value": 0,
        "gas": 60000,
        "gasPrice": 1_000_000,
        "nonce": 7,
        "chainId": 534352,
    })
    contract = MagicMock()
    contract.functions.approve.return_value = approve_fn
    web3.eth.contract.return_value = contract
    return contract, approve_fn


@pytest.mark.asyncio
async def test_approve_simulates_then_waits_for_receipt(client, web3):
    contract, approve_fn = _approve_contract(client, web3)

    tx_hash = await client.approve(WETH, PERMIT2)

    assert tx_hash == "0x" + "cd" * 32
    contract.functions.approve.assert_called_once_with(PERMIT2, MAX_UINT256)
    approve_fn.call.assert_awaited_once_with({"from": client.address})
    web3.eth.send_raw_transaction.assert_awaited_once()
    web3.eth.wait_for_transaction_receipt.assert_awaited_once()


@pytest.mark.asyncio
async def test_approve_reverted(client, web3):
    _approve_contract(client, web3)
    web3.eth.wait_for_transaction_receipt.return_value = {"status": 0, "blockNumber": 10}

    with pytest.raises(ApprovalError):
        await client.approve(WETH, PERMIT2)


@pytest.mark.asyncio
async def test_approve_simulation_failure_sends_nothing(client, web3):
    _, approve_fn = _approve_contract(client, web3)
    approve_fn.call.side_effect = ValueError("execution reverted")

    with pytest.raises(ValueError):
        await client.approve(WETH, PERMIT2)

    web3.eth.send_raw_transaction.assert_not_awaited()


@pytest.mark.asyncio
async def test_send_transaction(client, web3):
    quote = SwapQuote.from_dict(quote_response())

    tx_hash = await client.send_transaction(quote.transaction, nonce=7)

    assert tx_hash == "0x" + "cd" * 32
    web3.eth.send_raw_transaction.assert_awaited_once()
    web3.eth.estimate_gas.assert_not_awaited()
    raw_tx = web3.eth.send_raw_transaction.await_args.args[0]
    assert len(raw_tx) > 0


def test_erc20_abi_covers_called_functions():
    assert [entry["name"] for entry in ERC20_ABI] == ["decimals", "approve"]
