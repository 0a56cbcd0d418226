"""Abstract interface for the chain client."""

from abc import ABC, abstractmethod
from typing import Optional

from permit2swap.models import Transaction

MAX_UINT256 = 2**256 - 1


class ChainClient(ABC):
    """Capabilities the workflow needs from a chain: read token metadata,
    approve, sign typed data, and sign and submit transactions.

    One instance is bound to one signing key and one chain.
    """

    @property
    @abstractmethod
    def address(self) -> str:
        """Checksummed address of the signing account (the taker)."""
        pass

    @property
    @abstractmethod
    def chain_id(self) -> int:
        pass

    @abstractmethod
    async def get_token_decimals(self, token: str) -> int:
        """Read ``decimals()`` of an ERC-20 contract."""
        pass

    @abstractmethod
    async def approve(self, token: str, spender: str, amount: int = MAX_UINT256) -> str:
        """
        Approve ``spender`` to move ``amount`` of ``token`` and wait for the receipt.

        Returns:
            Approval transaction hash

        Raises:
            ApprovalError: If the approval reverts
        """
        pass

    @abstractmethod
    async def sign_typed_data(self, typed_data: dict) -> bytes:
        """Sign a full EIP-712 document (types, domain, primaryType, message)."""
        pass

    @abstractmethod
    async def get_transaction_count(self, address: Optional[str] = None) -> int:
        """Current nonce of ``address`` (defaults to the signing account)."""
        pass

    @abstractmethod
    async def send_transaction(self, tx: Transaction, nonce: int) -> str:
        """
        Sign ``tx`` with the held key and broadcast the raw transaction.

        Returns:
            Transaction hash, 0x-prefixed
        """
        pass
