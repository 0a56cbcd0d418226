"""Response values from the 0x Swap API.

All of these are parsed once from JSON and never mutated; the only change a
quote goes through is the signature splice, which produces a new ``SwapQuote``
through ``with_calldata``.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Optional


def _int_or_none(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


@dataclass
class Transaction:
    """Transaction payload the taker must sign and broadcast."""

    to: str
    data: str
    gas: Optional[int] = None
    gas_price: Optional[int] = None
    value: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        return cls(
            to=data["to"],
            data=data["data"],
            gas=_int_or_none(data.get("gas")),
            gas_price=_int_or_none(data.get("gasPrice")),
            value=_int_or_none(data.get("value")) or 0,
        )


@dataclass
class AllowanceIssue:
    """Reported when the taker has not approved the Permit2 contract."""

    spender: str
    actual: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "AllowanceIssue":
        return cls(spender=data["spender"], actual=_int_or_none(data.get("actual")) or 0)


@dataclass
class Permit2Payload:
    """Off-chain Permit2 authorization to be signed with EIP-712."""

    eip712: dict
    type: str = "Permit2"
    hash: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Permit2Payload":
        return cls(eip712=data["eip712"], type=data.get("type", "Permit2"), hash=data.get("hash"))


@dataclass
class RouteFill:
    """One liquidity source's share of the trade."""

    source: str
    proportion_bps: int
    from_token: Optional[str] = None
    to_token: Optional[str] = None

    @property
    def percentage(self) -> Decimal:
        return Decimal(self.proportion_bps) / Decimal(100)

    @classmethod
    def from_dict(cls, data: dict) -> "RouteFill":
        return cls(
            source=data["source"],
            proportion_bps=int(data["proportionBps"]),
            from_token=data.get("from"),
            to_token=data.get("to"),
        )


@dataclass
class Route:
    """Routing breakdown of a quote."""

    fills: list[RouteFill] = field(default_factory=list)
    tokens: list[dict] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Route":
        return cls(
            fills=[RouteFill.from_dict(f) for f in data.get("fills") or []],
            tokens=list(data.get("tokens") or []),
        )


@dataclass
class TokenTax:
    """Buy and sell tax of a single token, in basis points."""

    buy_tax_bps: int = 0
    sell_tax_bps: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "TokenTax":
        data = data or {}
        return cls(
            buy_tax_bps=_int_or_none(data.get("buyTaxBps")) or 0,
            sell_tax_bps=_int_or_none(data.get("sellTaxBps")) or 0,
        )


@dataclass
class TokenMetadata:
    """Tax metadata for both sides of the trade."""

    buy_token: TokenTax = field(default_factory=TokenTax)
    sell_token: TokenTax = field(default_factory=TokenTax)

    @classmethod
    def from_dict(cls, data: dict) -> "TokenMetadata":
        return cls(
            buy_token=TokenTax.from_dict(data.get("buyToken")),
            sell_token=TokenTax.from_dict(data.get("sellToken")),
        )


@dataclass
class SwapQuote:
    """A price or firm quote returned by the Permit2 endpoints.

    Price responses carry no ``transaction`` and no ``permit2``; firm quotes
    carry both.
    """

    sell_token: str
    buy_token: str
    sell_amount: int
    buy_amount: int
    liquidity_available: bool = True
    min_buy_amount: Optional[int] = None
    transaction: Optional[Transaction] = None
    allowance_issue: Optional[AllowanceIssue] = None
    permit2: Optional[Permit2Payload] = None
    route: Optional[Route] = None
    token_metadata: Optional[TokenMetadata] = None
    zid: Optional[str] = None
    raw: dict = field(default_factory=dict, repr=False)

    @property
    def needs_approval(self) -> bool:
        return self.allowance_issue is not None

    def with_calldata(self, data: str) -> "SwapQuote":
        """Return a copy whose transaction calldata is replaced."""
        if self.transaction is None:
            raise ValueError("Quote has no transaction")
        return replace(self, transaction=replace(self.transaction, data=data))

    @classmethod
    def from_dict(cls, data: dict) -> "SwapQuote":
        issues = data.get("issues") or {}
        allowance = issues.get("allowance")
        transaction = data.get("transaction")
        permit2 = data.get("permit2")
        route = data.get("route")
        token_metadata = data.get("tokenMetadata")

        return cls(
            sell_token=data.get("sellToken", ""),
            buy_token=data.get("buyToken", ""),
            sell_amount=_int_or_none(data.get("sellAmount")) or 0,
            buy_amount=_int_or_none(data.get("buyAmount")) or 0,
            liquidity_available=bool(data.get("liquidityAvailable", True)),
            min_buy_amount=_int_or_none(data.get("minBuyAmount")),
            transaction=Transaction.from_dict(transaction) if transaction else None,
            allowance_issue=AllowanceIssue.from_dict(allowance) if allowance else None,
            permit2=Permit2Payload.from_dict(permit2) if permit2 and permit2.get("eip712") else None,
            route=Route.from_dict(route) if route else None,
            token_metadata=TokenMetadata.from_dict(token_metadata) if token_metadata else None,
            zid=data.get("zid"),
            raw=data,
        )
