"""Exception types raised across the swap workflow."""

from typing import Optional


class Permit2SwapError(Exception):
    """Base class for all permit2swap errors."""


class ConfigError(Permit2SwapError):
    """Raised when required configuration is missing or invalid."""

    def __init__(self, missing: Optional[list[str]] = None, message: Optional[str] = None):
        self.missing = missing or []
        if message is None:
            message = f"Missing required environment variables: {', '.join(self.missing)}"
        super().__init__(message)


class SwapAPIError(Permit2SwapError):
    """Raised when the 0x Swap API returns a non-success response."""

    def __init__(self, status_code: int, body: str, endpoint: str = ""):
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint
        super().__init__(f"0x API error {status_code} on {endpoint or 'request'}: {body[:500]}")


class ChainError(Permit2SwapError):
    """Raised when an on-chain read or write fails."""


class ApprovalError(ChainError):
    """Raised when a token approval transaction reverts."""


class SignatureError(Permit2SwapError):
    """Raised when the Permit2 payload cannot be signed or spliced."""


class QuoteUnavailableError(Permit2SwapError):
    """Raised when a later stage needs a price or quote that was never obtained."""

    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"No {stage} available, cannot continue")
