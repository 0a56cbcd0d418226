"""permit2-swap - headless 0x Permit2 token swap."""

__version__ = "0.1.0"
