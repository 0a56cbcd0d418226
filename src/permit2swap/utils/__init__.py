"""Utility modules for permit2swap."""

from permit2swap.utils.units import bps_to_percent, from_base_units, to_base_units

__all__ = ["to_base_units", "from_base_units", "bps_to_percent"]
