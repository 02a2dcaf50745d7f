"""Vendor Adapters"""

from .base import VendorAdapter, normalize_command
from .hue import HueAdapter
from .govee import GoveeAdapter

__all__ = [
    "VendorAdapter",
    "normalize_command",
    "HueAdapter",
    "GoveeAdapter"
]
