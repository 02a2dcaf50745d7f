"""
Adapter Registry

Maps a brand key to the adapter that handles it. New brands register a
factory here; the processor and resolver never branch on brand strings.
"""

from typing import Callable, Dict, List
from sqlalchemy.orm import Session

from .adapters.base import VendorAdapter
from .adapters.hue import HueAdapter
from .adapters.govee import GoveeAdapter
from ..core.config import Settings

AdapterFactory = Callable[[], VendorAdapter]


class AdapterRegistry:
    """Brand -> adapter factory lookup"""

    def __init__(self):
        self._factories: Dict[str, AdapterFactory] = {}

    def register(self, brand: str, factory: AdapterFactory):
        """Register (or replace) the factory for a brand"""
        self._factories[brand.lower()] = factory

    def get(self, brand: str) -> VendorAdapter:
        """
        Build the adapter for a brand

        Raises:
            KeyError: no adapter registered for the brand
        """
        factory = self._factories.get(brand.lower())
        if factory is None:
            raise KeyError(
                f"No adapter registered for brand '{brand}' "
                f"(known: {', '.join(self.brands()) or 'none'})"
            )
        return factory()

    def brands(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, brand: str) -> bool:
        return brand.lower() in self._factories


def build_default_registry(settings: Settings, session_factory: Callable[[], Session]) -> AdapterRegistry:
    """Registry with every built-in brand, configured from settings"""
    registry = AdapterRegistry()

    def hue_factory() -> VendorAdapter:
        if not settings.HUE_BRIDGE_IP or not settings.HUE_API_KEY:
            raise ValueError("HUE_BRIDGE_IP and HUE_API_KEY must be set to run the Hue adapter")
        return HueAdapter(
            session_factory,
            bridge_ip=settings.HUE_BRIDGE_IP,
            api_key=settings.HUE_API_KEY,
            verify_tls=settings.HUE_VERIFY_TLS,
            timeout=settings.HTTP_TIMEOUT
        )

    def govee_factory() -> VendorAdapter:
        if not settings.GOVEE_API_KEY:
            raise ValueError("GOVEE_API_KEY must be set to run the Govee adapter")
        return GoveeAdapter(
            session_factory,
            api_key=settings.GOVEE_API_KEY,
            api_url=settings.GOVEE_API_URL,
            timeout=settings.HTTP_TIMEOUT
        )

    registry.register(HueAdapter.brand, hue_factory)
    registry.register(GoveeAdapter.brand, govee_factory)

    return registry
