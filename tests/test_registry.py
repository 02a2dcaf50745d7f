"""Tests for brand -> adapter registration."""

import pytest

from lightcommand.commands.adapters import GoveeAdapter, HueAdapter, VendorAdapter
from lightcommand.commands.registry import AdapterRegistry, build_default_registry
from lightcommand.core.config import Settings


class DummyAdapter(VendorAdapter):
    brand = "vesync"

    def transform(self, command):
        return {"command": command.name}

    def send_command(self, device, payload, model=None):
        raise NotImplementedError


class TestAdapterRegistry:

    def test_default_registry_builds_configured_adapters(self, session_factory):
        settings = Settings(HUE_BRIDGE_IP="10.0.0.2", HUE_API_KEY="k", GOVEE_API_KEY="g")
        registry = build_default_registry(settings, session_factory)

        assert registry.brands() == ["govee", "hue"]
        hue = registry.get("hue")
        assert isinstance(hue, HueAdapter)
        assert hue.bridge_ip == "10.0.0.2"
        assert isinstance(registry.get("HUE"), HueAdapter)
        assert isinstance(registry.get("govee"), GoveeAdapter)

    def test_missing_credentials_fail_on_build(self, session_factory):
        settings = Settings(HUE_BRIDGE_IP=None, HUE_API_KEY=None)
        registry = build_default_registry(settings, session_factory)

        with pytest.raises(ValueError, match="HUE_BRIDGE_IP"):
            registry.get("hue")

    def test_unknown_brand(self):
        registry = AdapterRegistry()

        with pytest.raises(KeyError, match="vesync"):
            registry.get("vesync")

    def test_new_brand_registers_without_touching_dispatch(self, session_factory):
        registry = AdapterRegistry()
        registry.register("vesync", lambda: DummyAdapter(session_factory))

        assert "vesync" in registry
        assert isinstance(registry.get("vesync"), DummyAdapter)
