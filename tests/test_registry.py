"""Tests for AdapterRegistry."""

from __future__ import annotations

import pytest

from gateway.services.errors import (
    AdapterNotFoundError,
    ConfigurationError,
    DuplicateAdapterError,
)
from gateway.services.registry import AdapterRegistry
from tests.fakes import make_descriptor


class TestAdapterRegistry:
    def test_resolve_registered_adapter(self):
        svc = make_descriptor("svc")
        registry = AdapterRegistry([svc])

        assert registry.resolve("svc") is svc
        assert "svc" in registry
        assert len(registry) == 1

    def test_resolve_unknown_raises(self):
        registry = AdapterRegistry([make_descriptor("svc")])

        with pytest.raises(AdapterNotFoundError) as exc_info:
            registry.resolve("nope")

        assert exc_info.value.adapter_name == "nope"
        assert registry.is_healthy("nope") is False

    def test_list_preserves_registration_order(self):
        registry = AdapterRegistry(
            [make_descriptor("b"), make_descriptor("a"), make_descriptor("c")]
        )
        assert registry.list() == ["b", "a", "c"]
        assert [d.name for d in registry] == ["b", "a", "c"]

    def test_duplicate_name_rejected(self):
        with pytest.raises(DuplicateAdapterError):
            AdapterRegistry([make_descriptor("svc"), make_descriptor("svc")])

    def test_duplicate_is_a_configuration_error(self):
        assert issubclass(DuplicateAdapterError, ConfigurationError)

    def test_registration_after_freeze_rejected(self):
        registry = AdapterRegistry([make_descriptor("svc")])
        assert registry.frozen is True

        with pytest.raises(ConfigurationError):
            registry.register(make_descriptor("other"))

        assert registry.list() == ["svc"]

    def test_unfrozen_registry_accepts_registrations(self):
        registry = AdapterRegistry(freeze=False)
        registry.register(make_descriptor("svc"))
        registry.freeze()

        assert registry.is_healthy("svc") is True
        assert registry.frozen is True

    def test_empty_registry(self):
        registry = AdapterRegistry()
        assert registry.list() == []
        assert len(registry) == 0
