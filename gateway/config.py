"""
Adapter configuration loading.

Adapters come from a YAML/JSON file when ADAPTERS_CONFIG_PATH is set,
otherwise from the built-in example adapters configured by environment
variables. Any malformed entry fails startup with ConfigurationError.
"""

import json
import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import ValidationError

from gateway.services.errors import ConfigurationError
from gateway.services.models import AdapterDescriptor
from gateway.services.registry import AdapterRegistry
from gateway.settings import Settings


def _default_adapter_configs() -> list[dict[str, Any]]:
    """Example adapters, configurable through the environment."""
    example: dict[str, Any] = {
        "name": "example-api",
        "base_url": os.getenv("EXAMPLE_API_URL", "https://api.example.com"),
        "timeout": os.getenv("EXAMPLE_API_TIMEOUT", "30"),
        "retry": {"max_retries": os.getenv("EXAMPLE_API_RETRIES", "3")},
        "headers": {"User-Agent": "adapter-gateway/1.0.0"},
    }
    if token := os.getenv("EXAMPLE_API_TOKEN"):
        example["auth"] = {"type": "bearer", "token": token}

    weather: dict[str, Any] = {
        "name": "weather-api",
        "base_url": os.getenv("WEATHER_API_URL", "https://api.weatherapi.com/v1"),
        "timeout": os.getenv("WEATHER_API_TIMEOUT", "10"),
        "retry": {"max_retries": os.getenv("WEATHER_API_RETRIES", "2")},
    }
    if key := os.getenv("WEATHER_API_KEY"):
        weather["auth"] = {"type": "api_key", "key": key}

    return [example, weather]


def read_config_file(path: Path) -> list[dict[str, Any]]:
    """
    Read adapter entries from a YAML or JSON file.

    The file holds an ``adapters`` key with either a list of entries or a
    mapping of name -> entry.
    """
    if not path.exists():
        raise ConfigurationError(f"Adapter config not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to parse adapter config {path}: {e}") from e

    adapters = data.get("adapters") if isinstance(data, dict) else None
    if isinstance(adapters, dict):
        entries = []
        for name, entry in adapters.items():
            if entry is not None and not isinstance(entry, dict):
                raise ConfigurationError(
                    f"Adapter config {path}: entry '{name}' must be a mapping",
                    adapter_name=str(name),
                )
            entries.append({"name": name, **(entry or {})})
        return entries
    if isinstance(adapters, list) and all(isinstance(a, dict) for a in adapters):
        return adapters

    raise ConfigurationError(
        f"Adapter config {path} must define 'adapters' as a list or mapping"
    )


def build_descriptor(raw: dict[str, Any], settings: Settings) -> AdapterDescriptor:
    """Validate one adapter entry, filling in timeout/retry defaults."""
    data = dict(raw)
    data.setdefault("timeout", settings.default_timeout)

    retry = data.get("retry") or {}
    if not isinstance(retry, dict):
        raise ConfigurationError(
            f"Adapter '{data.get('name')}': 'retry' must be a mapping",
            adapter_name=data.get("name"),
        )
    data["retry"] = {"max_retries": settings.default_retries, **retry}

    try:
        return AdapterDescriptor.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid adapter '{data.get('name')}': {e}", adapter_name=data.get("name")
        ) from e


def load_adapter_descriptors(settings: Settings) -> list[AdapterDescriptor]:
    if settings.adapters_config_path:
        path = Path(settings.adapters_config_path)
        raw_entries = read_config_file(path)
        logger.info(f"Loaded {len(raw_entries)} adapter(s) from {path}")
    else:
        raw_entries = _default_adapter_configs()
        logger.info("ADAPTERS_CONFIG_PATH not set, using example adapters")

    return [build_descriptor(entry, settings) for entry in raw_entries]


def build_registry(
    settings: Settings,
    descriptors: list[AdapterDescriptor] | None = None,
) -> AdapterRegistry:
    """Build the frozen registry. Raises ConfigurationError on bad config."""
    if descriptors is None:
        descriptors = load_adapter_descriptors(settings)
    return AdapterRegistry(descriptors)
