"""State of a single managed resource and the provider configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _is_set(value: Any) -> bool:
    """A value counts as set when it is present and not its type's zero value."""
    return value is not None and bool(value)


@dataclass
class ResourceData:
    """Attribute values of one resource, plus the identifier it is known by."""

    values: dict[str, Any] = field(default_factory=dict)
    id: str = ""

    def get(self, key: str) -> Any:
        """Return the value stored under ``key``, or None when it is absent."""
        return self.values.get(key)

    def get_ok(self, key: str) -> tuple[Any, bool]:
        """Return the value under ``key`` and whether it holds a non-zero value."""
        value = self.values.get(key)
        return value, _is_set(value)

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``."""
        self.values[key] = value


@dataclass
class ProviderConfig:
    """What every resource operation needs: an API client and the app's base URL."""

    client: Any
    custom_app_url: str