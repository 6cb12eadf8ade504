"""Slack and VictorOps integration resources."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping

from sfxprovider.resource_data import ProviderConfig, ResourceData

log = logging.getLogger(__name__)

_ADMIN_HINT = "Please verify you are using an admin token when working with integrations"


def _call_with_admin_hint(call: Callable[[], Any]) -> Any:
    try:
        return call()
    except Exception as err:
        if "40" in str(err):
            raise RuntimeError(f"{err}\n{_ADMIN_HINT}") from err
        raise


def _exists(fetch: Callable[[str], Any], data: ResourceData) -> bool:
    try:
        fetch(data.id)
    except Exception as err:
        if "404" in str(err):
            return False
        raise
    return True


def _common_to_state(data: ResourceData, integration: Mapping[str, Any]) -> None:
    data.set("name", integration.get("name", ""))
    data.set("enabled", bool(integration.get("enabled", False)))


def get_slack_payload(data: ResourceData) -> dict[str, Any]:
    """Create/update request for a Slack integration."""
    return {
        "type": "Slack",
        "name": data.get("name") or "",
        "enabled": bool(data.get("enabled")),
        "webhookUrl": data.get("webhook_url") or "",
    }


def slack_integration_api_to_state(
    data: ResourceData, integration: Mapping[str, Any]
) -> None:
    """Copy a Slack integration into state; the API never returns the webhook URL."""
    log.debug(
        "SignalFx: Got Slack Integration to enState: %s",
        json.dumps(integration, default=str),
    )
    _common_to_state(data, integration)


def slack_create(data: ResourceData, config: ProviderConfig) -> None:
    """Create the Slack integration and record its id and state."""
    payload = get_slack_payload(data)
    log.debug("SignalFx: Create Slack Integration Payload: %s", json.dumps(payload))
    integration = _call_with_admin_hint(
        lambda: config.client.create_slack_integration(payload)
    )
    data.id = integration["id"]
    slack_integration_api_to_state(data, integration)


def slack_read(data: ResourceData, config: ProviderConfig) -> None:
    """Refresh state; a missing integration loses its id before the error is raised."""
    try:
        integration = config.client.get_slack_integration(data.id)
    except Exception as err:
        if str(err).startswith("404"):
            data.id = ""
        raise
    slack_integration_api_to_state(data, integration)


def slack_update(data: ResourceData, config: ProviderConfig) -> None:
    """Send the current state to the API and take back what it returns."""
    payload = get_slack_payload(data)
    log.debug("SignalFx: Update Slack Integration Payload: %s", json.dumps(payload))
    integration = _call_with_admin_hint(
        lambda: config.client.update_slack_integration(data.id, payload)
    )
    data.id = integration["id"]
    slack_integration_api_to_state(data, integration)


def slack_delete(data: ResourceData, config: ProviderConfig) -> Any:
    """Delete the Slack integration."""
    return config.client.delete_slack_integration(data.id)


def slack_exists(data: ResourceData, config: ProviderConfig) -> bool:
    """Return whether the Slack integration can be fetched."""
    return _exists(config.client.get_slack_integration, data)


def get_victor_ops_payload(data: ResourceData) -> dict[str, Any]:
    """Create/update request for a VictorOps integration."""
    return {
        "type": "VictorOps",
        "name": data.get("name") or "",
        "enabled": bool(data.get("enabled")),
        "postUrl": data.get("post_url") or "",
    }


def victor_ops_integration_api_to_state(
    data: ResourceData, integration: Mapping[str, Any]
) -> None:
    """Copy a VictorOps integration into state; the API never returns the POST URL."""
    log.debug(
        "SignalFx: Got VictorOps Integration to enState: %s",
        json.dumps(integration, default=str),
    )
    _common_to_state(data, integration)


def victor_ops_create(data: ResourceData, config: ProviderConfig) -> None:
    """Create the VictorOps integration and record its id and state."""
    payload = get_victor_ops_payload(data)
    log.debug("SignalFx: Create VictorOps Integration Payload: %s", json.dumps(payload))
    integration = _call_with_admin_hint(
        lambda: config.client.create_victor_ops_integration(payload)
    )
    data.id = integration["id"]
    victor_ops_integration_api_to_state(data, integration)


def victor_ops_read(data: ResourceData, config: ProviderConfig) -> None:
    """Refresh state; a missing integration loses its id before the error is raised."""
    try:
        integration = config.client.get_victor_ops_integration(data.id)
    except Exception as err:
        if "404" in str(err):
            data.id = ""
        raise
    victor_ops_integration_api_to_state(data, integration)


def victor_ops_update(data: ResourceData, config: ProviderConfig) -> None:
    """Send the current state to the API and take back what it returns."""
    payload = get_victor_ops_payload(data)
    log.debug("SignalFx: Update VictorOps Integration Payload: %s", json.dumps(payload))
    integration = _call_with_admin_hint(
        lambda: config.client.update_victor_ops_integration(data.id, payload)
    )
    data.id = integration["id"]
    victor_ops_integration_api_to_state(data, integration)


def victor_ops_delete(data: ResourceData, config: ProviderConfig) -> Any:
    """Delete the VictorOps integration."""
    return config.client.delete_victor_ops_integration(data.id)


def victor_ops_exists(data: ResourceData, config: ProviderConfig) -> bool:
    """Return whether the VictorOps integration can be fetched."""
    return _exists(config.client.get_victor_ops_integration, data)