"""Text chart resource: payload building, API-to-state mapping and CRUD."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from sfxprovider.resource_data import ProviderConfig, ResourceData
from sfxprovider.util import CHART_APP_PATH, build_app_url

log = logging.getLogger(__name__)


def get_payload_text_chart(data: ResourceData) -> dict[str, Any]:
    """Create/update request for a text chart."""
    return {
        "name": data.get("name") or "",
        "description": data.get("description") or "",
        "options": {"type": "Text", "markdown": data.get("markdown") or ""},
    }


def text_chart_api_to_state(data: ResourceData, chart: Mapping[str, Any]) -> None:
    """Copy a text chart returned by the API into the resource state."""
    log.debug("SignalFx: Got Text Chart to enState: %s", json.dumps(chart, default=str))
    data.set("name", chart.get("name", ""))
    data.set("description", chart.get("description", ""))
    options: Mapping[str, Any] = chart.get("options") or {}
    data.set("markdown", options.get("markdown", ""))


def _set_url(data: ResourceData, config: ProviderConfig, chart_id: str) -> None:
    data.set("url", build_app_url(config.custom_app_url, CHART_APP_PATH + chart_id))


def text_chart_create(data: ResourceData, config: ProviderConfig) -> None:
    """Create the chart and record its id, URL and returned state."""
    payload = get_payload_text_chart(data)
    log.debug("SignalFx: Create Text Chart Payload: %s", json.dumps(payload, default=str))
    chart = config.client.create_chart(payload)
    _set_url(data, config, chart["id"])
    data.id = chart["id"]
    text_chart_api_to_state(data, chart)


def text_chart_read(data: ResourceData, config: ProviderConfig) -> None:
    """Refresh the resource state from the API."""
    chart = config.client.get_chart(data.id)
    _set_url(data, config, chart["id"])
    text_chart_api_to_state(data, chart)


def text_chart_update(data: ResourceData, config: ProviderConfig) -> None:
    """Send the current state to the API and take back what it returns."""
    payload = get_payload_text_chart(data)
    log.debug("SignalFx: Update Text Chart Payload: %s", json.dumps(payload, default=str))
    chart = config.client.update_chart(data.id, payload)
    log.debug("SignalFx: Update Text Chart Response: %s", chart)
    data.id = chart["id"]
    text_chart_api_to_state(data, chart)


def text_chart_delete(data: ResourceData, config: ProviderConfig) -> Any:
    """Delete the chart."""
    return config.client.delete_chart(data.id)