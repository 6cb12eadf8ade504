"""Single value chart resource: payload building, API-to-state mapping and CRUD."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from sfxprovider.resource_data import ProviderConfig, ResourceData
from sfxprovider.time_chart import publish_non_time_label_options_to_map
from sfxprovider.time_chart_payload import get_per_signal_viz_options
from sfxprovider.util import (
    CHART_APP_PATH,
    MAX_FLOAT32,
    build_app_url,
    get_color_scale_options,
    get_name_from_chart_colors_by_index,
)

log = logging.getLogger(__name__)


def _from_ms(value: int) -> int:
    """Milliseconds to seconds, truncating toward zero."""
    seconds = abs(int(value)) // 1000
    return -seconds if value < 0 else seconds


def get_payload_single_value_chart(data: ResourceData) -> dict[str, Any]:
    """Create/update request for a single value chart."""
    options = get_single_value_chart_options(data)
    viz_options = get_per_signal_viz_options(data)
    if viz_options:
        options["publishLabelOptions"] = viz_options
    return {
        "name": data.get("name") or "",
        "description": data.get("description") or "",
        "programText": data.get("program_text") or "",
        "options": options,
    }


def get_single_value_chart_options(data: ResourceData) -> dict[str, Any]:
    """Chart options for a single value chart, without per-plot options."""
    options: dict[str, Any] = {"type": "SingleValue"}

    value, ok = data.get_ok("unit_prefix")
    if ok:
        options["unitPrefix"] = value
    color_by, ok = data.get_ok("color_by")
    if ok:
        options["colorBy"] = color_by
        if color_by == "Scale":
            color_scale = get_color_scale_options(data)
            if color_scale:
                options["colorScale2"] = color_scale

    value, ok = data.get_ok("max_delay")
    if ok:
        options["programOptions"] = {"maxDelay": int(value) * 1000}

    value, ok = data.get_ok("refresh_interval")
    if ok:
        options["refreshInterval"] = int(value) * 1000
    value, ok = data.get_ok("max_precision")
    if ok:
        options["maximumPrecision"] = int(value)

    value, ok = data.get_ok("secondary_visualization")
    if ok and value != "":
        options["secondaryVisualization"] = value
    value, ok = data.get_ok("is_timestamp_hidden")
    if ok:
        options["timestampHidden"] = bool(value)
    value, ok = data.get_ok("show_spark_line")
    if ok:
        options["showSparkLine"] = bool(value)

    return options


def decode_color_scale(options: Mapping[str, Any]) -> list[dict[str, Any]]:
    """State entries for the API colour scale, with max-float defaults for open bounds."""
    scales = []
    for entry in options.get("colorScale2") or []:
        scale: dict[str, Any] = {}
        for key in ("gt", "gte", "lt", "lte"):
            bound = entry.get(key)
            scale[key] = MAX_FLOAT32 if bound is None else float(bound)
        index = entry.get("paletteIndex")
        if index is not None:
            scale["color"] = get_name_from_chart_colors_by_index(int(index))
        scales.append(scale)
    return scales


def single_value_chart_api_to_state(data: ResourceData, chart: Mapping[str, Any]) -> None:
    """Copy a single value chart returned by the API into the resource state."""
    log.debug(
        "SignalFx: Got Single Value Chart to enState: %s", json.dumps(chart, default=str)
    )
    data.set("name", chart.get("name", ""))
    data.set("description", chart.get("description", ""))
    data.set("program_text", chart.get("programText", ""))

    options: Mapping[str, Any] = chart.get("options") or {}
    data.set("unit_prefix", options.get("unitPrefix", ""))
    data.set("color_by", options.get("colorBy", ""))
    if options.get("refreshInterval") is not None:
        data.set("refresh_interval", _from_ms(options["refreshInterval"]))
    data.set("max_precision", options.get("maximumPrecision"))
    data.set("secondary_visualization", options.get("secondaryVisualization", ""))
    data.set("is_timestamp_hidden", bool(options.get("timestampHidden", False)))
    data.set("show_spark_line", bool(options.get("showSparkLine", False)))

    program = options.get("programOptions")
    if program is not None and program.get("maxDelay") is not None:
        data.set("max_delay", _from_ms(program["maxDelay"]))

    publish = options.get("publishLabelOptions") or []
    if publish:
        data.set(
            "viz_options",
            [publish_non_time_label_options_to_map(item) for item in publish],
        )

    if options.get("colorBy") == "Scale" and options.get("colorScale2"):
        data.set("color_scale", decode_color_scale(options))


def _set_url(data: ResourceData, config: ProviderConfig, chart_id: str) -> None:
    data.set("url", build_app_url(config.custom_app_url, CHART_APP_PATH + chart_id))


def single_value_chart_create(data: ResourceData, config: ProviderConfig) -> None:
    """Create the chart and record its id, URL and returned state."""
    payload = get_payload_single_value_chart(data)
    log.debug(
        "SignalFx: Create Single Value Chart Payload: %s", json.dumps(payload, default=str)
    )
    chart = config.client.create_chart(payload)
    _set_url(data, config, chart["id"])
    data.id = chart["id"]
    single_value_chart_api_to_state(data, chart)


def single_value_chart_read(data: ResourceData, config: ProviderConfig) -> None:
    """Refresh the resource state from the API."""
    chart = config.client.get_chart(data.id)
    _set_url(data, config, chart["id"])
    single_value_chart_api_to_state(data, chart)


def single_value_chart_update(data: ResourceData, config: ProviderConfig) -> None:
    """Send the current state to the API and take back what it returns."""
    payload = get_payload_single_value_chart(data)
    log.debug(
        "SignalFx: Update Single Value Chart Payload: %s", json.dumps(payload, default=str)
    )
    chart = config.client.update_chart(data.id, payload)
    log.debug("SignalFx: Update Single Value Chart Response: %s", chart)
    data.id = chart["id"]
    single_value_chart_api_to_state(data, chart)


def single_value_chart_delete(data: ResourceData, config: ProviderConfig) -> Any:
    """Delete the chart."""
    return config.client.delete_chart(data.id)