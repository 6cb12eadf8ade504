"""Time chart resource: state migration, API-to-state mapping and CRUD operations."""

from __future__ import annotations

import json
import logging
import struct
import sys
from typing import Any, Mapping

from sfxprovider.resource_data import ProviderConfig, ResourceData
from sfxprovider.time_chart_payload import get_payload_time_chart
from sfxprovider.util import (
    CHART_APP_PATH,
    build_app_url,
    get_name_from_full_palette_colors_by_index,
    get_name_from_palette_colors_by_index,
)

log = logging.getLogger(__name__)

MAX_FLOAT64 = sys.float_info.max

_STATE_LEGEND_NAMES = {"sf_originatingMetric": "metric", "sf_metric": "plot_label"}


def _parse_float(text: str, bits: int) -> float | None:
    """Parse ``text`` as a float of the given width; None when it does not fit or parse."""
    try:
        value = float(text)
    except (TypeError, ValueError):
        return None
    if bits == 32:
        try:
            return struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError:
            return None
    return value


def migrate_axis_state(version: int, attributes: dict[str, str] | None) -> dict[str, str] | None:
    """Upgrade flattened axis attributes from schema ``version`` to the current one."""
    if version == 0:
        return migrate_axis_state_v0_to_v1(attributes)
    raise ValueError(f"Unexpected schema version: {version}")


def migrate_axis_state_v0_to_v1(attributes: dict[str, str] | None) -> dict[str, str] | None:
    """Drop axis attributes that only hold the old max-float defaults."""
    if not attributes:
        return attributes
    migrated = dict(attributes)
    checks = (
        ("max_value", 64, MAX_FLOAT64),
        ("min_value", 64, -MAX_FLOAT64),
        ("low_watermark", 64, -MAX_FLOAT64),
        ("high_watermark", 32, MAX_FLOAT64),
    )
    for key, bits, default in checks:
        if key in migrated and _parse_float(migrated[key], bits) == default:
            del migrated[key]
    return migrated


def _from_ms(value: int) -> int:
    """Milliseconds to seconds, truncating toward zero."""
    seconds = abs(int(value)) // 1000
    return -seconds if value < 0 else seconds


def _is_zero_axis(axis: Mapping[str, Any] | None) -> bool:
    return axis is None or all(value is None or value == "" for value in axis.values())


def axis_to_map(axis: Mapping[str, Any] | None) -> list[dict[str, Any]] | None:
    """State representation of one API axis, with max-float defaults for unset bounds."""
    if axis is None:
        return None

    def bound(key: str, default: float) -> float:
        value = axis.get(key)
        return default if value is None else float(value)

    return [
        {
            "high_watermark": bound("highWatermark", MAX_FLOAT64),
            "high_watermark_label": axis.get("highWatermarkLabel") or "",
            "label": axis.get("label") or "",
            "low_watermark": bound("lowWatermark", -MAX_FLOAT64),
            "low_watermark_label": axis.get("lowWatermarkLabel") or "",
            "max_value": bound("max", MAX_FLOAT64),
            "min_value": bound("min", -MAX_FLOAT64),
        }
    ]


def _palette_name(index: Any) -> str:
    if index is None:
        return ""
    return get_name_from_palette_colors_by_index(int(index))


def publish_non_time_label_options_to_map(options: Mapping[str, Any]) -> dict[str, Any]:
    """State map of publish label options for charts without axes or plot types."""
    return {
        "label": options.get("label", ""),
        "display_name": options.get("displayName", ""),
        "color": _palette_name(options.get("paletteIndex")),
        "value_unit": options.get("valueUnit", ""),
        "value_suffix": options.get("valueSuffix", ""),
        "value_prefix": options.get("valuePrefix", ""),
    }


def publish_label_options_to_map(options: Mapping[str, Any]) -> dict[str, Any]:
    """State map of time chart publish label options."""
    return {
        "label": options.get("label", ""),
        "display_name": options.get("displayName", ""),
        "color": _palette_name(options.get("paletteIndex")),
        "axis": "right" if options.get("yAxis") == 1 else "left",
        "plot_type": options.get("plotType", ""),
        "value_unit": options.get("valueUnit", ""),
        "value_suffix": options.get("valueSuffix", ""),
        "value_prefix": options.get("valuePrefix", ""),
    }


def time_chart_api_to_state(data: ResourceData, chart: Mapping[str, Any]) -> None:
    """Copy a time chart returned by the API into the resource state."""
    log.debug("SignalFx: Got Time Chart to enState: %s", json.dumps(chart, default=str))

    data.set("name", chart.get("name", ""))
    data.set("description", chart.get("description", ""))
    data.set("program_text", chart.get("programText", ""))
    data.set("tags", chart.get("tags"))

    options: Mapping[str, Any] = chart.get("options") or {}
    data.set("axes_include_zero", bool(options.get("includeZero", False)))
    data.set("color_by", options.get("colorBy", ""))
    data.set("plot_type", options.get("defaultPlotType", ""))
    data.set("axes_precision", options.get("axisPrecision"))
    data.set("show_event_lines", bool(options.get("showEventLines", False)))
    data.set("stacked", bool(options.get("stacked", False)))
    data.set("unit_prefix", options.get("unitPrefix", ""))

    for key in ("areaChartOptions", "lineChartOptions"):
        chart_options = options.get(key)
        if chart_options is not None:
            data.set("show_data_markers", bool(chart_options.get("showDataMarkers", False)))

    histogram = options.get("histogramChartOptions")
    if histogram is not None and histogram.get("colorThemeIndex") is not None:
        color = get_name_from_full_palette_colors_by_index(int(histogram["colorThemeIndex"]))
        data.set("histogram_options", [{"color_theme": color}])

    axes = list(options.get("axes") or [])
    for position, key in enumerate(("axis_left", "axis_right")):
        if position >= len(axes):
            break
        axis = axes[position]
        if _is_zero_axis(axis):
            log.debug("SignalFx: %s is nil or zero, skipping", key)
        else:
            data.set(key, axis_to_map(axis))

    program = options.get("programOptions")
    if program is not None:
        if program.get("minimumResolution") is not None:
            data.set("minimum_resolution", _from_ms(program["minimumResolution"]))
        if program.get("maxDelay") is not None:
            data.set("max_delay", _from_ms(program["maxDelay"]))
        data.set("disable_sampling", bool(program.get("disableSampling", False)))
        data.set("timezone", program.get("timezone", ""))

    time_options = options.get("time")
    if time_options is not None:
        if time_options.get("type") == "relative":
            if time_options.get("range") is not None:
                data.set("time_range", _from_ms(time_options["range"]))
        else:
            if time_options.get("start") is not None:
                data.set("start_time", _from_ms(time_options["start"]))
            if time_options.get("end") is not None:
                data.set("end_time", _from_ms(time_options["end"]))

    publish = options.get("publishLabelOptions") or []
    if publish:
        data.set("viz_options", [publish_label_options_to_map(item) for item in publish])

    events = options.get("eventPublishLabelOptions") or []
    if events:
        data.set(
            "event_options",
            [
                {
                    "label": event.get("label", ""),
                    "display_name": event.get("displayName", ""),
                    "color": _palette_name(event.get("paletteIndex")),
                }
                for event in events
            ],
        )

    legend = options.get("legendOptions")
    if legend is not None and legend.get("fields"):
        data.set(
            "legend_options_fields",
            [
                {"property": field.get("property", ""), "enabled": bool(field.get("enabled", False))}
                for field in legend["fields"]
            ],
        )

    on_chart = options.get("onChartLegendOptions")
    if on_chart is not None:
        dimension = on_chart.get("dimensionInLegend", "")
        data.set("on_chart_legend_dimension", _STATE_LEGEND_NAMES.get(dimension, dimension))


def _set_url(data: ResourceData, config: ProviderConfig, chart_id: str) -> None:
    data.set("url", build_app_url(config.custom_app_url, CHART_APP_PATH + chart_id))


def time_chart_create(data: ResourceData, config: ProviderConfig) -> None:
    """Create the time chart and record its id, URL and returned state."""
    payload = get_payload_time_chart(data)
    log.debug("SignalFx: Create Time Chart Payload: %s", json.dumps(payload, default=str))
    chart = config.client.create_chart(payload)
    _set_url(data, config, chart["id"])
    data.id = chart["id"]
    time_chart_api_to_state(data, chart)


def time_chart_read(data: ResourceData, config: ProviderConfig) -> None:
    """Refresh the resource state from the API."""
    chart = config.client.get_chart(data.id)
    _set_url(data, config, chart["id"])
    time_chart_api_to_state(data, chart)


def time_chart_update(data: ResourceData, config: ProviderConfig) -> None:
    """Send the current state to the API and take back what it returns."""
    payload = get_payload_time_chart(data)
    chart = config.client.update_chart(data.id, payload)
    log.debug("SignalFx: Update Time Chart Response: %s", chart)
    _set_url(data, config, chart["id"])
    data.id = chart["id"]
    time_chart_api_to_state(data, chart)


def time_chart_delete(data: ResourceData, config: ProviderConfig) -> Any:
    """Delete the time chart."""
    return config.client.delete_chart(data.id)