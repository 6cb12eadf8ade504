"""Build time chart API payloads from resource state and validate its fields."""

from __future__ import annotations

from typing import Any, Mapping

from sfxprovider.resource_data import ResourceData
from sfxprovider.util import (
    FULL_PALETTE_COLORS,
    PALETTE_COLORS,
    get_legend_field_options,
    get_legend_options,
    get_value_using_max_float_as_default,
)

PLOT_TYPES = ("LineChart", "AreaChart", "ColumnChart", "Histogram")
AXES = ("right", "left")
VALUE_UNITS = (
    "Bit",
    "Kilobit",
    "Megabit",
    "Gigabit",
    "Terabit",
    "Petabit",
    "Exabit",
    "Zettabit",
    "Yottabit",
    "Byte",
    "Kibibyte",
    "Mebibyte",
    "Gigibyte",
    "Tebibyte",
    "Pebibyte",
    "Exbibyte",
    "Zebibyte",
    "Yobibyte",
    "Nanosecond",
    "Microsecond",
    "Millisecond",
    "Second",
    "Minute",
    "Hour",
    "Day",
    "Week",
)

_ON_CHART_LEGEND_NAMES = {"metric": "sf_originatingMetric", "plot_label": "sf_metric"}

_AXIS_FLOATS = {
    "min_value": "min",
    "max_value": "max",
    "high_watermark": "highWatermark",
    "low_watermark": "lowWatermark",
}
_AXIS_STRINGS = {
    "label": "label",
    "high_watermark_label": "highWatermarkLabel",
    "low_watermark_label": "lowWatermarkLabel",
}


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def get_payload_time_chart(data: ResourceData) -> dict[str, Any]:
    """Create/update request for a time chart."""
    payload: dict[str, Any] = {
        "name": data.get("name") or "",
        "description": data.get("description") or "",
        "programText": data.get("program_text") or "",
    }

    options = get_time_chart_options(data)
    options["axes"] = get_axes_options(data)

    # legend_fields_to_hide wins; legend_options_fields gives ordering and toggles.
    legend = get_legend_options(data)
    if legend is None:
        legend = get_legend_field_options(data)
    if legend is not None:
        options["legendOptions"] = legend

    viz_options = get_per_signal_viz_options(data)
    if viz_options:
        options["publishLabelOptions"] = viz_options
    event_options = get_per_event_options(data)
    if event_options:
        options["eventPublishLabelOptions"] = event_options

    dimension, ok = data.get_ok("on_chart_legend_dimension")
    if ok:
        options["onChartLegendOptions"] = {
            "showLegend": True,
            "dimensionInLegend": _ON_CHART_LEGEND_NAMES.get(dimension, dimension),
        }

    payload["options"] = options
    return payload


def get_per_signal_viz_options(data: ResourceData) -> list[dict[str, Any]]:
    """Publish label options from the ``viz_options`` entries."""
    result = []
    for viz in data.get("viz_options") or []:
        item: dict[str, Any] = {"label": viz["label"]}
        if _non_empty_str(viz.get("display_name")):
            item["displayName"] = viz["display_name"]
        color = viz.get("color")
        if isinstance(color, str) and color in PALETTE_COLORS:
            item["paletteIndex"] = PALETTE_COLORS[color]
        if _non_empty_str(viz.get("plot_type")):
            item["plotType"] = viz["plot_type"]
        item["yAxis"] = 1 if viz.get("axis") == "right" else 0
        for key, api_key in (
            ("value_unit", "valueUnit"),
            ("value_suffix", "valueSuffix"),
            ("value_prefix", "valuePrefix"),
        ):
            if _non_empty_str(viz.get(key)):
                item[api_key] = viz[key]
        result.append(item)
    return result


def get_per_event_options(data: ResourceData) -> list[dict[str, Any]]:
    """Event publish label options from the ``event_options`` entries."""
    result = []
    for event in data.get("event_options") or []:
        item: dict[str, Any] = {"label": event["label"]}
        if _non_empty_str(event.get("display_name")):
            item["displayName"] = event["display_name"]
        color = event.get("color")
        if isinstance(color, str) and color in PALETTE_COLORS:
            item["paletteIndex"] = PALETTE_COLORS[color]
        result.append(item)
    return result


def _first_axis(data: ResourceData, key: str) -> dict[str, Any] | None:
    value, ok = data.get_ok(key)
    if not ok:
        return None
    return get_single_axis_options(next(iter(value)))


def get_axes_options(data: ResourceData) -> list[dict[str, Any] | None]:
    """Left and right axis options, in that order; None where unset."""
    return [_first_axis(data, "axis_left"), _first_axis(data, "axis_right")]


def get_single_axis_options(axis_opt: Mapping[str, Any]) -> dict[str, Any] | None:
    """API options for one axis, or None when nothing meaningful is set."""
    axis: dict[str, Any] = {}
    for key, api_key in _AXIS_FLOATS.items():
        if key in axis_opt:
            axis[api_key] = get_value_using_max_float_as_default(float(axis_opt[key]))
    for key, api_key in _AXIS_STRINGS.items():
        if key in axis_opt:
            axis[api_key] = axis_opt[key]
    if all(value is None or value == "" for value in axis.values()):
        return None
    return axis


def get_time_chart_options(data: ResourceData) -> dict[str, Any]:
    """Chart options for a time chart, without axes, legends or per-plot options."""
    options: dict[str, Any] = {
        "stacked": bool(data.get("stacked")),
        "type": "TimeSeriesChart",
    }
    for key, api_key in (
        ("unit_prefix", "unitPrefix"),
        ("color_by", "colorBy"),
        ("show_event_lines", "showEventLines"),
        ("plot_type", "defaultPlotType"),
        ("axes_precision", "axisPrecision"),
        ("axes_include_zero", "includeZero"),
    ):
        value, ok = data.get_ok(key)
        if ok:
            options[api_key] = value

    program: dict[str, Any] = {}
    value, ok = data.get_ok("minimum_resolution")
    if ok:
        program["minimumResolution"] = int(value) * 1000
    value, ok = data.get_ok("max_delay")
    if ok:
        program["maxDelay"] = int(value) * 1000
    value, ok = data.get_ok("timezone")
    if ok:
        program["timezone"] = value
    value, ok = data.get_ok("disable_sampling")
    if ok:
        program["disableSampling"] = value
    options["programOptions"] = program

    time_options: dict[str, Any] | None = None
    value, ok = data.get_ok("time_range")
    if ok:
        time_options = {"range": int(value) * 1000, "type": "relative"}
    value, ok = data.get_ok("start_time")
    if ok:
        time_options = {"start": int(value) * 1000, "type": "absolute"}
        end, end_ok = data.get_ok("end_time")
        if end_ok:
            time_options["end"] = int(end) * 1000
    if time_options is not None:
        options["time"] = time_options

    show_data_markers = bool(data.get("show_data_markers"))
    chart_type, ok = data.get_ok("plot_type")
    if ok:
        if chart_type == "AreaChart":
            options["areaChartOptions"] = {"showDataMarkers": show_data_markers}
        elif chart_type == "Histogram":
            histogram, hist_ok = data.get_ok("histogram_options")
            if hist_ok:
                theme = histogram[0].get("color_theme")
                if isinstance(theme, str) and theme in FULL_PALETTE_COLORS:
                    options["histogramChartOptions"] = {
                        "colorThemeIndex": FULL_PALETTE_COLORS[theme]
                    }
        else:
            # LineChart and anything else use the line chart defaults.
            options["lineChartOptions"] = {"showDataMarkers": show_data_markers}

    return options


def validate_plot_type_time_chart(value: str) -> str:
    """Check the plot type, returning it unchanged."""
    if value not in PLOT_TYPES:
        raise ValueError(
            f'{value} not allowed; Must be "LineChart", "AreaChart", '
            '"ColumnChart", or "Histogram"'
        )
    return value


def validate_axis_time_chart(value: str) -> str:
    """Check that the axis is right or left."""
    if value not in AXES:
        raise ValueError(f"{value} not allowed; must be either right or left")
    return value


def validate_unit_time_chart(value: str) -> str:
    """Check the value unit against the supported units."""
    if value not in VALUE_UNITS:
        raise ValueError(
            f"{value} not allowed; must be one of: {', '.join(VALUE_UNITS)}"
        )
    return value