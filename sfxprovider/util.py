"""Shared helpers: URLs, HTTP calls, colour palettes, validators and legend options."""

from __future__ import annotations

import json
import re
import struct
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Iterable, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from sfxprovider.resource_data import ProviderConfig, ResourceData

# Workaround for lastUpdated drifting after server-side post processing.
OFFSET = 10000.0
CHART_API_PATH = "/v2/chart"
CHART_APP_PATH = "/chart/"

MAX_FLOAT32 = 3.4028234663852886e38


@dataclass(frozen=True)
class ChartColor:
    """A named colour of the chart colour scale."""

    name: str
    hex: str


CHART_COLORS: tuple[ChartColor, ...] = (
    ChartColor("gray", "#999999"),
    ChartColor("blue", "#0077c2"),
    ChartColor("light_blue", "#00b9ff"),
    ChartColor("navy", "#6CA2B7"),
    ChartColor("dark_orange", "#b04600"),
    ChartColor("orange", "#f47e00"),
    ChartColor("dark_yellow", "#e5b312"),
    ChartColor("magenta", "#bd468d"),
    ChartColor("cerise", "#e9008a"),
    ChartColor("pink", "#ff8dd1"),
    ChartColor("violet", "#876ff3"),
    ChartColor("purple", "#a747ff"),
    ChartColor("gray_blue", "#ab99bc"),
    ChartColor("dark_green", "#007c1d"),
    ChartColor("green", "#05ce00"),
    ChartColor("aquamarine", "#0dba8f"),
    ChartColor("red", "#ea1849"),
    ChartColor("yellow", "#ea1849"),
    ChartColor("vivid_yellow", "#ea1849"),
    ChartColor("light_green", "#acef7f"),
    ChartColor("lime_green", "#6bd37e"),
)

PALETTE_COLORS: dict[str, int] = {
    "gray": 0,
    "blue": 1,
    "azure": 2,
    "navy": 3,
    "brown": 4,
    "orange": 5,
    "yellow": 6,
    "magenta": 7,
    "purple": 8,
    "pink": 9,
    "violet": 10,
    "lilac": 11,
    "iris": 12,
    "emerald": 13,
    "green": 14,
    "aquamarine": 15,
}

FULL_PALETTE_COLORS: dict[str, int] = {
    **PALETTE_COLORS,
    "red": 16,
    "gold": 17,
    "greenyellow": 18,
    "chartreuse": 19,
    "jade": 20,
}

SECONDARY_VISUALIZATIONS = ("", "None", "Radial", "Linear", "Sparkline")

_RELATIVE_TIME = re.compile(r"-([0-9]+)([mhdw])")
_UNIT_MILLISECONDS = {
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
    "w": 7 * 24 * 60 * 60 * 1000,
}


def build_url(api_url: str, path: str, params: Mapping[str, str] | None) -> str:
    """Replace the path of ``api_url`` and merge ``params`` into its query."""
    parts = urlsplit(api_url)
    query = parts.query
    if params:
        merged = dict(parse_qsl(query, keep_blank_values=True))
        merged.update(params)
        query = urlencode(sorted(merged.items()))
    return urlunsplit((parts.scheme, parts.netloc, path, query, parts.fragment))


def build_app_url(app_url: str, fragment: str) -> str:
    """Build an app URL whose route lives in the fragment, after a trailing slash."""
    parts = urlsplit(app_url + "/")
    return urlunsplit(parts._replace(fragment=fragment))


def chart_exists(data: ResourceData, config: ProviderConfig) -> bool:
    """Return whether the chart with the resource's id can be fetched."""
    try:
        config.client.get_chart(data.id)
    except Exception as err:
        if "404" in str(err):
            return False
        raise
    return True


def send_request(
    method: str, url: str, token: str, payload: bytes | None
) -> tuple[int, bytes]:
    """Send an HTTP request with the API token and return (status, body).

    Error statuses are returned, not raised; a request that cannot be sent
    raises ConnectionError.
    """
    try:
        request = urllib.request.Request(url, data=payload or None, method=method)
        request.add_header("Content-Type", "application/json")
        request.add_header("X-SF-Token", token)
        response = urllib.request.urlopen(request)
    except urllib.error.HTTPError as err:
        with err:
            return err.code, _read_body(err, method)
    except (urllib.error.URLError, ValueError, OSError) as err:
        raise ConnectionError(
            f"Failed sending {method} request to Signalfx: {err}"
        ) from err
    with response:
        return response.status, _read_body(response, method)


def _read_body(response: Any, method: str) -> bytes:
    try:
        return response.read()
    except OSError as err:
        raise ConnectionError(
            f"Failed reading response body from {method} request: {err}"
        ) from err


def flatten_string_slice_to_set(values: Iterable[str] | None) -> set[str] | None:
    """Turn strings into a set, dropping empty ones; None for empty input."""
    values = list(values or [])
    if not values:
        return None
    return {value for value in values if value != ""}


def validate_sort_by(value: str) -> str:
    """Check that a sort field starts with + or -, returning it unchanged."""
    if not value.startswith(("+", "-")):
        raise ValueError(
            f"{value} not allowed; must start either with + or - "
            "(ascending or descending)"
        )
    return value


def _name_by_index(palette: Mapping[str, int], index: int) -> str:
    for name, position in palette.items():
        if position == index:
            return name
    raise ValueError(f"Unknown color index {index}")


def get_name_from_palette_colors_by_index(index: int) -> str:
    """Name of the palette colour at ``index``."""
    return _name_by_index(PALETTE_COLORS, index)


def get_name_from_full_palette_colors_by_index(index: int) -> str:
    """Name of the full-palette colour at ``index``."""
    return _name_by_index(FULL_PALETTE_COLORS, index)


def get_name_from_chart_colors_by_index(index: int) -> str:
    """Name of the chart scale colour at ``index``."""
    if 0 <= index < len(CHART_COLORS):
        return CHART_COLORS[index].name
    raise ValueError(f"Unknown color index {index}")


def get_color_scale_options(data: ResourceData) -> list[dict[str, Any]]:
    """Colour scale options built from the resource's ``color_scale`` entries."""
    return get_color_scale_options_from_slice(list(data.get("color_scale") or []))


def get_value_using_max_float_as_default(value: float) -> float | None:
    """Return ``value`` as a 32-bit float, or None when it is the max-float default."""
    if value >= MAX_FLOAT32 or value <= -MAX_FLOAT32:
        return None
    return struct.unpack("f", struct.pack("f", value))[0]


def get_color_scale_options_from_slice(
    color_scale: Iterable[Mapping[str, Any]],
) -> list[dict[str, Any]]:
    """Convert colour scale entries into API secondary-visualization ranges."""
    palette = {color.name: index for index, color in reversed(list(enumerate(CHART_COLORS)))}
    options = []
    for scale in color_scale:
        options.append(
            {
                "gt": get_value_using_max_float_as_default(scale.get("gt", MAX_FLOAT32)),
                "gte": get_value_using_max_float_as_default(scale.get("gte", MAX_FLOAT32)),
                "lt": get_value_using_max_float_as_default(scale.get("lt", MAX_FLOAT32)),
                "lte": get_value_using_max_float_as_default(scale.get("lte", MAX_FLOAT32)),
                "paletteIndex": palette.get(scale.get("color")),
            }
        )
    return options


def _parse_response(body: bytes, name: Any, stage: str) -> dict[str, Any]:
    try:
        return json.loads(body)
    except ValueError as err:
        raise ValueError(
            f"Failed unmarshaling for the resource {name} during {stage}: {err}"
        ) from err


def _decode(body: bytes) -> str:
    return body.decode("utf-8", "replace")


def resource_read(url: str, token: str, data: ResourceData) -> None:
    """Refresh sync state from the API.

    A resource updated remotely after the recorded time is marked unsynced; one
    deleted remotely loses its id.
    """
    status, body = send_request("GET", url, token, None)
    name = data.get("name")
    if status == 200:
        response = _parse_response(body, name, "read")
        last_updated = float(response["lastUpdated"])
        if last_updated > float(data.get("last_updated") or 0.0) + OFFSET:
            data.set("synced", False)
            data.set("last_updated", last_updated)
    elif status == 404 and " not found" in _decode(body):
        data.id = ""
    else:
        raise RuntimeError(
            f"For the resource '{name}' SignalFx returned status {status}: \n{_decode(body)}"
        )


def resource_create(url: str, token: str, payload: bytes, data: ResourceData) -> None:
    """Create a resource from ``payload`` and record its id and update time."""
    status, body = send_request("POST", url, token, payload)
    name = data.get("name")
    if status != 200:
        raise RuntimeError(
            f"For the resource {name} SignalFx returned status {status}: \n{_decode(body)}"
        )
    response = _parse_response(body, name, "creation")
    data.id = str(response["id"])
    data.set("last_updated", float(response["lastUpdated"]))
    data.set("synced", True)


def resource_update(url: str, token: str, payload: bytes, data: ResourceData) -> None:
    """Update a resource from ``payload``; it is then in sync."""
    status, body = send_request("PUT", url, token, payload)
    name = data.get("name")
    if status != 200:
        raise RuntimeError(
            f"For the resource '{name}' SignalFx returned status {status}: \n{_decode(body)}"
        )
    response = _parse_response(body, name, "creation")
    data.set("synced", True)
    data.set("last_updated", float(response["lastUpdated"]))


def resource_delete(url: str, token: str, data: ResourceData) -> None:
    """Delete a resource; a missing resource counts as deleted."""
    name = data.get("name")
    try:
        status, body = send_request("DELETE", url, token, None)
    except ConnectionError as err:
        raise ConnectionError(f"Failed deleting resource  {name}: {err}") from err
    if status < 400 or status == 404:
        data.id = ""
    else:
        raise RuntimeError(
            f"For the resource  {name} SignalFx returned status {status}: \n{_decode(body)}"
        )


def _legend_property(name: str) -> str:
    if name == "metric":
        return "sf_originatingMetric"
    if name in ("plot_label", "Plot Label"):
        return "sf_metric"
    return name


def get_legend_options(data: ResourceData) -> dict[str, Any] | None:
    """Data table options hiding every field in ``legend_fields_to_hide``."""
    properties, ok = data.get_ok("legend_fields_to_hide")
    if not ok:
        return None
    fields = [
        {"property": _legend_property(prop), "enabled": False} for prop in properties
    ]
    return {"fields": fields} if fields else None


def get_legend_field_options(data: ResourceData) -> dict[str, Any] | None:
    """Data table options from the ordered ``legend_options_fields``."""
    fields, ok = data.get_ok("legend_options_fields")
    if not ok:
        return None
    options = [
        {"property": field["property"], "enabled": field["enabled"]} for field in fields
    ]
    return {"fields": options} if options else None


def validate_signalfx_relative_time(value: str) -> str:
    """Check a relative time such as -5m or -1h, returning it unchanged."""
    if not _RELATIVE_TIME.search(value):
        raise ValueError(
            f"{value} not allowed. Please use milliseconds from epoch or SignalFx "
            "time syntax (e.g. -5m, -1h)"
        )
    return value


def from_range_to_milliseconds(time_range: str) -> int:
    """Convert a relative time such as -15m into milliseconds."""
    match = _RELATIVE_TIME.search(time_range)
    if match is None:
        raise ValueError(f"{time_range} is not a relative time range")
    amount, unit = match.groups()
    return int(amount) * _UNIT_MILLISECONDS[unit]


def _validate_color(value: str, palette: Mapping[str, int]) -> str:
    if value not in palette:
        raise ValueError(f"{value} not allowed; must be either {','.join(palette)}")
    return value


def validate_per_signal_color(value: str) -> str:
    """Check that ``value`` names a palette colour."""
    return _validate_color(value, PALETTE_COLORS)


def validate_full_palette_colors(value: str) -> str:
    """Check that ``value`` names a full-palette colour."""
    return _validate_color(value, FULL_PALETTE_COLORS)


def validate_secondary_visualization(value: str) -> str:
    """Check the secondary visualization kind."""
    if value not in SECONDARY_VISUALIZATIONS:
        raise ValueError(
            f"{value} not allowed; must be one of: {', '.join(SECONDARY_VISUALIZATIONS)}"
        )
    return value