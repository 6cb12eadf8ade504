import copy
import sys

import pytest

from sfxprovider.resource_data import ProviderConfig, ResourceData
from sfxprovider.time_chart import (
    axis_to_map,
    migrate_axis_state,
    migrate_axis_state_v0_to_v1,
    publish_label_options_to_map,
    publish_non_time_label_options_to_map,
    time_chart_api_to_state,
    time_chart_create,
    time_chart_delete,
    time_chart_read,
    time_chart_update,
)

MAX = sys.float_info.max


class FakeClient:
    def __init__(self, fail=None):
        self.charts = {}
        self.deleted = []
        self.fail = fail

    def _store(self, chart_id, payload):
        if self.fail:
            raise RuntimeError(self.fail)
        chart = copy.deepcopy(payload)
        chart["id"] = chart_id
        self.charts[chart_id] = chart
        return copy.deepcopy(chart)

    def create_chart(self, payload):
        return self._store("abc123", payload)

    def update_chart(self, chart_id, payload):
        return self._store(chart_id, payload)

    def get_chart(self, chart_id):
        if chart_id not in self.charts:
            raise RuntimeError("404 not found")
        return copy.deepcopy(self.charts[chart_id])

    def delete_chart(self, chart_id):
        self.deleted.append(chart_id)
        self.charts.pop(chart_id, None)


AXIS_LEFT = [
    {
        "high_watermark": 2000.0,
        "high_watermark_label": "high",
        "label": "OMG on fire",
        "low_watermark": 1000.0,
        "low_watermark_label": "low",
        "max_value": 2100.0,
        "min_value": 900.0,
    }
]

VIZ = [
    {
        "label": "CPU Idle",
        "display_name": "CPU Idle Display",
        "color": "orange",
        "axis": "left",
        "plot_type": "Histogram",
        "value_unit": "Byte",
        "value_prefix": "prefix",
        "value_suffix": "suffix",
    }
]


def make_data():
    return ResourceData(
        values={
            "name": "CPU Total Idle",
            "description": "I am described",
            "program_text": "data('cpu.total.idle').publish(label='CPU Idle')\n",
            "time_range": 900,
            "axes_include_zero": True,
            "unit_prefix": "Binary",
            "color_by": "Metric",
            "minimum_resolution": 30,
            "max_delay": 15,
            "disable_sampling": True,
            "timezone": "Europe/Paris",
            "plot_type": "LineChart",
            "show_data_markers": True,
            "show_event_lines": True,
            "axes_precision": 4,
            "on_chart_legend_dimension": "plot_label",
            "legend_options_fields": [{"property": "collector", "enabled": False}],
            "axis_left": copy.deepcopy(AXIS_LEFT),
            "viz_options": copy.deepcopy(VIZ),
            "event_options": [
                {"label": "testing events", "display_name": "farts", "color": "azure"}
            ],
        }
    )


def test_migrate_v0_drops_float64_defaults():
    attributes = {
        "max_value": repr(MAX),
        "min_value": repr(-MAX),
        "low_watermark": repr(-MAX),
        "high_watermark": repr(MAX),
        "label": "OMG on fire",
    }
    result = migrate_axis_state(0, attributes)
    # high_watermark is parsed at 32-bit width, so the float64 default never matches
    assert set(result) == {"high_watermark", "label"}


def test_migrate_keeps_real_values():
    attributes = {"max_value": "2100", "min_value": "900"}
    assert migrate_axis_state_v0_to_v1(attributes) == attributes


def test_migrate_empty_is_unchanged():
    assert migrate_axis_state_v0_to_v1({}) == {}
    assert migrate_axis_state_v0_to_v1(None) is None


def test_migrate_unknown_version():
    with pytest.raises(ValueError, match="Unexpected schema version: 3"):
        migrate_axis_state(3, {"max_value": "1"})


def test_axis_to_map_none():
    assert axis_to_map(None) is None


def test_axis_to_map_defaults():
    (mapped,) = axis_to_map({})
    assert mapped["high_watermark"] == MAX
    assert mapped["max_value"] == MAX
    assert mapped["min_value"] == -MAX
    assert mapped["low_watermark"] == -MAX
    assert mapped["label"] == ""


def test_axis_to_map_values():
    axis = {
        "min": 900.0,
        "max": 2100.0,
        "label": "OMG on fire",
        "highWatermark": 2000.0,
        "highWatermarkLabel": "high",
        "lowWatermark": 1000.0,
        "lowWatermarkLabel": "low",
    }
    assert axis_to_map(axis) == AXIS_LEFT


def test_publish_label_options_to_map():
    mapped = publish_label_options_to_map(
        {"label": "CPU Idle", "paletteIndex": 2, "yAxis": 1, "plotType": "AreaChart"}
    )
    assert mapped["color"] == "azure"
    assert mapped["axis"] == "right"
    assert mapped["plot_type"] == "AreaChart"


def test_publish_label_options_unknown_color():
    with pytest.raises(ValueError, match="Unknown color index 44"):
        publish_label_options_to_map({"label": "x", "paletteIndex": 44})


def test_publish_non_time_label_options_to_map():
    mapped = publish_non_time_label_options_to_map(
        {"label": "CPU Idle", "valueUnit": "Bit", "valuePrefix": "foo", "valueSuffix": "bar"}
    )
    assert "axis" not in mapped
    assert mapped["color"] == ""
    assert (mapped["value_unit"], mapped["value_prefix"], mapped["value_suffix"]) == (
        "Bit",
        "foo",
        "bar",
    )


def test_api_to_state_histogram_and_legend():
    data = ResourceData()
    chart = {
        "name": "CPU Total Idle",
        "options": {
            "histogramChartOptions": {"colorThemeIndex": 16},
            "onChartLegendOptions": {"dimensionInLegend": "sf_originatingMetric"},
            "programOptions": {"maxDelay": 15000},
        },
    }
    time_chart_api_to_state(data, chart)
    assert data.get("histogram_options") == [{"color_theme": "red"}]
    assert data.get("on_chart_legend_dimension") == "metric"
    assert data.get("max_delay") == 15


def test_api_to_state_skips_zero_axes():
    data = ResourceData()
    time_chart_api_to_state(data, {"options": {"axes": [None, {"label": "", "min": None}]}})
    assert "axis_left" not in data.values
    assert "axis_right" not in data.values


def test_api_to_state_absolute_time():
    data = ResourceData()
    time_chart_api_to_state(
        data, {"options": {"time": {"type": "absolute", "start": 5000, "end": 9000}}}
    )
    assert data.get("start_time") == 5
    assert data.get("end_time") == 9
    assert "time_range" not in data.values


def test_create_round_trip():
    data = make_data()
    original = copy.deepcopy(data.values)
    client = FakeClient()
    time_chart_create(data, ProviderConfig(client=client, custom_app_url="https://www.example.com"))
    assert data.id == "abc123"
    assert data.get("url") == "https://www.example.com/#/chart/abc123"
    for key in (
        "name",
        "description",
        "program_text",
        "time_range",
        "color_by",
        "minimum_resolution",
        "max_delay",
        "timezone",
        "plot_type",
        "show_data_markers",
        "on_chart_legend_dimension",
        "legend_options_fields",
        "axis_left",
        "viz_options",
        "event_options",
        "axes_precision",
        "disable_sampling",
    ):
        assert data.get(key) == original[key], key
    assert "axis_right" not in data.values


def test_read_and_update():
    client = FakeClient()
    config = ProviderConfig(client=client, custom_app_url="https://www.example.com")
    data = make_data()
    time_chart_create(data, config)

    fresh = ResourceData(id="abc123")
    time_chart_read(fresh, config)
    assert fresh.get("name") == "CPU Total Idle"
    assert fresh.get("url") == "https://www.example.com/#/chart/abc123"

    data.set("name", "CPU Total Idle NEW")
    time_chart_update(data, config)
    assert client.charts["abc123"]["name"] == "CPU Total Idle NEW"
    assert data.get("name") == "CPU Total Idle NEW"


def test_delete():
    client = FakeClient()
    config = ProviderConfig(client=client, custom_app_url="https://www.example.com")
    data = make_data()
    time_chart_create(data, config)
    time_chart_delete(data, config)
    assert client.deleted == ["abc123"]
    assert client.charts == {}


def test_create_error_propagates():
    data = make_data()
    config = ProviderConfig(client=FakeClient(fail="400 bad"), custom_app_url="https://www.example.com")
    with pytest.raises(RuntimeError, match="400 bad"):
        time_chart_create(data, config)
    assert data.id == ""