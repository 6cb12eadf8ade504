import copy

import pytest

from sfxprovider.resource_data import ProviderConfig, ResourceData
from sfxprovider.text_chart import (
    get_payload_text_chart,
    text_chart_api_to_state,
    text_chart_create,
    text_chart_delete,
    text_chart_read,
    text_chart_update,
)


class FakeClient:
    def __init__(self):
        self.charts = {}
        self.deleted = []

    def create_chart(self, payload):
        chart = {"id": "abc123", **copy.deepcopy(payload)}
        self.charts["abc123"] = chart
        return copy.deepcopy(chart)

    def get_chart(self, chart_id):
        if chart_id not in self.charts:
            raise RuntimeError("404 chart not found")
        return copy.deepcopy(self.charts[chart_id])

    def update_chart(self, chart_id, payload):
        chart = {"id": chart_id, **copy.deepcopy(payload)}
        self.charts[chart_id] = chart
        return copy.deepcopy(chart)

    def delete_chart(self, chart_id):
        self.deleted.append(chart_id)
        self.charts.pop(chart_id, None)


@pytest.fixture
def config():
    return ProviderConfig(client=FakeClient(), custom_app_url="https://www.example.com")


def _data(name="Fart Text", description="Farts"):
    return ResourceData(
        values={"name": name, "description": description, "markdown": "**farts**"}
    )


def test_payload():
    assert get_payload_text_chart(_data()) == {
        "name": "Fart Text",
        "description": "Farts",
        "options": {"type": "Text", "markdown": "**farts**"},
    }


def test_create_round_trip(config):
    data = _data()
    text_chart_create(data, config)
    assert data.id == "abc123"
    assert data.get("url") == "https://www.example.com/#/chart/abc123"
    assert data.get("name") == "Fart Text"
    assert data.get("description") == "Farts"
    assert data.get("markdown") == "**farts**"


def test_update_then_read(config):
    data = _data()
    text_chart_create(data, config)
    changed = _data("Fart Text NEW", "Farts NEW")
    changed.id = data.id
    text_chart_update(changed, config)
    assert changed.get("name") == "Fart Text NEW"

    fresh = ResourceData(id="abc123")
    text_chart_read(fresh, config)
    assert fresh.get("description") == "Farts NEW"
    assert fresh.get("markdown") == "**farts**"
    assert fresh.get("url") == "https://www.example.com/#/chart/abc123"


def test_read_missing_raises(config):
    with pytest.raises(RuntimeError, match="404"):
        text_chart_read(ResourceData(id="missing"), config)


def test_delete(config):
    data = _data()
    text_chart_create(data, config)
    text_chart_delete(data, config)
    assert config.client.deleted == ["abc123"]
    assert config.client.charts == {}


def test_api_to_state_without_options():
    data = ResourceData()
    text_chart_api_to_state(data, {"name": "Fart Text"})
    assert data.get("name") == "Fart Text"
    assert data.get("markdown") == ""
    assert data.get("description") == ""