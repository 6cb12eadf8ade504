# sfxprovider

Resource logic for keeping SignalFx charts, teams and integrations in step
with a declared configuration. For each resource kind there are functions
that build an API payload from configured state, create, read, update and
delete the remote object through an API client you supply, and write what
the API returns back into state.

It uses only the standard library.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## The pieces

- `sfxprovider.resource_data`
  - `ResourceData`: the attribute values of one resource (`values`) and its
    `id`. `get(key)` returns the value or `None`; `get_ok(key)` returns the
    value and whether it is set to something other than an empty or zero
    value; `set(key, value)` stores it.
  - `ProviderConfig`: holds the API `client` and the `custom_app_url` used to
    build links to objects in the web app.
- `sfxprovider.util`
  - `build_url(api_url, path, params)` and `build_app_url(app_url, fragment)`.
  - `send_request(method, url, token, payload)`: sends a request with the
    token in the `X-SF-Token` header and returns `(status, body)`. Error
    statuses are returned, not raised; a request that cannot be sent raises
    `ConnectionError`.
  - `resource_read`, `resource_create`, `resource_update`, `resource_delete`:
    raw JSON calls that track `last_updated` and `synced` in state.
  - Colour lookups: `get_name_from_palette_colors_by_index`,
    `get_name_from_full_palette_colors_by_index`,
    `get_name_from_chart_colors_by_index` (raise `ValueError` for an unknown
    index), the `ChartColor` class, and colour scale conversion with
    `get_color_scale_options` and `get_color_scale_options_from_slice`.
  - Legend options: `get_legend_options`, `get_legend_field_options`.
  - `from_range_to_milliseconds("-15m")` and the validators
    `validate_sort_by`, `validate_signalfx_relative_time`,
    `validate_per_signal_color`, `validate_full_palette_colors`,
    `validate_secondary_visualization`.
  - `flatten_string_slice_to_set`, `get_value_using_max_float_as_default`,
    `chart_exists`.
- `sfxprovider.time_chart_payload`: `get_payload_time_chart` and its parts
  (`get_time_chart_options`, `get_axes_options`, `get_single_axis_options`,
  `get_per_signal_viz_options`, `get_per_event_options`), plus
  `validate_plot_type_time_chart`, `validate_axis_time_chart` and
  `validate_unit_time_chart`.
- `sfxprovider.time_chart`: `time_chart_create`, `time_chart_read`,
  `time_chart_update`, `time_chart_delete`, `time_chart_api_to_state`,
  `axis_to_map`, the publish label converters, and `migrate_axis_state`,
  which drops version 0 axis attributes that only hold the old max-float
  defaults.
- `sfxprovider.single_value_chart` and `sfxprovider.text_chart`: the same
  lifecycle for single value charts (with colour scales) and text charts.
- `sfxprovider.team`: teams, their members and their per-severity
  notification lists. Notifications are kept in state as comma separated
  strings such as `"Email,someone@example.com"` and `"Webhook,,,https://hooks.example.com"`.
  `Notification` is the converted form.
- `sfxprovider.integrations`: Slack and VictorOps integrations, with
  `*_create`, `*_read`, `*_update`, `*_delete` and `*_exists`. Errors whose
  text contains `40` during create or update are raised again as
  `RuntimeError` with a hint to use an admin token.

## Examples

```python
from sfxprovider.util import build_app_url, build_url, from_range_to_milliseconds

build_app_url("https://app.example.com", "/chart/abc123")
# 'https://app.example.com/#/chart/abc123'

build_url("https://www.example.com", "/v2/chart", {"foo": "bar"})
# 'https://www.example.com/v2/chart?foo=bar'

from_range_to_milliseconds("-15m")
# 900000
```

Validators return the value unchanged when it is allowed and raise
`ValueError` otherwise:

```python
from sfxprovider.time_chart_payload import validate_plot_type_time_chart

validate_plot_type_time_chart("LineChart")   # returns 'LineChart'
validate_plot_type_time_chart("absolute")    # raises ValueError
```

Building a payload from state:

```python
from sfxprovider.resource_data import ResourceData
from sfxprovider.text_chart import get_payload_text_chart

data = ResourceData({"name": "Note", "markdown": "**hello**"})
get_payload_text_chart(data)
# {'name': 'Note', 'description': '', 'options': {'type': 'Text', 'markdown': '**hello**'}}
```

## The API client

The lifecycle functions call methods on `ProviderConfig.client`, which you
provide. Depending on the resources you use it needs `get_chart`,
`create_chart`, `update_chart`, `delete_chart`, `get_team`, `create_team`,
`update_team`, `delete_team`, and the `get_`, `create_`, `update_` and
`delete_` methods for `slack_integration` and `victor_ops_integration`. They
take and return plain dicts (returned objects carry an `"id"`), and signal a
missing object by raising an exception whose text contains `404`.

## What it does not do

- It ships no API client for charts, teams or integrations; only the raw
  `send_request` helper talks HTTP by itself.
- It has no command line and runs no plan/apply cycle of its own: you call
  the functions with your own state and client.
- Only time charts, single value charts, text charts, teams, and Slack and
  VictorOps integrations are covered; dashboards, dashboard groups, detectors
  and other chart kinds are not.