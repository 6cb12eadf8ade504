"""Team resource: payload building, notification conversion and CRUD operations."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from sfxprovider.resource_data import ProviderConfig, ResourceData
from sfxprovider.util import build_app_url

log = logging.getLogger(__name__)

TEAM_APP_PATH = "/team/"

# Fields carried by the API object of each notification type.
_OBJECT_FIELDS: dict[str, tuple[str, ...]] = {
    "BigPanda": ("credentialId",),
    "Email": ("email",),
    "Office365": ("credentialId",),
    "Opsgenie": ("credentialId", "responderName", "responderId", "responderType"),
    "PagerDuty": ("credentialId",),
    "Slack": ("credentialId", "channel"),
    "Team": ("team",),
    "TeamEmail": ("team",),
    "VictorOps": ("credentialId", "routingKey"),
    "Webhook": ("secret", "url"),
    "XMatters": ("credentialId",),
}

# Positional fields of the comma separated notification strings kept in state.
_STRING_FIELDS: dict[str, tuple[str, ...]] = {
    **_OBJECT_FIELDS,
    "Webhook": ("credentialId", "secret", "url"),
}

# (state key, API notification list key)
_NOTIFICATION_CATEGORIES = (
    ("notifications_critical", "critical"),
    ("notifications_default", "default"),
    ("notifications_info", "info"),
    ("notifications_major", "major"),
    ("notifications_minor", "minor"),
    ("notifications_warning", "warning"),
)


@dataclass(frozen=True)
class Notification:
    """A notification destination: its type and the type-specific API object."""

    type: str
    value: dict[str, Any] | None


def get_notification_object(item: Mapping[str, Any]) -> Notification:
    """Build a notification from a mapping of its type and fields.

    Unknown types give a notification without a value.
    """
    kind = item["type"]
    fields = _OBJECT_FIELDS.get(kind)
    if fields is None:
        return Notification(type=kind, value=None)
    value = {"type": kind}
    value.update({name: str(item[name]) for name in fields})
    return Notification(type=kind, value=value)


def _parse_notification(text: str) -> Notification:
    kind, *parts = text.split(",")
    fields = _STRING_FIELDS.get(kind)
    if fields is None:
        raise ValueError(f"Invalid notification type {kind!r} in {text!r}")
    if len(parts) < len(fields):
        raise ValueError(
            f"Notification {text!r} needs {len(fields)} fields after the type"
        )
    item: dict[str, Any] = {"type": kind}
    item.update(zip(fields, parts))
    return get_notification_object(item)


def _notification_list(items: Iterable[str]) -> list[Notification] | None:
    items = list(items)
    if not items:
        return None
    return [_parse_notification(item) for item in items]


def _notification_to_string(notification: Notification | Mapping[str, Any]) -> str:
    if isinstance(notification, Notification):
        kind, value = notification.type, notification.value or {}
    else:
        kind = notification["type"]
        value = notification.get("value") or notification
    fields = _STRING_FIELDS.get(kind)
    if fields is None:
        raise ValueError(f"Unknown notification type {kind!r}")
    return ",".join([kind, *(str(value.get(name) or "") for name in fields)])


def get_payload_team(data: ResourceData) -> dict[str, Any]:
    """Create/update request for a team."""
    members, ok = data.get_ok("members")
    notification_lists: dict[str, Any] = {}
    for key, api_key in _NOTIFICATION_CATEGORIES:
        value, ok_list = data.get_ok(key)
        if ok_list:
            notification_lists[api_key] = _notification_list(value)
    return {
        "name": data.get("name") or "",
        "description": data.get("description") or "",
        "members": [str(member) for member in members] if ok else None,
        "notificationLists": notification_lists,
    }


def team_api_to_state(data: ResourceData, team: Mapping[str, Any]) -> None:
    """Copy a team returned by the API into the resource state."""
    log.debug("SignalFx: Got Team to enState: %s", json.dumps(team, default=str))
    data.set("name", team.get("name", ""))
    data.set("description", team.get("description", ""))

    members = team.get("members") or []
    if members:
        data.set("members", set(members))

    lists: Mapping[str, Any] = team.get("notificationLists") or {}
    for key, api_key in _NOTIFICATION_CATEGORIES:
        notifications = lists.get(api_key) or []
        if notifications:
            data.set(key, [_notification_to_string(item) for item in notifications])


def team_create(data: ResourceData, config: ProviderConfig) -> None:
    """Create the team and record its id, URL and returned state."""
    payload = get_payload_team(data)
    log.debug("SignalFx: Create Team Payload: %s", json.dumps(payload, default=str))
    team = config.client.create_team(payload)
    data.set("url", build_app_url(config.custom_app_url, TEAM_APP_PATH + team["id"]))
    data.id = team["id"]
    team_api_to_state(data, team)


def team_read(data: ResourceData, config: ProviderConfig) -> None:
    """Refresh the resource state from the API."""
    team_api_to_state(data, config.client.get_team(data.id))


def team_update(data: ResourceData, config: ProviderConfig) -> None:
    """Send the current state to the API and take back what it returns."""
    payload = get_payload_team(data)
    log.debug("SignalFx: Update Team Payload: %s", json.dumps(payload, default=str))
    team = config.client.update_team(data.id, payload)
    log.debug("SignalFx: Update Team Response: %s", team)
    data.id = team["id"]
    team_api_to_state(data, team)


def team_delete(data: ResourceData, config: ProviderConfig) -> Any:
    """Delete the team."""
    return config.client.delete_team(data.id)


def team_exists(data: ResourceData, config: ProviderConfig) -> bool:
    """Return whether the team with the resource's id can be fetched."""
    try:
        config.client.get_team(data.id)
    except Exception as err:
        if "404" in str(err):
            return False
        raise
    return True