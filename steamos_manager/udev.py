"""Interpretation of udev USB events."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

_U64_MAX = 2**64 - 1
_UNSIGNED = re.compile(r"\+?[0-9]+")


class EventType(Enum):
    """The action carried by a udev event."""

    ADD = "add"
    CHANGE = "change"
    REMOVE = "remove"
    BIND = "bind"
    UNBIND = "unbind"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> EventType:
        return cls.UNKNOWN


@dataclass(frozen=True)
class DeviceEvent:
    """A udev event with its device paths and properties."""

    event_type: EventType
    devpath: str
    syspath: str = ""
    properties: dict[str, str | bytes] = field(default_factory=dict)

    def property_value(self, key: str) -> str | None:
        value = self.properties.get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return value


@dataclass(frozen=True)
class OverCurrent:
    """A USB port reporting an over-current condition."""

    devpath: str
    port: str
    count: int


def _parse_count(text: str) -> int:
    if not _UNSIGNED.fullmatch(text):
        raise ValueError(f"invalid over-current count {text!r}")
    count = int(text)
    if count > _U64_MAX:
        raise ValueError(f"over-current count {text!r} out of range")
    return count


def process_usb_event(event: DeviceEvent) -> OverCurrent | None:
    """Return the over-current report carried by a USB change event, if any."""
    logger.debug("Got USB event %r", event)
    if event.event_type is not EventType.CHANGE:
        return None
    port = event.property_value("OVER_CURRENT_PORT")
    if port is None:
        return None
    count = event.property_value("OVER_CURRENT_COUNT")
    if count is None:
        return None
    return OverCurrent(devpath=event.devpath, port=port, count=_parse_count(count))