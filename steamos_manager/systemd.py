"""Control of systemd units over a D-Bus connection.

The ``bus`` objects used here provide two coroutines::

    await bus.call(service, path, interface, method, *args)
    await bus.get_property(service, path, interface, name)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol

_SERVICE = "org.freedesktop.systemd1"
_MANAGER_PATH = "/org/freedesktop/systemd1"
_MANAGER_IFACE = "org.freedesktop.systemd1.Manager"
_UNIT_IFACE = "org.freedesktop.systemd1.Unit"
_UNIT_PATH_PREFIX = "/org/freedesktop/systemd1/unit/"


class _Bus(Protocol):
    async def call(
        self, service: str, path: str, interface: str, method: str, *args: Any
    ) -> Any: ...

    async def get_property(
        self, service: str, path: str, interface: str, name: str
    ) -> Any: ...


class EnableState(Enum):
    """The unit file state of a systemd unit."""

    DISABLED = "disabled"
    ENABLED = "enabled"
    MASKED = "masked"
    STATIC = "static"

    def __str__(self) -> str:
        return self.value


def escape(name: str) -> str:
    """Escape a unit name into a D-Bus object path element."""
    return "".join(
        c if c.isascii() and c.isalnum() else f"_{ord(c):02x}" for c in name
    )


async def daemon_reload(bus: _Bus) -> None:
    """Ask systemd to reload its unit files."""
    await bus.call(_SERVICE, _MANAGER_PATH, _MANAGER_IFACE, "Reload")


class SystemdUnit:
    """A single systemd unit, addressed by name."""

    def __init__(self, bus: _Bus, name: str) -> None:
        self.bus = bus
        self.name = name
        self.path = _UNIT_PATH_PREFIX + escape(name)

    async def _unit_call(self, method: str) -> None:
        await self.bus.call(_SERVICE, self.path, _UNIT_IFACE, method, "fail")

    async def _manager_call(self, method: str, *args: Any) -> Any:
        return await self.bus.call(
            _SERVICE, _MANAGER_PATH, _MANAGER_IFACE, method, [self.name], *args
        )

    async def restart(self) -> None:
        await self._unit_call("Restart")

    async def start(self) -> None:
        await self._unit_call("Start")

    async def stop(self) -> None:
        await self._unit_call("Stop")

    async def enable(self) -> bool:
        """Enable the unit; return whether anything changed."""
        _, changes = await self._manager_call("EnableUnitFiles", False, False)
        return bool(changes)

    async def disable(self) -> bool:
        """Disable the unit; return whether anything changed."""
        changes = await self._manager_call("DisableUnitFiles", False)
        return bool(changes)

    async def mask(self) -> bool:
        """Mask the unit; return whether anything changed."""
        changes = await self._manager_call("MaskUnitFiles", False, False)
        return bool(changes)

    async def unmask(self) -> bool:
        """Unmask the unit; return whether anything changed."""
        changes = await self._manager_call("UnmaskUnitFiles", False)
        return bool(changes)

    async def active(self) -> bool:
        state = await self.bus.get_property(
            _SERVICE, self.path, _UNIT_IFACE, "ActiveState"
        )
        return state == "active"

    async def enabled(self) -> EnableState:
        state = await self.bus.get_property(
            _SERVICE, self.path, _UNIT_IFACE, "UnitFileState"
        )
        return EnableState(state)