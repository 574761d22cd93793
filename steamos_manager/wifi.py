"""Wi-Fi debugging, backend selection and power management."""

from __future__ import annotations

import configparser
import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, TypeVar

from .paths import path
from .process import run_script, script_output
from .systemd import SystemdUnit, daemon_reload

logger = logging.getLogger(__name__)

OVERRIDE_CONTENTS = "[Service]\nExecStart=\nExecStart=/usr/lib/iwd/iwd -d\n"
OVERRIDE_FOLDER = "/etc/systemd/system/iwd.service.d"
OVERRIDE_PATH = "/etc/systemd/system/iwd.service.d/99-valve-override.conf"

TRACE_CMD_PATH = "/usr/bin/trace-cmd"
IW_PATH = "/usr/bin/iw"
SET_BACKEND_PATH = "/usr/bin/steamos-wifi-set-backend"

MIN_BUFFER_SIZE = 100

WIFI_BACKEND_PATHS = (
    "/usr/lib/NetworkManager/conf.d",
    "/etc/NetworkManager/conf.d",
)

_E = TypeVar("_E", bound=Enum)


def _parse(cls: type[_E], value: str, names: dict[Any, tuple[str, ...]]) -> _E:
    wanted = value.lower()
    for member, aliases in names.items():
        if wanted in aliases:
            return member
    raise ValueError(f"{value!r} is not a valid {cls.__name__}")


class WifiDebugMode(Enum):
    """Whether Wi-Fi debugging is switched off or tracing."""

    OFF = 0
    TRACING = 1

    def __str__(self) -> str:
        return _DEBUG_MODE_NAMES[self][0]

    @classmethod
    def parse(cls, value: str) -> WifiDebugMode:
        """Parse a mode name, ignoring case."""
        return _parse(cls, value, _DEBUG_MODE_NAMES)


class WifiPowerManagement(Enum):
    """Whether Wi-Fi power saving is enabled."""

    DISABLED = 0
    ENABLED = 1

    def __str__(self) -> str:
        return _POWER_MANAGEMENT_NAMES[self][0]

    @classmethod
    def parse(cls, value: str) -> WifiPowerManagement:
        """Parse a state name, ignoring case."""
        return _parse(cls, value, _POWER_MANAGEMENT_NAMES)


class WifiBackend(Enum):
    """The daemon that drives Wi-Fi for NetworkManager."""

    IWD = 0
    WPA_SUPPLICANT = 1

    def __str__(self) -> str:
        return _BACKEND_NAMES[self][0]

    @classmethod
    def parse(cls, value: str) -> WifiBackend:
        """Parse a backend name, ignoring case."""
        return _parse(cls, value, _BACKEND_NAMES)


_DEBUG_MODE_NAMES = {
    WifiDebugMode.OFF: ("off", "disable", "disabled", "0"),
    WifiDebugMode.TRACING: ("tracing",),
}

_POWER_MANAGEMENT_NAMES = {
    WifiPowerManagement.DISABLED: ("disabled", "off", "disable", "0"),
    WifiPowerManagement.ENABLED: ("enabled", "on", "enable", "1"),
}

_BACKEND_NAMES = {
    WifiBackend.IWD: ("iwd",),
    WifiBackend.WPA_SUPPLICANT: ("wpa_supplicant",),
}


async def setup_iwd_config(want_override: bool) -> None:
    """Install or remove the iwd debug override drop-in."""
    override = path(OVERRIDE_PATH)
    if want_override:
        path(OVERRIDE_FOLDER).mkdir(parents=True, exist_ok=True)
        override.write_text(OVERRIDE_CONTENTS)
    else:
        override.unlink(missing_ok=True)


async def restart_iwd(bus: Any) -> None:
    """Reload systemd and restart the iwd service."""
    try:
        await daemon_reload(bus)
    except Exception as err:
        logger.error("restart_iwd: reload systemd got an error: %s", err)
        raise
    unit = SystemdUnit(bus, "iwd.service")
    try:
        await unit.restart()
    except Exception as err:
        logger.error("restart_iwd: restart unit got an error: %s", err)
        raise


async def stop_tracing() -> None:
    await run_script(TRACE_CMD_PATH, ["stop"])


async def start_tracing(buffer_size: int) -> None:
    await run_script(
        TRACE_CMD_PATH,
        ["start", "-e", "ath11k_wmi_diag", "-b", str(buffer_size)],
    )


def make_tempfile(prefix: str) -> tuple[BinaryIO, Path]:
    """Create a world-readable and writable temporary file that is kept."""
    fd, name = tempfile.mkstemp(prefix=prefix)
    try:
        os.fchmod(fd, 0o666)
    except OSError:
        os.close(fd)
        raise
    return os.fdopen(fd, "wb"), Path(name)


async def extract_wifi_trace() -> Path:
    """Extract the current trace into a new file and return its path."""
    output, trace_path = make_tempfile("wifi-trace-")
    output.close()
    await run_script("trace-cmd", ["extract", "-o", trace_path])
    return trace_path


async def set_wifi_debug_mode(
    mode: WifiDebugMode, buffer_size: int, should_trace: bool, bus: Any
) -> None:
    """Switch Wi-Fi debugging on or off; only supported with iwd."""
    backend = await get_wifi_backend()
    if backend is not WifiBackend.IWD:
        raise RuntimeError(
            f"Setting Wi-Fi debug mode not supported with backend {backend}"
        )

    if mode is WifiDebugMode.OFF:
        if should_trace:
            try:
                await stop_tracing()
            except Exception as err:
                raise RuntimeError(f"stop_tracing command got an error: {err}") from err
        try:
            await setup_iwd_config(False)
        except Exception as err:
            raise RuntimeError(f"setup_iwd_config false got an error: {err}") from err
        try:
            await restart_iwd(bus)
        except Exception as err:
            raise RuntimeError(f"restart_iwd got an error: {err}") from err
    else:
        if buffer_size <= MIN_BUFFER_SIZE:
            raise ValueError("Buffer size too small")
        try:
            await setup_iwd_config(True)
        except Exception as err:
            raise RuntimeError(f"setup_iwd_config true got an error: {err}") from err
        try:
            await restart_iwd(bus)
        except Exception as err:
            raise RuntimeError(f"restart_iwd got an error: {err}") from err
        if should_trace:
            try:
                await start_tracing(buffer_size)
            except Exception as err:
                raise RuntimeError(f"start_tracing got an error: {err}") from err


def _config_files(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(
        entry
        for entry in directory.iterdir()
        if entry.suffix == ".conf" and entry.is_file()
    )


async def get_wifi_backend() -> WifiBackend:
    """Read the configured Wi-Fi backend from NetworkManager's configuration."""
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    for directory in WIFI_BACKEND_PATHS:
        for config_file in _config_files(path(directory)):
            with config_file.open(encoding="utf-8") as stream:
                parser.read_file(stream, source=str(config_file))

    if not parser.has_section("device"):
        raise RuntimeError("No [device] section in Wi-Fi configuration")
    value = parser.get("device", "wifi.backend", fallback=None)
    if value is None:
        raise RuntimeError("Wi-Fi backend not found in config")
    return WifiBackend.parse(value)


async def set_wifi_backend(backend: WifiBackend) -> None:
    await run_script(SET_BACKEND_PATH, [str(backend)])


async def list_wifi_interfaces() -> list[str]:
    """Return the names of the wireless interfaces reported by iw."""
    output = await script_output(IW_PATH, ["dev"])
    interfaces = []
    for line in output.splitlines():
        key, sep, name = line.strip().partition(" ")
        if sep and key == "Interface":
            interfaces.append(name)
    return interfaces


async def get_wifi_power_management_state() -> WifiPowerManagement:
    """Report enabled if any interface has power saving on."""
    found_any = False
    for iface in await list_wifi_interfaces():
        output = await script_output(IW_PATH, ["dev", iface, "get", "power_save"])
        for line in output.splitlines():
            state = line.strip()
            if state == "Power save: on":
                return WifiPowerManagement.ENABLED
            if state == "Power save: off":
                found_any = True
    if not found_any:
        raise RuntimeError("No interfaces found")
    return WifiPowerManagement.DISABLED


async def set_wifi_power_management_state(state: WifiPowerManagement) -> None:
    """Set power saving on every wireless interface."""
    value = "on" if state is WifiPowerManagement.ENABLED else "off"
    for iface in await list_wifi_interfaces():
        try:
            await run_script(IW_PATH, ["dev", iface, "set", "power_save", value])
        except Exception as err:
            logger.error("Error setting Wi-Fi power management state: %s", err)
            raise