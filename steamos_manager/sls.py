"""Forwarding of logs and kernel trace events to the log submitter service.

Proxies used here provide coroutines::

    await proxy.log(timestamp, module, level, message)
    await proxy.log_event(trace, data)

Process details for a pid come from a ``pid_info`` object with
``read_comm(pid) -> str`` and ``get_appid(pid) -> int | None``. Either may
raise when the information is unavailable.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Protocol

from .paths import path

logger = logging.getLogger(__name__)

_ROOT_MODULE = "steamos_manager"
_SLS_PREFIX = "steamos_manager.sls"
_U32_MAX = 2**32 - 1
_UNSIGNED = re.compile(r"\+?[0-9]+")


class _LogProxy(Protocol):
    async def log(
        self, timestamp: float, module: str, level: int, message: str
    ) -> None: ...


class _TraceProxy(Protocol):
    async def log_event(self, trace: str, data: dict[str, Any]) -> None: ...


class _PidInfo(Protocol):
    def read_comm(self, pid: int) -> str: ...

    def get_appid(self, pid: int) -> int | None: ...


@dataclass(frozen=True)
class LogLine:
    """One log message queued for the log submitter."""

    timestamp: float
    module: str
    level: int
    message: str


def sls_level(levelno: int) -> int:
    """Map a logging level number onto the submitter's level scale."""
    if levelno <= logging.DEBUG:
        return 10
    if levelno <= logging.INFO:
        return 20
    if levelno <= logging.WARNING:
        return 30
    return 40


def sls_module(target: str) -> str | None:
    """Return the submitter module name for a logger, or None if not forwarded."""
    if not target.startswith(_SLS_PREFIX):
        return None
    return ".".join([_ROOT_MODULE, *target.split(".")[2:]])


class LogHandler(logging.Handler):
    """A logging handler that queues log-submitter related records."""

    def __init__(self, queue: asyncio.Queue[LogLine]) -> None:
        super().__init__()
        self.queue = queue

    def emit(self, record: logging.LogRecord) -> None:
        module = sls_module(record.name)
        if module is None:
            return
        try:
            message = record.getMessage()
        except Exception:
            self.handleError(record)
            return
        self.queue.put_nowait(
            LogLine(
                timestamp=record.created,
                module=module,
                level=sls_level(record.levelno),
                message=message,
            )
        )


class LogReceiver:
    """Sends queued log lines to the log submitter daemon."""

    def __init__(self, proxy: _LogProxy) -> None:
        self.proxy = proxy
        self.queue: asyncio.Queue[LogLine] = asyncio.Queue()

    def handler(self) -> LogHandler:
        """Return a logging handler feeding this receiver."""
        return LogHandler(self.queue)

    async def run(self) -> None:
        """Deliver queued lines forever; delivery failures are ignored."""
        while True:
            line = await self.queue.get()
            try:
                await self.proxy.log(
                    line.timestamp, line.module, line.level, line.message
                )
            except Exception:
                pass


async def setup_traces(base: str | os.PathLike[str]) -> None:
    """Enable the OOM trace event, and split lock tracing where supported."""
    base = Path(base)
    (base / "events/oom/mark_victim/enable").write_text("1")

    with path("/proc/cpuinfo").open(encoding="utf-8", errors="replace") as cpuinfo:
        for line in cpuinfo:
            if not line.startswith("flags"):
                continue
            _, sep, rest = line.partition(":")
            if sep and "split_lock_detect" in rest.split():
                (base / "set_ftrace_filter").write_text("split_lock_warn")
                (base / "current_tracer").write_text("function")
                break


def _parse_pid(text: str) -> int:
    if not _UNSIGNED.fullmatch(text):
        raise ValueError(f"invalid pid {text!r}")
    pid = int(text)
    if pid > _U32_MAX:
        raise ValueError(f"pid {text!r} out of range")
    return pid


class Ftrace:
    """Relays lines from a dedicated tracefs instance to the log submitter."""

    def __init__(self, proxy: _TraceProxy, pid_info: _PidInfo) -> None:
        self.proxy = proxy
        self.pid_info = pid_info
        self._pipe: BinaryIO | None = None

    @classmethod
    def base(cls) -> Path:
        """The tracefs instance directory used for log submitter traces."""
        return path("/sys/kernel/tracing/instances/steamos-log-submitter")

    async def start(self) -> None:
        """Create the trace instance, configure it and open its pipe."""
        base = self.base()
        base.mkdir(parents=True, exist_ok=True)
        await setup_traces(base)
        fd = os.open(base / "trace_pipe", os.O_RDONLY | os.O_NONBLOCK)
        os.set_blocking(fd, True)
        self._pipe = os.fdopen(fd, "rb")

    async def run(self) -> None:
        """Forward trace lines until the pipe reaches its end."""
        if self._pipe is None:
            raise RuntimeError("BUG: trace_pipe missing")
        pipe = self._pipe
        while True:
            raw = await asyncio.to_thread(pipe.readline)
            if not raw:
                return
            line = raw.decode("utf-8", errors="replace").rstrip()
            try:
                await self.handle_event(line)
            except Exception as err:
                logger.error("Encountered an error handling event: %s", err)

    async def shutdown(self) -> None:
        """Close the pipe and remove the trace instance."""
        if self._pipe is not None:
            self._pipe.close()
            self._pipe = None
        self.base().rmdir()

    def _pid_data(self, pid: int) -> dict[str, Any]:
        data: dict[str, Any] = {}
        try:
            comm = self.pid_info.read_comm(pid)
        except Exception:
            logger.info("├─ comm not found")
        else:
            logger.info("├─ comm: %s", comm)
            data["comm"] = comm
        try:
            appid = self.pid_info.get_appid(pid)
        except Exception:
            appid = None
        if appid is not None:
            logger.info("└─ appid: %s", appid)
            data["appid"] = appid
        else:
            logger.info("└─ appid not found")
        return data

    async def handle_event(self, line: str) -> None:
        """Send one trace line, with process details if it names a pid."""
        logger.info("Forwarding line %s", line)
        data: dict[str, Any] = {}
        last = line.rsplit(" ", 1)[-1]
        key, sep, value = last.partition("=")
        if sep and key == "pid":
            data = self._pid_data(_parse_pid(value))
        await self.proxy.log_event(line, data)