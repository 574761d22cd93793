# steamos_manager

Asynchronous helpers for managing a handheld Linux system: systemd units,
Wi-Fi debugging and power management, USB over-current reports from udev
events, comparison of bus interface descriptions, and forwarding of kernel
trace events and log records to a log submitter.

The package has no third-party dependencies.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Filesystem root

Every system path the package touches goes through
`steamos_manager.paths.path()`. By default it maps onto `/`; call
`steamos_manager.paths.set_root()` to redirect all of them into another
directory, and `steamos_manager.paths.root()` to see the current one.

```python
from steamos_manager import paths

paths.set_root("/tmp/staging")
paths.path("/etc/systemd/system")  # -> /tmp/staging/etc/systemd/system
```

## Modules

### `steamos_manager.process`

- `script_exit_code(executable, args)` runs a program with its output
  discarded and returns its exit code; it raises `RuntimeError("Killed by
  signal")` if the program was killed by a signal.
- `run_script(executable, args)` raises `RuntimeError("Exited N")` unless the
  program exits with 0.
- `script_output(executable, args)` returns the program's standard output
  decoded as UTF-8.

### `steamos_manager.systemd`

- `escape(name)` turns a unit name into its object-path form: ASCII letters
  and digits are kept, every other character becomes `_xx` with its hex code
  (`escape("system d") == "system_20d"`).
- `EnableState` holds a unit-file state: `disabled`, `enabled`, `masked` or
  `static`.
- `SystemdUnit(bus, name)` has the coroutines `start()`, `stop()` and
  `restart()` (all in `"fail"` mode), `enable()`, `disable()`, `mask()` and
  `unmask()` (each returns whether anything changed), `active()` and
  `enabled()`.
- `daemon_reload(bus)` asks the manager to reload its unit files.

The `bus` is an object you supply with two coroutines:

```python
await bus.call(service, path, interface, method, *args)
await bus.get_property(service, path, interface, name)
```

### `steamos_manager.wifi`

- `WifiBackend` (`iwd`, `wpa_supplicant`), `WifiDebugMode` (`off`,
  `tracing`) and `WifiPowerManagement` (`disabled`, `enabled`) enums. Each
  has a case-insensitive `parse()` class method; `WifiDebugMode` also accepts
  `disable`, `disabled` and `0` for off, and `WifiPowerManagement` accepts
  `on`/`enable`/`1` and `off`/`disable`/`0`. `str()` of a member gives its
  canonical name.
- `get_wifi_backend()` reads `wifi.backend` from the `[device]` section of
  the `*.conf` files in `/usr/lib/NetworkManager/conf.d` and
  `/etc/NetworkManager/conf.d`, later files overriding earlier ones.
- `set_wifi_backend(backend)` runs `/usr/bin/steamos-wifi-set-backend`.
- `setup_iwd_config(want_override)` installs or removes the iwd debug
  drop-in in `/etc/systemd/system/iwd.service.d`.
- `restart_iwd(bus)` reloads systemd and restarts `iwd.service`.
- `set_wifi_debug_mode(mode, buffer_size, should_trace, bus)` works only
  with the iwd backend. Turning tracing on needs a buffer size above 100; it
  installs the drop-in, restarts iwd and, if asked, starts `trace-cmd`.
  Turning it off stops tracing if asked, removes the drop-in and restarts
  iwd.
- `start_tracing(buffer_size)` and `stop_tracing()` drive
  `/usr/bin/trace-cmd`; `extract_wifi_trace()` runs `trace-cmd extract` into
  a new temporary file (mode 0666) and returns its path. `make_tempfile(prefix)`
  creates such a file and returns the open file and its path.
- `list_wifi_interfaces()` lists the interfaces reported by `iw dev`.
- `get_wifi_power_management_state()` reports enabled if any interface has
  power saving on, disabled if all report off, and raises if none report.
- `set_wifi_power_management_state(state)` sets power saving on every
  interface.

### `steamos_manager.udev`

`process_usb_event(event)` takes a `DeviceEvent` (an `EventType`, device
path, sys path and properties) and returns an `OverCurrent` record
(`devpath`, `port`, `count`) when it is a change event carrying
`OVER_CURRENT_PORT` and `OVER_CURRENT_COUNT`, otherwise `None`. A count that
is not an unsigned 64-bit number raises `ValueError`.

### `steamos_manager.introspection`

`InterfaceIntrospection.from_xml(xml, interface_name)` and
`InterfaceIntrospection.from_file(path, interface_name)` load one interface
from introspection XML, raising `ValueError` if it is absent. `compare(other)`
returns whether both descriptions agree on method arguments (count,
direction, type), property types and access, and signal argument types,
logging each difference.

### `steamos_manager.sls`

- `LogReceiver(proxy)` queues log lines; `handler()` returns a `LogHandler`
  to attach to `logging`, and `run()` delivers queued lines with
  `await proxy.log(timestamp, module, level, message)`, ignoring delivery
  failures. Only records from loggers under `steamos_manager.sls` are
  forwarded; `sls_module()` and `sls_level()` give the module name and level
  (10, 20, 30, 40) that are sent.
- `Ftrace(proxy, pid_info)` relays trace lines with
  `await proxy.log_event(line, data)`. `start()` creates the tracefs instance
  from `Ftrace.base()`, enables the OOM victim event (and split lock tracing
  when `/proc/cpuinfo` lists `split_lock_detect`, see `setup_traces()`) and
  opens `trace_pipe`; `run()` forwards lines until the pipe ends;
  `shutdown()` closes it and removes the instance. For lines ending in
  `pid=N`, `handle_event()` adds `comm` and `appid` from
  `pid_info.read_comm(pid)` and `pid_info.get_appid(pid)` when available.

## Example

```python
import asyncio
from steamos_manager import wifi

async def show():
    print(await wifi.get_wifi_backend())
    print(await wifi.get_wifi_power_management_state())

asyncio.run(show())
```

## What the package does not do

- It has no command-line tool and no long-running service to start.
- It contains no bus connection: every function that talks to systemd or the
  log submitter takes a bus or proxy object you provide.
- It does not listen to udev itself; you pass `DeviceEvent` values to
  `process_usb_event()`.
- It does not look up process names or game ids; `Ftrace` gets them from the
  `pid_info` object you supply.