"""Running helper programs and collecting their exit codes or output."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Sequence

_Arg = str | os.PathLike[str]


async def script_exit_code(executable: _Arg, args: Sequence[_Arg]) -> int:
    """Run a program with its output discarded and return its exit code."""
    proc = await asyncio.create_subprocess_exec(
        os.fspath(executable),
        *(os.fspath(arg) for arg in args),
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.DEVNULL,
    )
    code = await proc.wait()
    if code < 0:
        raise RuntimeError("Killed by signal")
    return code


async def run_script(executable: _Arg, args: Sequence[_Arg]) -> None:
    """Run a program and raise unless it exits successfully."""
    code = await script_exit_code(executable, args)
    if code != 0:
        raise RuntimeError(f"Exited {code}")


async def script_output(executable: _Arg, args: Sequence[_Arg]) -> str:
    """Run a program and return what it wrote to standard output."""
    proc = await asyncio.create_subprocess_exec(
        os.fspath(executable),
        *(os.fspath(arg) for arg in args),
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
    )
    stdout, _ = await proc.communicate()
    return stdout.decode("utf-8")