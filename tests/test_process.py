import pytest

from steamos_manager.process import run_script, script_exit_code, script_output


@pytest.mark.asyncio
async def test_run_script_ok():
    assert await run_script("sh", ["-c", "exit 0"]) is None


@pytest.mark.asyncio
async def test_run_script_code():
    with pytest.raises(RuntimeError) as info:
        await run_script("sh", ["-c", "exit 1"])
    assert str(info.value) == "Exited 1"


@pytest.mark.asyncio
async def test_run_script_missing_program():
    with pytest.raises(OSError):
        await run_script("/nonexistent/steamos-manager-helper", [])


@pytest.mark.asyncio
async def test_exit_code_is_returned():
    assert await script_exit_code("sh", ["-c", "exit 3"]) == 3


@pytest.mark.asyncio
async def test_exit_code_killed_by_signal():
    with pytest.raises(RuntimeError) as info:
        await script_exit_code("sh", ["-c", "kill -9 $$"])
    assert str(info.value) == "Killed by signal"


@pytest.mark.asyncio
async def test_script_output_collects_stdout():
    assert await script_output("sh", ["-c", "printf 'Interface wlan0\\n'"]) == "Interface wlan0\n"


@pytest.mark.asyncio
async def test_script_output_passes_arguments():
    assert await script_output("sh", ["-c", 'printf "%s" "$1"', "sh", "ok"]) == "ok"


@pytest.mark.asyncio
async def test_script_output_rejects_invalid_utf8():
    with pytest.raises(UnicodeDecodeError):
        await script_output("sh", ["-c", "printf '\\377'"])