from pathlib import Path

import pytest

from steamos_manager import paths


@pytest.fixture(autouse=True)
def restore_root():
    saved = paths.root()
    yield
    paths.set_root(saved)


def test_default_root_leaves_absolute_paths_alone():
    paths.set_root("/")
    assert paths.path("/etc/systemd/system/iwd.service.d") == Path(
        "/etc/systemd/system/iwd.service.d"
    )


def test_set_root_is_reported_by_root(tmp_path):
    paths.set_root(tmp_path)
    assert paths.root() == tmp_path


def test_absolute_path_is_placed_under_root(tmp_path):
    paths.set_root(tmp_path)
    assert paths.path("/proc/cpuinfo") == tmp_path / "proc" / "cpuinfo"


def test_relative_and_absolute_forms_agree(tmp_path):
    paths.set_root(tmp_path)
    assert paths.path("proc/cpuinfo") == paths.path("/proc/cpuinfo")


def test_root_itself(tmp_path):
    paths.set_root(tmp_path)
    assert paths.path("/") == tmp_path


def test_accepts_path_objects(tmp_path):
    paths.set_root(str(tmp_path))
    result = paths.path(Path("/usr/lib/NetworkManager/conf.d"))
    assert result == tmp_path / "usr/lib/NetworkManager/conf.d"
    assert result.is_relative_to(tmp_path)