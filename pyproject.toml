[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "steamos_manager"
version = "25.5.2"
description = "Asynchronous system management helpers: systemd units, Wi-Fi debugging and power management, udev USB events, interface introspection and log submission"
requires-python = ">=3.10"
dependencies = []
keywords = ["systemd", "wifi", "iwd", "udev", "ftrace", "dbus", "system-management"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Framework :: AsyncIO",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["steamos_manager"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
