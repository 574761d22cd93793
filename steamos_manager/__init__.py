"""Asynchronous helpers for systemd units, Wi-Fi, udev events, interface introspection and log submission."""

__version__ = "25.5.2"