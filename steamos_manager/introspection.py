"""Comparison of D-Bus interfaces described by introspection XML."""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Arg:
    name: str | None
    type: str
    direction: str | None


@dataclass(frozen=True)
class _Method:
    name: str
    args: tuple[_Arg, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class _Property:
    name: str
    type: str
    access: str


@dataclass(frozen=True)
class _Signal:
    name: str
    args: tuple[_Arg, ...] = field(default_factory=tuple)


def _args(element: ET.Element) -> tuple[_Arg, ...]:
    return tuple(
        _Arg(arg.get("name"), arg.get("type", ""), arg.get("direction"))
        for arg in element.findall("arg")
    )


class InterfaceIntrospection:
    """The methods, properties and signals of one D-Bus interface."""

    def __init__(
        self,
        name: str,
        methods: dict[str, _Method],
        properties: dict[str, _Property],
        signals: dict[str, _Signal],
    ) -> None:
        self.name = name
        self.methods = methods
        self.properties = properties
        self.signals = signals

    @classmethod
    def from_xml(cls, xml: str | bytes, interface_name: str) -> InterfaceIntrospection:
        """Read the named interface from an introspection document."""
        node = ET.fromstring(xml)
        for iface in node.iter("interface"):
            if iface.get("name") != interface_name:
                continue
            methods = {
                m.get("name", ""): _Method(m.get("name", ""), _args(m))
                for m in iface.findall("method")
            }
            properties = {
                p.get("name", ""): _Property(
                    p.get("name", ""), p.get("type", ""), p.get("access", "")
                )
                for p in iface.findall("property")
            }
            signals = {
                s.get("name", ""): _Signal(s.get("name", ""), _args(s))
                for s in iface.findall("signal")
            }
            return cls(interface_name, methods, properties, signals)
        raise ValueError("No interface found")

    @classmethod
    def from_file(
        cls, path: str | os.PathLike[str], interface_name: str
    ) -> InterfaceIntrospection:
        """Read the named interface from an introspection file."""
        return cls.from_xml(Path(path).read_bytes(), interface_name)

    def _compare_methods(self, other: InterfaceIntrospection) -> int:
        issues = 0
        for key in sorted(self.methods.keys() | other.methods.keys()):
            local = self.methods.get(key)
            if local is None:
                logger.error("Method %s missing on self", key)
                issues += 1
                continue
            remote = other.methods.get(key)
            if remote is None:
                logger.error("Method %s missing on other", key)
                issues += 1
                continue
            if len(local.args) != len(remote.args):
                logger.error("Different arguments between %r and %r", local, remote)
                issues += 1
                continue
            for local_arg, remote_arg in zip(local.args, remote.args):
                if local_arg.direction != remote_arg.direction:
                    logger.error(
                        "Arguments %r and %r differ in direction", local_arg, remote_arg
                    )
                    issues += 1
                    continue
                if local_arg.type != remote_arg.type:
                    logger.error(
                        "Arguments %r and %r differ in type", local_arg, remote_arg
                    )
                    issues += 1
        return issues

    def _compare_properties(self, other: InterfaceIntrospection) -> int:
        issues = 0
        for key in sorted(self.properties.keys() | other.properties.keys()):
            local = self.properties.get(key)
            if local is None:
                logger.error("Property %s missing on self", key)
                issues += 1
                continue
            remote = other.properties.get(key)
            if remote is None:
                logger.error("Property %s missing on other", key)
                issues += 1
                continue
            if local.type != remote.type:
                logger.error("Properties %r and %r differ in type", local, remote)
                issues += 1
                continue
            if local.access != remote.access:
                logger.error("Properties %r and %r differ in access", local, remote)
                issues += 1
        return issues

    def _compare_signals(self, other: InterfaceIntrospection) -> int:
        issues = 0
        for key in sorted(self.signals.keys() | other.signals.keys()):
            local = self.signals.get(key)
            if local is None:
                logger.error("Signal %s missing on self", key)
                issues += 1
                continue
            remote = other.signals.get(key)
            if remote is None:
                logger.error("Signal %s missing on other", key)
                issues += 1
                continue
            for local_arg, remote_arg in zip(local.args, remote.args):
                if local_arg.type != remote_arg.type:
                    logger.error(
                        "Arguments %r and %r differ in type", local_arg, remote_arg
                    )
                    issues += 1
        return issues

    def compare(self, other: InterfaceIntrospection) -> bool:
        """Return whether both descriptions agree, logging every difference."""
        issues = (
            self._compare_methods(other)
            + self._compare_properties(other)
            + self._compare_signals(other)
        )
        return issues == 0