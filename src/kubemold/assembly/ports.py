#!/usr/bin/env python3
"""
KUBEMOLD PORT MAPPINGS
----------------------
Expands the docker-style port list of an image build into container ports.

Accepted entries (several may share one string, comma separated):

    8080                       container port only
    9090:8080                  host port 9090 -> container 8080
    127.0.0.1:9090:8080/udp    bound host IP and protocol
    ${jolokia.port}:8778       placeholders resolve against project properties
    jolokia.port:8778          a non-numeric host port is dynamic (no hostPort)

Author: KubeMold Team
Date: 2026-10-18
"""

import logging
import re
from typing import Iterable, List, Mapping, Optional

from kubemold.core.errors import InvalidPortSpec
from kubemold.core.models import ContainerPort

logger = logging.getLogger("kubemold.assembly")

PLACEHOLDER_RE = re.compile(r'\$\{([^}]+)\}')
_PROPERTY_NAME_RE = re.compile(r'^\+?[A-Za-z_][\w.\-]*$')
PROTOCOLS = ("tcp", "udp")


class PortMapping:

    def __init__(self, specs: Iterable[str], properties: Optional[Mapping[str, str]] = None):
        self.properties = dict(properties or {})
        self.specs: List[str] = []
        for spec in specs:
            self.specs.extend(s.strip() for s in str(spec).split(",") if s.strip())

    def container_ports(self) -> List[ContainerPort]:
        return [self._parse(spec) for spec in self.specs]

    def _resolve(self, spec: str) -> str:
        def _replace(m):
            key = m.group(1)
            if key not in self.properties:
                raise InvalidPortSpec(spec, f"property '{key}' is not defined")
            return str(self.properties[key])
        return PLACEHOLDER_RE.sub(_replace, spec)

    def _parse(self, raw: str) -> ContainerPort:
        spec = self._resolve(raw)
        protocol = None
        if "/" in spec:
            spec, protocol = spec.rsplit("/", 1)
            if protocol.lower() not in PROTOCOLS:
                raise InvalidPortSpec(raw, f"protocol must be one of {', '.join(PROTOCOLS)}")
            protocol = protocol.upper()

        parts = spec.split(":")
        if len(parts) > 3 or not all(parts):
            raise InvalidPortSpec(raw, "expected [hostIP:][hostPort:]containerPort[/protocol]")

        port = ContainerPort(container_port=_port_number(parts[-1], raw), protocol=protocol)
        if len(parts) >= 2:
            port.host_port = self._host_port(parts[-2], raw)
        if len(parts) == 3:
            port.host_ip = self._host_ip(parts[0])
        return port

    def _host_port(self, text: str, raw: str) -> Optional[int]:
        if text.isdigit():
            return _port_number(text, raw)
        if not _PROPERTY_NAME_RE.match(text):
            raise InvalidPortSpec(raw, f"invalid host port '{text}'")
        value = self.properties.get(text)
        if value is not None and str(value).isdigit():
            return _port_number(str(value), raw)
        logger.debug("Host port '%s' in '%s' is dynamic", text, raw)
        return None

    def _host_ip(self, text: str) -> Optional[str]:
        # "+host.var" names a property holding the IP
        if text.startswith("+"):
            return self.properties.get(text[1:])
        return text


def _port_number(text: str, raw: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise InvalidPortSpec(raw, f"'{text}' is not a port number") from None
    if not 0 < value < 65536:
        raise InvalidPortSpec(raw, f"port {value} is out of range")
    return value
