#!/usr/bin/env python3
"""
KUBEMOLD PROBES
---------------
Configured probes and the Spring Boot health check fallback.

Author: KubeMold Team
Date: 2026-10-18
"""

import shlex
from typing import Optional
from urllib.parse import urlsplit

from kubemold.assembly.project import SPRING_BOOT_HEALTH_INDICATOR, Project, ProbeConfig
from kubemold.core.errors import ConfigError
from kubemold.core.models import ExecAction, HTTPGetAction, Probe, TCPSocketAction

DEFAULT_MANAGEMENT_PORT = 8080
MANAGEMENT_PORT_PROPERTY = "management.port"
SERVER_PORT_PROPERTY = "server.port"

READINESS_INITIAL_DELAY = 10
# long enough for the application to actually start
LIVENESS_INITIAL_DELAY = 180


def probe_from_config(config: Optional[ProbeConfig]) -> Optional[Probe]:
    if config is None:
        return None
    probe = Probe(initial_delay_seconds=config.initial_delay_seconds,
                  timeout_seconds=config.timeout_seconds)
    if config.get_url:
        url = urlsplit(config.get_url)
        try:
            port = url.port
        except ValueError as e:
            raise ConfigError(f"Invalid probe URL '{config.get_url}': {e}") from e
        probe.http_get = HTTPGetAction(
            host=url.hostname or None,
            port=port,
            path=url.path or None,
            scheme=url.scheme.upper() if url.scheme else None,
        )
    elif config.exec_command:
        probe.exec = ExecAction(command=shlex.split(config.exec_command))
    elif config.tcp_port:
        port = config.tcp_port
        probe.tcp_socket = TCPSocketAction(port=int(port) if port.isdigit() else port)
    else:
        return None
    return probe


def spring_boot_health_probe(project: Project, initial_delay: int) -> Optional[Probe]:
    """HTTP GET /health on the management port, if actuator is on the classpath."""
    if not project.has_class(SPRING_BOOT_HEALTH_INDICATOR):
        return None
    props = {**project.properties, **project.application_properties}
    port = _int_property(props, MANAGEMENT_PORT_PROPERTY,
                         _int_property(props, SERVER_PORT_PROPERTY, DEFAULT_MANAGEMENT_PORT))
    return Probe(http_get=HTTPGetAction(port=port, path="/health"),
                 initial_delay_seconds=initial_delay)


def discover_readiness_probe(project: Project) -> Optional[Probe]:
    return spring_boot_health_probe(project, READINESS_INITIAL_DELAY)


def discover_liveness_probe(project: Project) -> Optional[Probe]:
    return spring_boot_health_probe(project, LIVENESS_INITIAL_DELAY)


def _int_property(props, key: str, default: int) -> int:
    value = props.get(key)
    try:
        return int(value) if value not in (None, "") else default
    except ValueError:
        return default
