#!/usr/bin/env python3
"""
KUBEMOLD POD SPEC MERGER
------------------------
Folds a computed (default) pod spec into the one the user wrote.

The policy is strictly additive: whatever the user set stays as it is, the
defaults only fill the gaps.

  * scalar container fields   -> copied when unset on the target
  * env vars                  -> appended unless one with that name exists
  * ports                     -> appended unless name or port number exists
  * probes, security context  -> adopted wholesale when the target has none
  * containers                -> aligned by position, extra defaults appended

Author: KubeMold Team
Date: 2026-10-18
"""

import copy
import logging
from typing import List, Optional

from kubemold.core.models import Container, ContainerPort, EnvVar, KubeResource, PodSpec

logger = logging.getLogger("kubemold.merge")

# Scalar Container fields that take part in the generic "fill if unset" pass.
# Collections and nested objects have their own rules below.
MERGEABLE_CONTAINER_FIELDS = (
    "name",
    "image",
    "image_pull_policy",
    "working_dir",
    "stdin",
    "stdin_once",
    "tty",
    "termination_message_path",
    "termination_message_policy",
)


class PodSpecMerger:

    def merge(self, target: PodSpec, default: PodSpec, fallback_container_name: str) -> PodSpec:
        """Merge `default` into `target` in place and return `target`."""
        containers = target.containers
        defaults = default.containers or []

        if not defaults:
            if containers:
                # Only default the container name if the user left it out
                first = containers[0]
                if not first.name or not first.name.strip():
                    first.name = fallback_container_name
            return target

        if not containers:
            target.containers = [copy.deepcopy(c) for c in defaults]
            return target

        for idx, default_container in enumerate(defaults):
            if idx < len(containers):
                merge_container(containers[idx], default_container)
            else:
                containers.append(copy.deepcopy(default_container))
        return target


def merge_simple_fields(target: Container, default: Container) -> None:
    for attr in MERGEABLE_CONTAINER_FIELDS:
        if getattr(target, attr) is None:
            setattr(target, attr, getattr(default, attr))


def merge_container(target: Container, default: Container) -> None:
    merge_simple_fields(target, default)
    for env_var in default.env or []:
        ensure_has_env(target, copy.deepcopy(env_var))
    for port in default.ports or []:
        ensure_has_port(target, copy.deepcopy(port))
    if target.readiness_probe is None:
        target.readiness_probe = copy.deepcopy(default.readiness_probe)
    if target.liveness_probe is None:
        target.liveness_probe = copy.deepcopy(default.liveness_probe)
    if target.security_context is None:
        target.security_context = copy.deepcopy(default.security_context)


def ensure_has_env(container: Container, env_var: EnvVar) -> None:
    if container.env is None:
        container.env = []
    if any(existing.name == env_var.name for existing in container.env):
        return
    container.env.append(env_var)


def ensure_has_port(container: Container, port: ContainerPort) -> None:
    if container.ports is None:
        container.ports = []
    for existing in container.ports:
        if existing.name is not None and port.name is not None and existing.name == port.name:
            return
        if (existing.container_port is not None and port.container_port is not None
                and existing.container_port == port.container_port):
            return
    container.ports.append(port)


def merge_into_resource(resource: KubeResource, default: PodSpec, fallback_container_name: str,
                        merger: Optional[PodSpecMerger] = None) -> KubeResource:
    """Apply the default pod spec to a workload resource's pod template."""
    (merger or PodSpecMerger()).merge(resource.ensure_pod_spec(), default, fallback_container_name)
    return resource


# --- Env var & port list helpers ---------------------------------------------

def set_env_var(env: List[EnvVar], name: str, value: str) -> bool:
    """Set or update `name`. Returns True if the list changed."""
    for var in env:
        if var.name == name:
            if var.value == value:
                return False
            var.value = value
            return True
    env.append(EnvVar(name=name, value=value))
    return True


def set_env_var_no_override(env: List[EnvVar], name: str, value: str) -> Optional[EnvVar]:
    """
    Add `name` unless already present. Returns the existing entry when it holds
    a different value, None otherwise.
    """
    for var in env:
        if var.name == name:
            return None if var.value == value else var
    env.append(EnvVar(name=name, value=value))
    return None


def get_env_var(env: Optional[List[EnvVar]], name: str, default: Optional[str] = None) -> Optional[str]:
    for var in env or []:
        if var.name == name and var.value and var.value.strip():
            return var.value
    return default


def add_port(ports: List[ContainerPort], port_text: Optional[str], port_name: str) -> bool:
    """Add a named port given as text unless its number is already exposed."""
    if not port_text or not port_text.strip():
        return False
    try:
        port_value = int(port_text)
    except ValueError as e:
        logger.warning("Could not parse port %s as an integer: %s", port_text, e)
        return False
    if any(p.container_port == port_value for p in ports):
        return False
    ports.append(ContainerPort(name=port_name, container_port=port_value))
    return True
