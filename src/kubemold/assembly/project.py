#!/usr/bin/env python3
"""
KUBEMOLD BUILD DESCRIPTORS
--------------------------
The slice of the build's configuration that containers are computed from:
the project coordinates and properties, the resource configuration, and the
list of images.

Author: KubeMold Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from kubemold.core.errors import ConfigError

SPRING_BOOT_HEALTH_INDICATOR = "org.springframework.boot.actuate.health.HealthIndicator"


@dataclass(frozen=True)
class Project:
    group_id: str = ""
    artifact_id: str = ""
    version: Optional[str] = None
    properties: Dict[str, str] = field(default_factory=dict)
    # fully qualified classes available on the project's classpath
    classes: FrozenSet[str] = frozenset()
    # application.properties of a Spring Boot app, when there is one
    application_properties: Dict[str, str] = field(default_factory=dict)

    def has_class(self, class_name: str) -> bool:
        return class_name in self.classes

    @property
    def is_snapshot(self) -> bool:
        return bool(self.version) and self.version.endswith("SNAPSHOT")

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Project":
        data = _mapping(data, "project")
        return cls(
            group_id=str(data.get("group_id") or ""),
            artifact_id=str(data.get("artifact_id") or ""),
            version=str(data["version"]) if data.get("version") is not None else None,
            properties=_str_map(data.get("properties"), "project.properties"),
            classes=frozenset(data.get("classes") or ()),
            application_properties=_str_map(data.get("application_properties"),
                                            "project.application_properties"),
        )


@dataclass
class VolumeConfig:
    name: str
    mounts: List[str] = field(default_factory=list)


@dataclass
class ProbeConfig:
    """Probe as configured: one of get_url, exec_command or tcp_port."""
    get_url: Optional[str] = None
    exec_command: Optional[str] = None
    tcp_port: Optional[str] = None
    initial_delay_seconds: Optional[int] = None
    timeout_seconds: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["ProbeConfig"]:
        if not data:
            return None
        data = _mapping(data, "probe")
        return cls(
            get_url=data.get("get_url"),
            exec_command=data.get("exec"),
            tcp_port=str(data["tcp_port"]) if data.get("tcp_port") is not None else None,
            initial_delay_seconds=data.get("initial_delay_seconds"),
            timeout_seconds=data.get("timeout_seconds"),
        )


@dataclass
class ResourceConfig:
    image_pull_policy: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)
    privileged: bool = False
    volumes: List[VolumeConfig] = field(default_factory=list)
    liveness: Optional[ProbeConfig] = None
    readiness: Optional[ProbeConfig] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ResourceConfig":
        data = _mapping(data, "resources")
        volumes = []
        for vol in data.get("volumes") or []:
            vol = _mapping(vol, "resources.volumes[]")
            if not vol.get("name"):
                raise ConfigError("resources.volumes[] entries need a 'name'")
            volumes.append(VolumeConfig(name=vol["name"], mounts=list(vol.get("mounts") or [])))
        return cls(
            image_pull_policy=data.get("image_pull_policy"),
            env=_str_map(data.get("env"), "resources.env"),
            privileged=bool(data.get("privileged", False)),
            volumes=volumes,
            liveness=ProbeConfig.from_dict(data.get("liveness")),
            readiness=ProbeConfig.from_dict(data.get("readiness")),
        )


@dataclass
class BuildConfig:
    ports: Optional[List[str]] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ImageConfig:
    """
    One image of the build. Images without a build section are pulled, not
    built, and contribute no container. `buildable` forces the issue.
    """
    name: str
    alias: Optional[str] = None
    build: Optional[BuildConfig] = None
    buildable: Optional[bool] = None

    @property
    def is_buildable(self) -> bool:
        return self.build is not None if self.buildable is None else self.buildable

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImageConfig":
        data = _mapping(data, "images[]")
        if not data.get("name"):
            raise ConfigError("images[] entries need a 'name'")
        build = None
        if data.get("build") is not None:
            raw = dict(_mapping(data["build"], "images[].build"))
            ports = raw.pop("ports", None)
            build = BuildConfig(ports=[str(p) for p in ports] if ports is not None else None, extra=raw)
        return cls(name=data["name"], alias=data.get("alias"), build=build,
                   buildable=data.get("buildable"))


def _mapping(data: Any, where: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"'{where}' must be a mapping, not a {type(data).__name__}")
    return data


def _str_map(data: Any, where: str) -> Dict[str, str]:
    return {str(k): "" if v is None else str(v) for k, v in _mapping(data, where).items()}
