#!/usr/bin/env python3
"""
KUBEMOLD CONTAINER ASSEMBLER
----------------------------
Computes the default containers of a pod from the build's images: one
container per image that is actually built here. Pull-only images are
someone else's and contribute nothing.

Author: KubeMold Team
Date: 2026-10-18
"""

import logging
from typing import List, Optional, Sequence

from kubemold.assembly.images import ImageName
from kubemold.assembly.ports import PortMapping
from kubemold.assembly.probes import (discover_liveness_probe, discover_readiness_probe,
                                      probe_from_config)
from kubemold.assembly.project import ImageConfig, Project, ResourceConfig
from kubemold.core.errors import MissingBuildConfig
from kubemold.core.models import Container, ContainerPort, EnvVar, SecurityContext, VolumeMount

logger = logging.getLogger("kubemold.assembly")

ALWAYS_PULL_POLICY = "Always"


class ContainerAssembler:

    def __init__(self, project: Project):
        self.project = project

    def build_containers(self, config: ResourceConfig,
                         images: Sequence[ImageConfig]) -> List[Container]:
        buildable = []
        for image in images:
            if not image.is_buildable:
                logger.debug("Skipping pull-only image %s", image.name)
                continue
            if image.build is None:
                raise MissingBuildConfig(image.name)
            buildable.append(image)

        containers = []
        for idx, image in enumerate(buildable, 1):
            liveness = probe_from_config(config.liveness)
            readiness = probe_from_config(config.readiness)
            # Health check discovery only for the last image (the application itself)
            if idx == len(buildable):
                if liveness is None:
                    liveness = discover_liveness_probe(self.project)
                if readiness is None:
                    readiness = discover_readiness_probe(self.project)

            container = Container(
                name=self.container_name(image),
                image=image.name,
                image_pull_policy=self.image_pull_policy(config),
                env=_env_vars(config),
                security_context=SecurityContext(privileged=config.privileged),
                ports=self.container_ports(image),
                volume_mounts=_volume_mounts(config),
                liveness_probe=liveness,
                readiness_probe=readiness,
            )
            logger.debug("Container %s for image %s", container.name, image.name)
            containers.append(container)
        return containers

    def container_name(self, image: ImageConfig) -> str:
        if image.alias:
            return image.alias
        user = ImageName.parse(image.name).user or self.project.group_id
        return f"{user}-{self.project.artifact_id}"

    def image_pull_policy(self, config: ResourceConfig) -> Optional[str]:
        policy = config.image_pull_policy
        if (not policy or not policy.strip()) and self.project.is_snapshot:
            return ALWAYS_PULL_POLICY
        return policy

    def container_ports(self, image: ImageConfig) -> Optional[List[ContainerPort]]:
        ports = image.build.ports
        if ports is None:
            return None
        return PortMapping(ports, self.project.properties).container_ports()


def _env_vars(config: ResourceConfig) -> List[EnvVar]:
    return [EnvVar(name=name, value=value) for name, value in config.env.items()]


def _volume_mounts(config: ResourceConfig) -> List[VolumeMount]:
    return [
        VolumeMount(name=volume.name, mount_path=mount, read_only=False)
        for volume in config.volumes
        for mount in volume.mounts
    ]
