#!/usr/bin/env python3
"""
KUBEMOLD IMAGE NAMES
--------------------
Splits a docker image reference into registry, user, repository and tag.

    docker.io/fabric8/console:2.1  -> registry docker.io, user fabric8
    fabric8/console                -> user fabric8, tag latest
    console@sha256:...             -> digest reference

Author: KubeMold Team
Date: 2026-10-18
"""

import re
from dataclasses import dataclass
from typing import Optional

from kubemold.core.errors import ConfigError

_TAG_RE = re.compile(r'^[\w][\w.-]{0,127}$')


@dataclass(frozen=True)
class ImageName:
    repository: str
    registry: Optional[str] = None
    tag: Optional[str] = None
    digest: Optional[str] = None

    @classmethod
    def parse(cls, full_name: str) -> "ImageName":
        if not full_name:
            raise ConfigError("Image name must not be empty")
        rest = full_name
        digest = tag = None
        if "@" in rest:
            rest, digest = rest.split("@", 1)
        # a ':' after the last '/' separates the tag
        slash = rest.rfind("/")
        colon = rest.rfind(":")
        if colon > slash:
            rest, tag = rest[:colon], rest[colon + 1:]
            if not _TAG_RE.match(tag):
                raise ConfigError(f"Invalid tag '{tag}' in image name {full_name}")

        parts = rest.split("/")
        registry = None
        if len(parts) > 1 and _is_registry(parts[0]):
            registry = parts[0]
            parts = parts[1:]
        if digest is None and tag is None:
            tag = "latest"
        return cls(repository="/".join(parts), registry=registry, tag=tag, digest=digest)

    @property
    def user(self) -> Optional[str]:
        """First path segment of the repository, None for official images."""
        if "/" not in self.repository:
            return None
        return self.repository.split("/", 1)[0]

    @property
    def simple_name(self) -> str:
        return self.repository.rsplit("/", 1)[-1]


def _is_registry(part: str) -> bool:
    return "." in part or ":" in part or part == "localhost"
