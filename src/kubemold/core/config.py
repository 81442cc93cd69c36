#!/usr/bin/env python3
"""
KUBEMOLD CONFIGURATION
----------------------
Loads kubemold.yaml: where fragments live, where manifests go, the API
versions in use and the build descriptors containers are computed from.
A missing file is an empty configuration.

Author: KubeMold Team
Date: 2026-10-18
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ruamel.yaml import YAML, YAMLError

from kubemold.assembly.project import ImageConfig, Project, ResourceConfig
from kubemold.core.errors import ConfigError
from kubemold.core.kinds import (API_APPS_VERSION, API_EXTENSIONS_VERSION, API_VERSION,
                                 ResourceVersioning)

logger = logging.getLogger("kubemold.config")

DEFAULT_CONFIG_FILE = "kubemold.yaml"
FORMATS = ("yaml", "json")


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Load kubemold.yaml or return an empty config, with defaults filled in."""
    path = Path(path)
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                cfg = YAML(typ='safe').load(f) or {}
        except YAMLError as e:
            raise ConfigError(f"Cannot parse {path}: {e}", path=path) from e
        if not isinstance(cfg, dict):
            raise ConfigError(f"{path} must contain a mapping at the top level", path=path)
        logger.debug("Loaded configuration from %s", path)
    else:
        cfg = {}

    cfg.setdefault("fragments_dir", "src/main/fabric8")
    cfg.setdefault("output_dir", "target/fabric8")
    cfg.setdefault("format", "yaml")
    cfg.setdefault("versions", {})
    cfg.setdefault("project", {})
    cfg.setdefault("resources", {})
    cfg.setdefault("images", [])
    return cfg


@dataclass
class EngineConfig:
    """The validated, typed view of a kubemold.yaml."""
    app_name: str
    fragments_dir: Path
    output_dir: Path
    format: str = "yaml"
    versions: ResourceVersioning = field(default_factory=ResourceVersioning)
    project: Project = field(default_factory=Project)
    resources: ResourceConfig = field(default_factory=ResourceConfig)
    images: List[ImageConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any], base_dir: Optional[Path] = None) -> "EngineConfig":
        base_dir = base_dir or Path(".")
        fmt = str(cfg.get("format", "yaml")).lower()
        if fmt not in FORMATS:
            raise ConfigError(f"format must be one of {', '.join(FORMATS)}, not '{fmt}'")

        versions = cfg.get("versions") or {}
        if not isinstance(versions, dict):
            raise ConfigError("'versions' must be a mapping")
        images = cfg.get("images") or []
        if not isinstance(images, list):
            raise ConfigError("'images' must be a list")

        project = Project.from_dict(cfg.get("project"))
        app_name = cfg.get("app_name") or project.artifact_id
        if not app_name:
            raise ConfigError("No application name: set 'app_name' or 'project.artifact_id'")

        return cls(
            app_name=str(app_name),
            fragments_dir=base_dir / cfg.get("fragments_dir", "src/main/fabric8"),
            output_dir=base_dir / cfg.get("output_dir", "target/fabric8"),
            format=fmt,
            versions=ResourceVersioning(
                core_version=versions.get("core", API_VERSION),
                extensions_version=versions.get("extensions", API_EXTENSIONS_VERSION),
                apps_version=versions.get("apps", API_APPS_VERSION),
            ),
            project=project,
            resources=ResourceConfig.from_dict(cfg.get("resources")),
            images=[ImageConfig.from_dict(i) for i in images],
        )

    @classmethod
    def load(cls, path: Union[str, Path], **overrides: Any) -> "EngineConfig":
        """Load a config file; keyword overrides (e.g. from CLI flags) win when not None."""
        path = Path(path)
        cfg = load_config(path)
        cfg.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(cfg, base_dir=path.parent)
