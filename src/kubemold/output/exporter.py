#!/usr/bin/env python3
"""
KUBEMOLD EXPORTER - Canonical Manifests
---------------------------------------
Renders resources as YAML or JSON. Output is deterministic: the same
resource always serializes to the same bytes. Null values and empty lists
are not meaningfully present and never reach the output.

Author: KubeMold Team
Date: 2026-10-18
"""

import io
import json
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Union

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from kubemold.core.models import KubeResource
from kubemold.fragments.collection import ResourceCollection

Serializable = Union[KubeResource, ResourceCollection, Mapping[str, Any]]


class ResourceFileType(str, Enum):
    YAML = "yaml"
    JSON = "json"

    @property
    def extension(self) -> str:
        return "yml" if self is ResourceFileType.YAML else "json"

    def add_extension(self, target: Union[str, Path]) -> Path:
        return Path(f"{target}.{self.extension}")

    @classmethod
    def of(cls, value: Union[str, "ResourceFileType"]) -> "ResourceFileType":
        if isinstance(value, ResourceFileType):
            return value
        value = value.lower()
        if value == "yml":
            return cls.YAML
        return cls(value)


class ManifestExporter:
    """
    The Reconstructor: converts resources back to manifest text.
    """

    def __init__(self):
        self.yaml = YAML(typ='rt')
        # Standard K8s: 2 spaces, sequences indented 4 (offset 2)
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096
        self.preferred_order = ["apiVersion", "kind", "metadata", "spec", "data", "status"]

    def _get_sorted_map(self, data: Mapping[str, Any], top_level: bool = False) -> CommentedMap:
        """
        Recursively rebuilds a mapping, dropping nulls and empty lists.
        Only the document root gets the preferred key order.
        """
        keys = list(data.keys())

        def sort_logic(key):
            if top_level and key in self.preferred_order:
                return self.preferred_order.index(key)
            # Unknown keys keep their relative original position
            return len(self.preferred_order) + keys.index(key)

        sorted_map = CommentedMap()
        for key in sorted(keys, key=sort_logic):
            value = self._prune(data[key])
            if value is None:
                continue
            sorted_map[key] = value
        return sorted_map

    def _prune(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return self._get_sorted_map(value)
        if isinstance(value, (list, tuple)):
            items = [self._prune(v) for v in value]
            items = [v for v in items if v is not None]
            return items or None
        return value

    def to_tree(self, resource: Serializable) -> CommentedMap:
        if isinstance(resource, ResourceCollection):
            data = resource.to_list_dict()
        elif isinstance(resource, KubeResource):
            data = resource.to_dict()
        elif resource.get("kind") and resource.get("kind") != "List":
            # a bare resource tree gets the same normalization as a typed one
            data = KubeResource.from_dict(resource).to_dict()
        else:
            data = resource
        return self._get_sorted_map(data, top_level=True)

    def serialize(self, resource: Serializable,
                  fmt: Union[str, ResourceFileType] = ResourceFileType.YAML) -> str:
        tree = self.to_tree(resource)
        if ResourceFileType.of(fmt) is ResourceFileType.JSON:
            return json.dumps(tree, indent=2, ensure_ascii=False, default=str) + "\n"
        stream = io.StringIO()
        self.yaml.dump(tree, stream)
        return stream.getvalue()

    def write(self, resource: Serializable, target: Union[str, Path],
              fmt: Union[str, ResourceFileType] = ResourceFileType.YAML) -> Path:
        """Write to `target` plus the format's extension; returns the final path."""
        file_type = ResourceFileType.of(fmt)
        output_file = file_type.add_extension(target)
        return self.write_file(resource, output_file, file_type)

    def write_file(self, resource: Serializable, output_file: Union[str, Path],
                   fmt: Union[str, ResourceFileType] = ResourceFileType.YAML) -> Path:
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(self.serialize(resource, fmt), encoding='utf-8')
        return output_file


def to_yaml(resource: Serializable) -> str:
    return ManifestExporter().serialize(resource, ResourceFileType.YAML)


def to_json(resource: Serializable) -> str:
    return ManifestExporter().serialize(resource, ResourceFileType.JSON)
