#!/usr/bin/env python3
"""
KUBEMOLD FRAGMENT ENRICHER
--------------------------
Turns a partial fragment into a resource descriptor with identity:
kind, apiVersion and metadata.name are filled in when the author left
them out. Values already present in the fragment are never touched.

Author: KubeMold Team
Date: 2026-10-18
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ruamel.yaml.comments import CommentedMap

from kubemold.core.errors import InvalidMetadataType, MissingKind
from kubemold.core.kinds import KindTable, ResourceVersioning, api_version_for
from kubemold.fragments.classifier import FilenameClassifier
from kubemold.fragments.parser import Fragment, FragmentParser

logger = logging.getLogger("kubemold.enricher")


class FragmentEnricher:

    def __init__(self, kinds: KindTable, parser: Optional[FragmentParser] = None):
        self.classifier = FilenameClassifier(kinds)
        self.parser = parser or FragmentParser()

    def enrich(self, versions: ResourceVersioning, path: Union[str, Path],
               default_app_name: str) -> Fragment:
        """
        Read a fragment file and add the meta information its filename implies.

        The fragment's own `kind` always wins over the filename. The apiVersion
        group is taken from the filename kind when there is one.
        """
        path = Path(path)
        # Classify first: a bad filename fails before any I/O
        info = self.classifier.classify(path.name)
        fragment = self.parser.parse(path, info.ext)

        content_kind = _non_blank(fragment.get("kind"))
        if info.kind is None and content_kind is None:
            raise MissingKind(path.name)
        if content_kind and info.kind and content_kind != info.kind:
            logger.debug("%s: content kind '%s' overrides filename kind '%s'",
                         path.name, content_kind, info.kind)
        _add_if_absent(fragment, "kind", info.kind)

        # The group follows the filename kind; the content kind only when the name has none
        _add_if_absent(fragment, "apiVersion", api_version_for(info.kind or content_kind, versions))

        metadata = _metadata_of(fragment, path.name)
        # No name in the filename means the application name is the resource name
        _add_if_absent(metadata, "name", info.name if info.name and info.name.strip() else default_app_name)

        logger.debug("Enriched %s -> %s/%s (%s)", path.name, fragment["kind"],
                     metadata["name"], fragment["apiVersion"])
        return fragment


def _non_blank(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _add_if_absent(mapping: Dict[str, Any], key: str, value: Any) -> None:
    current = mapping.get(key)
    if current is None or (isinstance(current, str) and not current.strip()):
        mapping[key] = value


def _metadata_of(fragment: Fragment, filename: str) -> Dict[str, Any]:
    meta = fragment.get("metadata")
    if meta is None:
        meta = CommentedMap()
        fragment["metadata"] = meta
        return meta
    if not isinstance(meta, dict):
        raise InvalidMetadataType(filename, meta)
    return meta
