#!/usr/bin/env python3
"""
KUBEMOLD RESOURCE COLLECTION
----------------------------
Accumulates enriched fragments into typed resources and answers the
questions the generation pass asks about them: is there a resource of this
kind, which one is called X, what pod selector do the controllers share.

Author: KubeMold Team
Date: 2026-10-18
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import (Any, Callable, Dict, Iterable, Iterator, List, Mapping,
                    Optional, Union)

from ruamel.yaml import YAML, YAMLError

from kubemold.core.errors import MultipleSelectorsError, ParseError
from kubemold.core.kinds import KindTable, ResourceVersioning, WorkloadKind
from kubemold.core.models import KubeResource, LabelSelector
from kubemold.fragments.classifier import list_fragments
from kubemold.fragments.enricher import FragmentEnricher

logger = logging.getLogger("kubemold.collection")

RESOURCE_SOURCE_URL_ANNOTATION = "maven.fabric8.io/source-url"
RESOURCE_APP_CATALOG_ANNOTATION = "fabric8.io/app-catalog"

TemplateProcessor = Callable[[Dict[str, Any]], Iterable[Mapping[str, Any]]]


class ResourceCollection:
    """Ordered, duplicate-tolerant list of KubeResources."""

    def __init__(self, items: Optional[Iterable[KubeResource]] = None):
        self.items: List[KubeResource] = list(items or [])

    def add(self, resource: KubeResource) -> None:
        self.items.append(resource)

    def __iter__(self) -> Iterator[KubeResource]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def sorted(self) -> List[KubeResource]:
        """Stable (kind, name) order for deterministic output."""
        return sorted(self.items, key=lambda r: r.sort_key)

    def find(self, kind: str, name: str) -> Optional[KubeResource]:
        for item in self.items:
            if item.kind == kind and item.name == name:
                return item
        return None

    def has_kind(self, *kinds: str) -> bool:
        wanted = set(kinds)
        return any(item.kind in wanted for item in self.items)

    def workloads(self) -> List[KubeResource]:
        return [item for item in self.items if item.workload_kind is not None]

    def pod_label_selector(self) -> Optional[LabelSelector]:
        """The one selector all controllers agree on, or None."""
        chosen: Optional[LabelSelector] = None
        for item in self.items:
            selector = pod_label_selector(item)
            if selector is None:
                continue
            if chosen is not None and chosen != selector:
                raise MultipleSelectorsError(chosen, selector)
            chosen = selector
        return chosen

    def to_list_dict(self) -> Dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "List",
            "items": [r.to_dict() for r in self.sorted()],
        }


class ResourceCollectionBuilder:
    """Reads a batch of fragment files. One bad fragment fails the batch."""

    def __init__(self, kinds: KindTable, enricher: Optional[FragmentEnricher] = None):
        self.kinds = kinds
        self.enricher = enricher or FragmentEnricher(kinds)

    def build(self, versions: ResourceVersioning, default_name: str,
              files: Iterable[Union[str, Path]]) -> ResourceCollection:
        collection = ResourceCollection()
        for path in files:
            fragment = self.enricher.enrich(versions, path, default_name)
            collection.add(KubeResource.from_dict(fragment))
        logger.info("Read %d resource fragment(s)", len(collection))
        return collection

    def build_from_directory(self, versions: ResourceVersioning, default_name: str,
                             directory: Union[str, Path]) -> ResourceCollection:
        files = list_fragments(directory)
        if not files:
            logger.info("No resource fragments found in %s", directory)
        return self.build(versions, default_name, files)


# --- Pod label selectors -----------------------------------------------------

def _spec_selector(resource: KubeResource) -> Optional[LabelSelector]:
    selector = resource.spec.get("selector")
    return LabelSelector.from_dict(selector) if isinstance(selector, Mapping) else None


def _map_selector(resource: KubeResource) -> Optional[LabelSelector]:
    selector = resource.spec.get("selector")
    if isinstance(selector, Mapping) and selector:
        return LabelSelector(match_labels=dict(selector))
    return None


SELECTOR_ACCESSORS: Dict[WorkloadKind, Callable[[KubeResource], Optional[LabelSelector]]] = {
    WorkloadKind.DEPLOYMENT: _spec_selector,
    WorkloadKind.REPLICA_SET: _spec_selector,
    WorkloadKind.DEPLOYMENT_CONFIG: _map_selector,
    WorkloadKind.REPLICATION_CONTROLLER: _map_selector,
    WorkloadKind.DAEMON_SET: _spec_selector,
    WorkloadKind.STATEFUL_SET: _spec_selector,
    WorkloadKind.JOB: _spec_selector,
}

_unhandled = set(WorkloadKind) - set(SELECTOR_ACCESSORS)
if _unhandled:
    raise ImportError(f"No selector accessor for workload kinds: {sorted(k.value for k in _unhandled)}")


def pod_label_selector(resource: KubeResource) -> Optional[LabelSelector]:
    workload = resource.workload_kind
    if workload is None:
        return None
    return SELECTOR_ACCESSORS[workload](resource)


def remove_version_selector(selector: Mapping[str, str]) -> Dict[str, str]:
    answer = dict(selector)
    answer.pop("version", None)
    return answer


# --- Annotations & timestamps ------------------------------------------------

def get_source_url_annotation(resource: KubeResource) -> Optional[str]:
    return resource.metadata.annotations.get(RESOURCE_SOURCE_URL_ANNOTATION)


def set_source_url_annotation_if_not_set(resource: KubeResource, source_url: str) -> None:
    resource.metadata.annotations.setdefault(RESOURCE_SOURCE_URL_ANNOTATION, source_url)


def is_app_catalog_resource(resource: KubeResource) -> bool:
    return resource.metadata.annotations.get(RESOURCE_APP_CATALOG_ANNOTATION) == "true"


def creation_timestamp(resource: KubeResource) -> Optional[datetime]:
    text = resource.metadata.creation_timestamp
    if not text:
        return None
    if isinstance(text, datetime):
        return text
    return datetime.fromisoformat(str(text).replace("Z", "+00:00"))


def is_newer_resource(newer: KubeResource, older: KubeResource) -> bool:
    t1 = creation_timestamp(newer)
    t2 = creation_timestamp(older)
    if t1 is None:
        return False
    return t2 is None or t1 > t2


# --- Full manifests ----------------------------------------------------------

def load_resources(manifest: Union[str, Path],
                   template_processor: Optional[TemplateProcessor] = None) -> List[KubeResource]:
    """
    Load every object from a generated manifest file.

    Lists are flattened. Templates go through `template_processor` when one is
    given; otherwise their objects are taken as they are.
    """
    path = Path(manifest)
    yaml = YAML(typ='safe')
    try:
        docs = [d for d in yaml.load_all(path.read_text(encoding='utf-8')) if d]
    except YAMLError as e:
        raise ParseError(path, e) from e
    if not docs:
        raise ParseError(path, ValueError("Cannot load kubernetes YAML: no documents"))

    by_key: Dict[Any, KubeResource] = {}
    for doc in docs:
        for item in _flatten(doc, template_processor):
            resource = KubeResource.from_dict(item)
            by_key.setdefault(resource.sort_key, resource)
    return [by_key[k] for k in sorted(by_key)]


def _flatten(doc: Mapping[str, Any],
             template_processor: Optional[TemplateProcessor]) -> Iterator[Mapping[str, Any]]:
    kind = doc.get("kind")
    if kind == "Template":
        objects = template_processor(dict(doc)) if template_processor else doc.get("objects") or []
        for obj in objects:
            yield from _flatten(obj, template_processor)
    elif kind == "List" or (kind or "").endswith("List"):
        for item in doc.get("items") or []:
            yield from _flatten(item, template_processor)
    else:
        yield doc
