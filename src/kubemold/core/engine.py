#!/usr/bin/env python3
"""
KUBEMOLD ENGINE - The Orchestrator
----------------------------------
Runs one manifest generation pass:

1. read and enrich every fragment in the fragments directory
2. compute the default containers from the build's images
3. synthesize a Deployment when no controller was authored
4. fold the default pod spec into every controller
5. write one file per resource plus the aggregated list

Author: KubeMold Team
Date: 2026-10-18
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from kubemold.assembly.containers import ContainerAssembler
from kubemold.core.config import EngineConfig
from kubemold.core.errors import KubeMoldError, OutputError
from kubemold.core.kinds import KindTable, WorkloadKind, api_version_for
from kubemold.core.models import KubeResource, ObjectMeta, PodSpec
from kubemold.fragments.classifier import FilenameClassifier
from kubemold.fragments.collection import ResourceCollection, ResourceCollectionBuilder
from kubemold.merge.podspec import PodSpecMerger, merge_into_resource
from kubemold.output.exporter import ManifestExporter, ResourceFileType

logger = logging.getLogger("kubemold.engine")

AGGREGATE_NAME = "kubernetes"


@dataclass
class GenerationReport:
    """What one generation pass produced."""
    resources: List[Tuple[str, str]] = field(default_factory=list)   # (kind, name)
    files: List[Path] = field(default_factory=list)
    containers: int = 0
    synthesized: List[str] = field(default_factory=list)
    rendered: Dict[str, str] = field(default_factory=dict)            # file name -> text

    def summary(self) -> Dict[str, int]:
        kinds: Dict[str, int] = {}
        for kind, _ in self.resources:
            kinds[kind] = kinds.get(kind, 0) + 1
        return kinds


class ManifestEngine:
    """
    Principal orchestrator: turns a fragments directory plus the build
    configuration into complete manifests.
    """

    def __init__(self, config: EngineConfig, kinds: Optional[KindTable] = None):
        self.config = config
        self.kinds = kinds or KindTable.default()
        self.classifier = FilenameClassifier(self.kinds)
        self.builder = ResourceCollectionBuilder(self.kinds)
        self.assembler = ContainerAssembler(config.project)
        self.merger = PodSpecMerger()
        self.exporter = ManifestExporter()
        self.file_type = ResourceFileType.of(config.format)
        self.synthesized: List[str] = []

    def build(self) -> ResourceCollection:
        """Steps 1-4: everything short of writing files."""
        cfg = self.config
        try:
            collection = self.builder.build_from_directory(cfg.versions, cfg.app_name, cfg.fragments_dir)
            containers = self.assembler.build_containers(cfg.resources, cfg.images)
        except KubeMoldError as e:
            logger.error("Generation failed: %s", e)
            raise

        logger.info("Computed %d default container(s)", len(containers))
        self.synthesized = []
        if containers and not collection.has_kind(*(k.value for k in WorkloadKind)):
            collection.add(self._default_deployment())
            self.synthesized.append(cfg.app_name)

        default_pod_spec = PodSpec(containers=containers)
        for workload in collection.workloads():
            merge_into_resource(workload, default_pod_spec, cfg.app_name, self.merger)
        return collection

    def generate(self, dry_run: bool = False) -> GenerationReport:
        collection = self.build()
        report = GenerationReport(containers=sum(
            len(w.pod_spec.containers) for w in collection.workloads() if w.pod_spec))
        report.synthesized = list(self.synthesized)

        outputs = [(self._file_stem(r), r) for r in collection.sorted()]
        outputs.append((AGGREGATE_NAME, collection))
        _check_unique_stems(outputs)
        if not dry_run:
            self._ensure_output_dir()

        for stem, item in outputs:
            text = self.exporter.serialize(item, self.file_type)
            target = self.file_type.add_extension(self.config.output_dir / stem)
            report.rendered[target.name] = text
            if not dry_run:
                self._atomic_write(target, text)
                report.files.append(target)
                logger.debug("Wrote %s", target)

        report.resources = [r.sort_key for r in collection.sorted()]
        logger.info("Generated %d resource(s)%s", len(report.resources),
                    " (dry run)" if dry_run else f" into {self.config.output_dir}")
        return report

    def _file_stem(self, resource: KubeResource) -> str:
        return self.classifier.name_with_suffix(str(resource.name or self.config.app_name), resource.kind)

    def _default_deployment(self) -> KubeResource:
        name = self.config.app_name
        logger.info("No controller fragment found, adding Deployment '%s'", name)
        labels = {"app": name}
        return KubeResource(
            kind="Deployment",
            api_version=api_version_for("Deployment", self.config.versions),
            metadata=ObjectMeta(name=name, labels=dict(labels)),
            body={"spec": {
                "replicas": 1,
                "selector": {"matchLabels": dict(labels)},
                "template": {"metadata": {"labels": dict(labels)}},
            }},
        )

    def _ensure_output_dir(self):
        """Validates/Creates the output directory to prevent OS path errors."""
        output_dir = self.config.output_dir
        if output_dir.exists() and not output_dir.is_dir():
            raise OutputError(f"Output path {output_dir} is not a directory", path=output_dir)
        if not output_dir.exists():
            logger.info("Creating missing output directory: %s", output_dir)
            try:
                output_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise OutputError(f"Cannot create output directory {output_dir}: {e}", path=output_dir) from e

    def _atomic_write(self, target_path: Path, content: str):
        if not os.access(target_path.parent, os.W_OK):
            raise OutputError(f"No write access to {target_path.parent}", path=target_path.parent)
        temp_file = target_path.with_suffix('.kubemold.tmp')
        try:
            temp_file.write_text(content, encoding='utf-8')
            os.replace(temp_file, target_path)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise OutputError(f"Atomic write failed for {target_path}: {e}", path=target_path) from e


def _check_unique_stems(outputs: List[Tuple[str, object]]):
    """Two outputs with one file name would silently overwrite each other."""
    seen: Dict[str, object] = {}
    for stem, item in outputs:
        if stem in seen:
            raise OutputError(f"{_describe(seen[stem])} and {_describe(item)} would both be written to '{stem}'")
        seen[stem] = item


def _describe(item) -> str:
    if isinstance(item, KubeResource):
        return f"{item.kind} '{item.name}'"
    return "the aggregated list"
