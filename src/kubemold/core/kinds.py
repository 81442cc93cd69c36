#!/usr/bin/env python3
"""
KUBEMOLD KIND TABLE & API VERSIONS
----------------------------------
The fixed vocabulary shared by every stage of the pipeline:

* KindTable - short filename tokens ('svc', 'rc', 'deployment') to canonical
  resource kinds, and back again for generating suffixed filenames.
* ResourceVersioning - the apiVersion strings per API group.
* api_version_for - which group a kind belongs to.

Both values are immutable. Build them once and hand them to whoever needs them.

Author: KubeMold Team
Date: 2026-10-18
"""

from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

API_VERSION = "v1"
API_EXTENSIONS_VERSION = "extensions/v1beta1"
API_APPS_VERSION = "apps/v1beta1"

# Preferred abbreviation first: the reverse lookup keeps the first token per kind.
DEFAULT_KIND_MAPPINGS: Tuple[Tuple[str, str], ...] = (
    ("cm", "ConfigMap"),
    ("configmap", "ConfigMap"),
    ("cronjob", "CronJob"),
    ("cj", "CronJob"),
    ("cr", "ClusterRole"),
    ("crole", "ClusterRole"),
    ("clusterrole", "ClusterRole"),
    ("crb", "ClusterRoleBinding"),
    ("clusterrb", "ClusterRoleBinding"),
    ("deployment", "Deployment"),
    ("is", "ImageStream"),
    ("istag", "ImageStreamTag"),
    ("lr", "LimitRange"),
    ("limitrange", "LimitRange"),
    ("ns", "Namespace"),
    ("namespace", "Namespace"),
    ("oauthclient", "OAuthClient"),
    ("pb", "PolicyBinding"),
    ("pv", "PersistentVolume"),
    ("pvc", "PersistentVolumeClaim"),
    ("project", "Project"),
    ("pr", "ProjectRequest"),
    ("rq", "ResourceQuota"),
    ("resourcequota", "ResourceQuota"),
    ("role", "Role"),
    ("rb", "RoleBinding"),
    ("rolebinding", "RoleBinding"),
    ("rbr", "RoleBindingRestriction"),
    ("rolebindingrestriction", "RoleBindingRestriction"),
    ("secret", "Secret"),
    ("svc", "Service"),
    ("service", "Service"),
    ("sa", "ServiceAccount"),
    ("rc", "ReplicationController"),
    ("rs", "ReplicaSet"),
    ("ds", "DaemonSet"),
    ("daemonset", "DaemonSet"),
    ("statefulset", "StatefulSet"),

    # OpenShift
    ("bc", "BuildConfig"),
    ("dc", "DeploymentConfig"),
    ("deploymentconfig", "DeploymentConfig"),
    ("route", "Route"),
    ("template", "Template"),
)


class WorkloadKind(str, Enum):
    """Controllers that own a pod template and a pod label selector."""
    DEPLOYMENT = "Deployment"
    REPLICA_SET = "ReplicaSet"
    DEPLOYMENT_CONFIG = "DeploymentConfig"
    REPLICATION_CONTROLLER = "ReplicationController"
    DAEMON_SET = "DaemonSet"
    STATEFUL_SET = "StatefulSet"
    JOB = "Job"

    @classmethod
    def of(cls, kind: Optional[str]) -> Optional["WorkloadKind"]:
        try:
            return cls(kind)
        except ValueError:
            return None


class KindTable:
    """
    Immutable token <-> kind association.

    Lookups by token are case-insensitive. Several tokens may name one kind;
    `token_for` returns the first one registered.
    """

    def __init__(self, mappings: Iterable[Tuple[str, str]]):
        to_kind: Dict[str, str] = {}
        to_token: Dict[str, str] = {}
        for token, kind in mappings:
            to_kind[token.lower()] = kind
            to_token.setdefault(kind, token.lower())
        self._to_kind: Mapping[str, str] = MappingProxyType(to_kind)
        self._to_token: Mapping[str, str] = MappingProxyType(to_token)

    @classmethod
    def default(cls) -> "KindTable":
        return cls(DEFAULT_KIND_MAPPINGS)

    def kind_for(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        return self._to_kind.get(token.lower())

    def token_for(self, kind: Optional[str]) -> Optional[str]:
        return self._to_token.get(kind) if kind else None

    @property
    def tokens(self) -> Tuple[str, ...]:
        return tuple(self._to_kind.keys())

    @property
    def kinds(self) -> Tuple[str, ...]:
        return tuple(self._to_token.keys())

    def __contains__(self, token: str) -> bool:
        return self.kind_for(token) is not None

    def __len__(self) -> int:
        return len(self._to_kind)


@dataclass(frozen=True)
class ResourceVersioning:
    """apiVersion strings for the core, extensions and apps groups."""
    core_version: str = API_VERSION
    extensions_version: str = API_EXTENSIONS_VERSION
    apps_version: str = API_APPS_VERSION

    def with_core_version(self, version: str) -> "ResourceVersioning":
        return replace(self, core_version=version)

    def with_extensions_version(self, version: str) -> "ResourceVersioning":
        return replace(self, extensions_version=version)

    def with_apps_version(self, version: str) -> "ResourceVersioning":
        return replace(self, apps_version=version)


DEFAULT_RESOURCE_VERSIONING = ResourceVersioning()

_EXTENSIONS_KINDS = frozenset({"Deployment", "Ingress"})
_APPS_KINDS = frozenset({"StatefulSet"})


def api_version_for(kind: Optional[str], versions: ResourceVersioning) -> str:
    """Pick the apiVersion a kind resolves to under the given versioning."""
    if kind in _EXTENSIONS_KINDS:
        return versions.extensions_version
    if kind in _APPS_KINDS:
        return versions.apps_version
    return versions.core_version
