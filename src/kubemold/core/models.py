#!/usr/bin/env python3
"""
KUBEMOLD CORE MODELS
--------------------
Typed representation of the Kubernetes objects KubeMold reasons about.

Only the parts the pipeline touches are modelled field by field (metadata,
pod specs, containers and their ports, env vars, probes, security context).
Everything else is carried verbatim in `extra` / `body` so a resource survives
the round trip fragment -> KubeResource -> manifest without losing keys.

Author: KubeMold Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple, Type

from kubemold.core.kinds import WorkloadKind


def to_plain(value: Any) -> Any:
    """Recursively copy parsed YAML/JSON into plain dicts and lists."""
    if isinstance(value, Mapping):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


class WireField(NamedTuple):
    attr: str
    key: str
    model: Optional[Type["WireModel"]] = None
    many: bool = False


class WireModel:
    """
    Mixin converting a dataclass from/to its camelCase wire form.

    Subclasses list their fields in WIRE_FIELDS. Unknown keys are kept in
    `extra`. Serialization skips None values and empty collections.
    """
    WIRE_FIELDS: Tuple[WireField, ...] = ()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]):
        if data is None:
            return None
        if not isinstance(data, Mapping):
            raise TypeError(f"{cls.__name__} expects a mapping, got {type(data).__name__}")
        kwargs: Dict[str, Any] = {}
        known = set()
        for wf in cls.WIRE_FIELDS:
            known.add(wf.key)
            if wf.key not in data:
                continue
            value = data[wf.key]
            if wf.model is not None and value is not None:
                if wf.many:
                    value = [wf.model.from_dict(item) for item in value]
                else:
                    value = wf.model.from_dict(value)
            else:
                value = to_plain(value)
            kwargs[wf.attr] = value
        extra = {k: to_plain(v) for k, v in data.items() if k not in known}
        if extra:
            kwargs["extra"] = extra
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for wf in self.WIRE_FIELDS:
            value = getattr(self, wf.attr)
            if value is None:
                continue
            if wf.model is not None:
                value = [item.to_dict() for item in value] if wf.many else value.to_dict()
            if isinstance(value, (list, dict)) and not value:
                continue
            out[wf.key] = value
        for key, value in self.extra.items():
            out.setdefault(key, value)
        return out


@dataclass
class EnvVar(WireModel):
    name: Optional[str] = None
    value: Optional[str] = None
    value_from: Optional[Dict[str, Any]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    WIRE_FIELDS = (
        WireField("name", "name"),
        WireField("value", "value"),
        WireField("value_from", "valueFrom"),
    )


@dataclass
class ContainerPort(WireModel):
    container_port: Optional[int] = None
    host_port: Optional[int] = None
    host_ip: Optional[str] = None
    name: Optional[str] = None
    protocol: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    WIRE_FIELDS = (
        WireField("container_port", "containerPort"),
        WireField("host_ip", "hostIP"),
        WireField("host_port", "hostPort"),
        WireField("name", "name"),
        WireField("protocol", "protocol"),
    )


@dataclass
class VolumeMount(WireModel):
    name: Optional[str] = None
    mount_path: Optional[str] = None
    read_only: Optional[bool] = None
    sub_path: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    WIRE_FIELDS = (
        WireField("mount_path", "mountPath"),
        WireField("name", "name"),
        WireField("read_only", "readOnly"),
        WireField("sub_path", "subPath"),
    )


@dataclass
class HTTPGetAction(WireModel):
    path: Optional[str] = None
    port: Optional[Any] = None      # int or named port
    host: Optional[str] = None
    scheme: Optional[str] = None
    http_headers: Optional[List[Dict[str, Any]]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    WIRE_FIELDS = (
        WireField("host", "host"),
        WireField("http_headers", "httpHeaders"),
        WireField("path", "path"),
        WireField("port", "port"),
        WireField("scheme", "scheme"),
    )


@dataclass
class ExecAction(WireModel):
    command: Optional[List[str]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    WIRE_FIELDS = (WireField("command", "command"),)


@dataclass
class TCPSocketAction(WireModel):
    port: Optional[Any] = None
    host: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    WIRE_FIELDS = (
        WireField("host", "host"),
        WireField("port", "port"),
    )


@dataclass
class Probe(WireModel):
    http_get: Optional[HTTPGetAction] = None
    exec: Optional[ExecAction] = None
    tcp_socket: Optional[TCPSocketAction] = None
    initial_delay_seconds: Optional[int] = None
    timeout_seconds: Optional[int] = None
    period_seconds: Optional[int] = None
    success_threshold: Optional[int] = None
    failure_threshold: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    WIRE_FIELDS = (
        WireField("exec", "exec", ExecAction),
        WireField("failure_threshold", "failureThreshold"),
        WireField("http_get", "httpGet", HTTPGetAction),
        WireField("initial_delay_seconds", "initialDelaySeconds"),
        WireField("period_seconds", "periodSeconds"),
        WireField("success_threshold", "successThreshold"),
        WireField("tcp_socket", "tcpSocket", TCPSocketAction),
        WireField("timeout_seconds", "timeoutSeconds"),
    )


@dataclass
class SecurityContext(WireModel):
    privileged: Optional[bool] = None
    run_as_user: Optional[int] = None
    run_as_non_root: Optional[bool] = None
    read_only_root_filesystem: Optional[bool] = None
    allow_privilege_escalation: Optional[bool] = None
    capabilities: Optional[Dict[str, Any]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    WIRE_FIELDS = (
        WireField("allow_privilege_escalation", "allowPrivilegeEscalation"),
        WireField("capabilities", "capabilities"),
        WireField("privileged", "privileged"),
        WireField("read_only_root_filesystem", "readOnlyRootFilesystem"),
        WireField("run_as_non_root", "runAsNonRoot"),
        WireField("run_as_user", "runAsUser"),
    )


@dataclass
class Container(WireModel):
    name: Optional[str] = None
    image: Optional[str] = None
    image_pull_policy: Optional[str] = None
    command: Optional[List[str]] = None
    args: Optional[List[str]] = None
    working_dir: Optional[str] = None
    env: Optional[List[EnvVar]] = None
    ports: Optional[List[ContainerPort]] = None
    volume_mounts: Optional[List[VolumeMount]] = None
    liveness_probe: Optional[Probe] = None
    readiness_probe: Optional[Probe] = None
    security_context: Optional[SecurityContext] = None
    resources: Optional[Dict[str, Any]] = None
    stdin: Optional[bool] = None
    stdin_once: Optional[bool] = None
    tty: Optional[bool] = None
    termination_message_path: Optional[str] = None
    termination_message_policy: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    WIRE_FIELDS = (
        WireField("args", "args"),
        WireField("command", "command"),
        WireField("env", "env", EnvVar, many=True),
        WireField("image", "image"),
        WireField("image_pull_policy", "imagePullPolicy"),
        WireField("liveness_probe", "livenessProbe", Probe),
        WireField("name", "name"),
        WireField("ports", "ports", ContainerPort, many=True),
        WireField("readiness_probe", "readinessProbe", Probe),
        WireField("resources", "resources"),
        WireField("security_context", "securityContext", SecurityContext),
        WireField("stdin", "stdin"),
        WireField("stdin_once", "stdinOnce"),
        WireField("termination_message_path", "terminationMessagePath"),
        WireField("termination_message_policy", "terminationMessagePolicy"),
        WireField("tty", "tty"),
        WireField("volume_mounts", "volumeMounts", VolumeMount, many=True),
        WireField("working_dir", "workingDir"),
    )


@dataclass
class PodSpec(WireModel):
    containers: List[Container] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    WIRE_FIELDS = (WireField("containers", "containers", Container, many=True),)


@dataclass
class ObjectMeta(WireModel):
    name: Optional[str] = None
    namespace: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    creation_timestamp: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    WIRE_FIELDS = (
        WireField("annotations", "annotations"),
        WireField("creation_timestamp", "creationTimestamp"),
        WireField("labels", "labels"),
        WireField("name", "name"),
        WireField("namespace", "namespace"),
    )

    @classmethod
    def from_dict(cls, data):
        meta = super().from_dict(data)
        # explicit nulls in a fragment ("labels:") become empty maps
        if meta is not None:
            meta.labels = meta.labels or {}
            meta.annotations = meta.annotations or {}
        return meta


@dataclass
class LabelSelector(WireModel):
    match_labels: Dict[str, str] = field(default_factory=dict)
    match_expressions: List[Dict[str, Any]] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    WIRE_FIELDS = (
        WireField("match_expressions", "matchExpressions"),
        WireField("match_labels", "matchLabels"),
    )


# Top-level keys that open every manifest, in output order
HEADER_KEYS = ("apiVersion", "kind", "metadata")


@dataclass
class KubeResource:
    """
    One Kubernetes/OpenShift object.

    For workload kinds the pod template's spec is lifted into `pod_spec` so the
    merge engine can work on typed containers; `to_dict` puts it back.
    """
    kind: str
    api_version: str
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    body: Dict[str, Any] = field(default_factory=dict)
    pod_spec: Optional[PodSpec] = None

    @property
    def name(self) -> Optional[str]:
        return self.metadata.name

    @property
    def spec(self) -> Dict[str, Any]:
        return self.body.get("spec") or {}

    @property
    def workload_kind(self) -> Optional[WorkloadKind]:
        return WorkloadKind.of(self.kind)

    @property
    def sort_key(self) -> Tuple[str, str]:
        # names may arrive as numbers from YAML
        return (str(self.kind or ""), str(self.name or ""))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KubeResource":
        body = {k: to_plain(v) for k, v in data.items() if k not in HEADER_KEYS}
        resource = cls(
            kind=data.get("kind"),
            api_version=data.get("apiVersion"),
            metadata=ObjectMeta.from_dict(data.get("metadata") or {}),
            body=body,
        )
        raw_pod_spec = resource._pop_pod_spec()
        if raw_pod_spec is not None:
            resource.pod_spec = PodSpec.from_dict(raw_pod_spec)
        return resource

    def _pop_pod_spec(self) -> Optional[Dict[str, Any]]:
        spec = self.body.get("spec")
        if not isinstance(spec, dict):
            return None
        if self.kind == "Pod":
            return self.body.pop("spec")
        if self.workload_kind is None:
            return None
        template = spec.get("template")
        if isinstance(template, dict) and isinstance(template.get("spec"), dict):
            return template.pop("spec")
        return None

    def ensure_pod_spec(self) -> PodSpec:
        if self.pod_spec is None:
            self.pod_spec = PodSpec()
        return self.pod_spec

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
        }
        body = to_plain(self.body)
        if self.pod_spec is not None:
            if self.kind == "Pod":
                body["spec"] = self.pod_spec.to_dict()
            else:
                spec = body.setdefault("spec", {})
                spec.setdefault("template", {})["spec"] = self.pod_spec.to_dict()
        out.update(body)
        return out
