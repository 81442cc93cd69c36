from kubemold.core.models import (Container, ContainerPort, EnvVar, HTTPGetAction, KubeResource,
                                  PodSpec, Probe, SecurityContext)
from kubemold.merge.podspec import (PodSpecMerger, add_port, get_env_var, merge_into_resource,
                                    set_env_var, set_env_var_no_override)


def env(*pairs):
    return [EnvVar(name=n, value=v) for n, v in pairs]


def test_user_values_are_never_overwritten():
    """
    ADDITIVE MERGE: defaults fill gaps, user settings stay as written.
    """
    target = PodSpec(containers=[Container(image="mine:1", env=env(("A", "1")))])
    default = PodSpec(containers=[Container(
        name="fabric8-demo", image="theirs:2", image_pull_policy="Always",
        env=env(("A", "2"), ("B", "3")),
        ports=[ContainerPort(container_port=8080)],
        security_context=SecurityContext(privileged=False),
    )])

    PodSpecMerger().merge(target, default, "demo")
    container = target.containers[0]

    assert container.name == "fabric8-demo"
    assert container.image == "mine:1"
    assert container.image_pull_policy == "Always"
    assert [(e.name, e.value) for e in container.env] == [("A", "1"), ("B", "3")]
    assert [p.container_port for p in container.ports] == [8080]
    assert container.security_context.privileged is False


def test_env_vars_are_unique_by_name():
    target = Container(env=env(("A", "1"), ("B", "1")))
    default = Container(env=env(("B", "2"), ("C", "2"), ("D", "2")))
    PodSpecMerger().merge(PodSpec(containers=[target]), PodSpec(containers=[default]), "x")

    assert [e.name for e in target.env] == ["A", "B", "C", "D"]


def test_ports_match_by_name_or_number():
    target = Container(ports=[ContainerPort(name="http", container_port=80)])
    default = Container(ports=[
        ContainerPort(name="http", container_port=8080),
        ContainerPort(name="web", container_port=80),
        ContainerPort(name="jolokia", container_port=8778),
    ])
    PodSpecMerger().merge(PodSpec(containers=[target]), PodSpec(containers=[default]), "x")

    assert [(p.name, p.container_port) for p in target.ports] == [("http", 80), ("jolokia", 8778)]


def test_probes_adopted_only_when_missing():
    mine = Probe(http_get=HTTPGetAction(path="/ready", port=9000))
    target = Container(readiness_probe=mine)
    default = Container(readiness_probe=Probe(http_get=HTTPGetAction(path="/health", port=8080)),
                        liveness_probe=Probe(http_get=HTTPGetAction(path="/health", port=8080)))
    PodSpecMerger().merge(PodSpec(containers=[target]), PodSpec(containers=[default]), "x")

    assert target.readiness_probe is mine
    assert target.liveness_probe.http_get.path == "/health"
    assert target.liveness_probe is not default.liveness_probe


def test_extra_default_containers_are_appended():
    target = PodSpec(containers=[Container(name="a"), Container(name="b")])
    defaults = PodSpec(containers=[Container(image="i1"), Container(image="i2"),
                                   Container(name="c", image="i3")])
    PodSpecMerger().merge(target, defaults, "x")

    assert [(c.name, c.image) for c in target.containers] == [("a", "i1"), ("b", "i2"), ("c", "i3")]
    assert target.containers[2] is not defaults.containers[2]


def test_extra_user_containers_are_kept():
    target = PodSpec(containers=[Container(name="a"), Container(name="b"), Container(name="c")])
    PodSpecMerger().merge(target, PodSpec(containers=[Container(image="i1")]), "x")
    assert [c.name for c in target.containers] == ["a", "b", "c"]
    assert target.containers[1].image is None


def test_empty_target_adopts_copies():
    defaults = PodSpec(containers=[Container(name="a", env=env(("A", "1")))])
    target = PodSpec()
    PodSpecMerger().merge(target, defaults, "x")

    assert target.containers == defaults.containers
    target.containers[0].env.append(EnvVar(name="B"))
    assert len(defaults.containers[0].env) == 1


def test_no_defaults_only_names_the_first_container():
    target = PodSpec(containers=[Container(image="a"), Container(image="b")])
    PodSpecMerger().merge(target, PodSpec(), "demo")
    assert [c.name for c in target.containers] == ["demo", None]

    named = PodSpec(containers=[Container(name="mine")])
    PodSpecMerger().merge(named, PodSpec(), "demo")
    assert named.containers[0].name == "mine"

    empty = PodSpec()
    PodSpecMerger().merge(empty, PodSpec(), "demo")
    assert empty.containers == []


def test_merge_into_resource_creates_pod_template():
    deployment = KubeResource.from_dict({
        "apiVersion": "extensions/v1beta1", "kind": "Deployment",
        "metadata": {"name": "demo"}, "spec": {"replicas": 2},
    })
    merge_into_resource(deployment, PodSpec(containers=[Container(name="demo", image="demo")]), "demo")

    spec = deployment.to_dict()["spec"]
    assert spec["replicas"] == 2
    assert spec["template"]["spec"]["containers"] == [{"image": "demo", "name": "demo"}]


def test_env_helpers():
    variables = env(("A", "1"))
    assert set_env_var(variables, "A", "1") is False
    assert set_env_var(variables, "A", "2") is True
    assert set_env_var(variables, "B", "3") is True
    assert get_env_var(variables, "A") == "2"
    assert get_env_var(variables, "Z", "fallback") == "fallback"

    clash = set_env_var_no_override(variables, "A", "9")
    assert clash.value == "2"
    assert set_env_var_no_override(variables, "C", "4") is None
    assert [e.name for e in variables] == ["A", "B", "C"]


def test_add_port():
    ports = [ContainerPort(name="http", container_port=8080)]
    assert add_port(ports, "8080", "web") is False
    assert add_port(ports, "8778", "jolokia") is True
    assert add_port(ports, "not-a-port", "x") is False
    assert add_port(ports, "  ", "x") is False
    assert [p.name for p in ports] == ["http", "jolokia"]
