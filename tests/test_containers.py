import pytest

from kubemold.assembly.containers import ContainerAssembler
from kubemold.assembly.images import ImageName
from kubemold.assembly.project import (SPRING_BOOT_HEALTH_INDICATOR, BuildConfig, ImageConfig,
                                       ProbeConfig, Project, ResourceConfig, VolumeConfig)
from kubemold.core.errors import ConfigError, InvalidPortSpec, MissingBuildConfig

SNAPSHOT = Project(group_id="io.fabric8", artifact_id="demo", version="1.0-SNAPSHOT")
RELEASE = Project(group_id="io.fabric8", artifact_id="demo", version="1.0")


def image(name, ports=None, **kwargs):
    return ImageConfig(name=name, build=BuildConfig(ports=ports), **kwargs)


def test_one_container_per_buildable_image():
    images = [image("fabric8/demo:1.0", ["8080"]), ImageConfig(name="redis:3")]
    containers = ContainerAssembler(RELEASE).build_containers(ResourceConfig(), images)

    assert len(containers) == 1
    container = containers[0]
    assert container.image == "fabric8/demo:1.0"
    assert container.ports[0].container_port == 8080
    assert container.security_context.privileged is False


@pytest.mark.parametrize("img, expected", [
    (image("fabric8/demo:1.0"), "fabric8-demo"),
    (image("docker.io/jboss/demo"), "jboss-demo"),
    (image("demo:1.0"), "io.fabric8-demo"),
    (image("fabric8/demo", alias="web"), "web"),
])
def test_container_name(img, expected):
    assert ContainerAssembler(RELEASE).container_name(img) == expected


def test_pull_policy():
    assert ContainerAssembler(SNAPSHOT).image_pull_policy(ResourceConfig()) == "Always"
    assert ContainerAssembler(RELEASE).image_pull_policy(ResourceConfig()) is None
    explicit = ResourceConfig(image_pull_policy="IfNotPresent")
    assert ContainerAssembler(SNAPSHOT).image_pull_policy(explicit) == "IfNotPresent"


def test_no_declared_ports():
    containers = ContainerAssembler(RELEASE).build_containers(ResourceConfig(), [image("demo")])
    assert containers[0].ports is None


def test_resource_config_is_copied():
    config = ResourceConfig(
        env={"JAVA_OPTS": "-Xmx256m", "PROFILE": "prod"},
        privileged=True,
        volumes=[VolumeConfig(name="data", mounts=["/data", "/backup"])],
    )
    container = ContainerAssembler(RELEASE).build_containers(config, [image("demo")])[0]

    assert [(e.name, e.value) for e in container.env] == [("JAVA_OPTS", "-Xmx256m"), ("PROFILE", "prod")]
    assert container.security_context.privileged is True
    assert [(m.name, m.mount_path, m.read_only) for m in container.volume_mounts] == [
        ("data", "/data", False), ("data", "/backup", False),
    ]


def test_health_check_only_for_last_image():
    project = Project(group_id="io.fabric8", artifact_id="demo",
                      classes=frozenset({SPRING_BOOT_HEALTH_INDICATOR}))
    images = [image("fabric8/sidecar"), image("fabric8/demo"), ImageConfig(name="redis")]
    sidecar, app = ContainerAssembler(project).build_containers(ResourceConfig(), images)

    assert sidecar.liveness_probe is None
    assert sidecar.readiness_probe is None
    assert app.liveness_probe.http_get.path == "/health"
    assert app.liveness_probe.initial_delay_seconds == 180
    assert app.readiness_probe.initial_delay_seconds == 10


def test_configured_probes_apply_to_every_image():
    config = ResourceConfig(readiness=ProbeConfig(tcp_port="8080"))
    containers = ContainerAssembler(RELEASE).build_containers(
        config, [image("fabric8/a"), image("fabric8/b")])
    assert all(c.readiness_probe.tcp_socket.port == 8080 for c in containers)
    assert all(c.liveness_probe is None for c in containers)


def test_buildable_image_without_build_section():
    with pytest.raises(MissingBuildConfig):
        ContainerAssembler(RELEASE).build_containers(
            ResourceConfig(), [ImageConfig(name="demo", buildable=True)])


def test_bad_port_mapping_propagates():
    with pytest.raises(InvalidPortSpec):
        ContainerAssembler(RELEASE).build_containers(ResourceConfig(), [image("demo", ["80/sctp"])])


def test_no_images_no_containers():
    assert ContainerAssembler(RELEASE).build_containers(ResourceConfig(), []) == []


@pytest.mark.parametrize("reference, registry, repository, tag, user", [
    ("fabric8/console", None, "fabric8/console", "latest", "fabric8"),
    ("docker.io/fabric8/console:2.1", "docker.io", "fabric8/console", "2.1", "fabric8"),
    ("localhost:5000/demo", "localhost:5000", "demo", "latest", None),
    ("console@sha256:abc", None, "console", None, None),
])
def test_image_name_parse(reference, registry, repository, tag, user):
    name = ImageName.parse(reference)
    assert (name.registry, name.repository, name.tag, name.user) == (registry, repository, tag, user)
    assert name.simple_name == repository.rsplit("/", 1)[-1]


def test_image_name_rejects_bad_tags():
    with pytest.raises(ConfigError):
        ImageName.parse("demo:bad!tag")
    with pytest.raises(ConfigError):
        ImageName.parse("")
