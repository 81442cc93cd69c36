import pytest

from kubemold.core.errors import MissingKind, MultipleSelectorsError, ParseError
from kubemold.core.kinds import DEFAULT_RESOURCE_VERSIONING, KindTable
from kubemold.core.models import KubeResource, LabelSelector
from kubemold.fragments.collection import (RESOURCE_SOURCE_URL_ANNOTATION, ResourceCollection,
                                           ResourceCollectionBuilder, get_source_url_annotation,
                                           is_app_catalog_resource, is_newer_resource,
                                           load_resources, pod_label_selector,
                                           remove_version_selector,
                                           set_source_url_annotation_if_not_set)


def resource(kind, name, spec=None, **metadata):
    data = {"apiVersion": "v1", "kind": kind, "metadata": {"name": name, **metadata}}
    if spec is not None:
        data["spec"] = spec
    return KubeResource.from_dict(data)


@pytest.fixture
def builder():
    return ResourceCollectionBuilder(KindTable.default())


def test_build_from_directory(tmp_path, builder):
    (tmp_path / "myapp-svc.yml").write_text("spec:\n  ports:\n    - port: 80\n")
    (tmp_path / "rc.yml").write_text("spec:\n  replicas: 1\n")
    (tmp_path / "profiles.yml").write_text("- not a fragment\n")

    collection = builder.build_from_directory(DEFAULT_RESOURCE_VERSIONING, "foo", tmp_path)

    assert len(collection) == 2
    assert collection.find("Service", "myapp") is not None
    assert collection.find("ReplicationController", "foo").spec["replicas"] == 1
    assert collection.find("Service", "foo") is None
    assert collection.has_kind("Service")
    assert collection.has_kind("Deployment", "ReplicationController")
    assert not collection.has_kind("Deployment")


def test_one_bad_fragment_fails_the_batch(tmp_path, builder):
    (tmp_path / "a-svc.yml").write_text("spec: {}\n")
    (tmp_path / "b.yml").write_text("spec: {}\n")
    with pytest.raises(MissingKind):
        builder.build_from_directory(DEFAULT_RESOURCE_VERSIONING, "foo", tmp_path)


def test_empty_directory(tmp_path, builder):
    assert len(builder.build_from_directory(DEFAULT_RESOURCE_VERSIONING, "foo", tmp_path)) == 0


def test_sorted_by_kind_then_name():
    collection = ResourceCollection([
        resource("Service", "b"), resource("Deployment", "z"), resource("Service", "a"),
    ])
    assert [r.sort_key for r in collection.sorted()] == [
        ("Deployment", "z"), ("Service", "a"), ("Service", "b"),
    ]
    listing = collection.to_list_dict()
    assert listing["kind"] == "List"
    assert [i["metadata"]["name"] for i in listing["items"]] == ["z", "a", "b"]


def test_selectors_per_controller_kind():
    deployment = resource("Deployment", "web", {"selector": {"matchLabels": {"app": "web"}}})
    rc = resource("ReplicationController", "web", {"selector": {"app": "web"}})
    service = resource("Service", "web", {"selector": {"app": "web"}})

    expected = LabelSelector(match_labels={"app": "web"})
    assert pod_label_selector(deployment) == expected
    assert pod_label_selector(rc) == expected
    assert pod_label_selector(service) is None
    assert ResourceCollection([deployment, rc, service]).pod_label_selector() == expected


def test_conflicting_selectors():
    collection = ResourceCollection([
        resource("Deployment", "a", {"selector": {"matchLabels": {"app": "a"}}}),
        resource("DaemonSet", "b", {"selector": {"matchLabels": {"app": "b"}}}),
    ])
    with pytest.raises(MultipleSelectorsError):
        collection.pod_label_selector()


def test_remove_version_selector():
    selector = {"app": "web", "version": "1.0"}
    assert remove_version_selector(selector) == {"app": "web"}
    assert selector["version"] == "1.0"


def test_source_url_annotation_is_not_overridden():
    svc = resource("Service", "web")
    assert get_source_url_annotation(svc) is None
    set_source_url_annotation_if_not_set(svc, "file:///a.yml")
    set_source_url_annotation_if_not_set(svc, "file:///b.yml")
    assert svc.metadata.annotations[RESOURCE_SOURCE_URL_ANNOTATION] == "file:///a.yml"


def test_app_catalog_resource():
    assert is_app_catalog_resource(
        resource("ConfigMap", "c", annotations={"fabric8.io/app-catalog": "true"}))
    assert not is_app_catalog_resource(resource("ConfigMap", "c"))


def test_is_newer_resource():
    old = resource("Pod", "a", creationTimestamp="2017-01-01T10:00:00Z")
    new = resource("Pod", "a", creationTimestamp="2017-06-01T10:00:00Z")
    undated = resource("Pod", "a")

    assert is_newer_resource(new, old)
    assert not is_newer_resource(old, new)
    assert is_newer_resource(new, undated)
    assert not is_newer_resource(undated, new)


LIST_MANIFEST = """\
apiVersion: v1
kind: List
items:
  - apiVersion: v1
    kind: Service
    metadata:
      name: web
  - apiVersion: extensions/v1beta1
    kind: Deployment
    metadata:
      name: web
---
apiVersion: v1
kind: Service
metadata:
  name: web
"""

TEMPLATE_MANIFEST = """\
apiVersion: v1
kind: Template
metadata:
  name: tmpl
objects:
  - apiVersion: v1
    kind: Service
    metadata:
      name: svc
  - apiVersion: v1
    kind: ConfigMap
    metadata:
      name: cfg
"""


def test_load_resources_flattens_lists(tmp_path):
    manifest = tmp_path / "kubernetes.yml"
    manifest.write_text(LIST_MANIFEST)

    loaded = load_resources(manifest)
    assert [r.sort_key for r in loaded] == [("Deployment", "web"), ("Service", "web")]


def test_load_resources_templates(tmp_path):
    manifest = tmp_path / "openshift.yml"
    manifest.write_text(TEMPLATE_MANIFEST)

    assert [r.kind for r in load_resources(manifest)] == ["ConfigMap", "Service"]

    def only_services(template):
        return [o for o in template["objects"] if o["kind"] == "Service"]

    assert [r.kind for r in load_resources(manifest, only_services)] == ["Service"]


def test_load_resources_rejects_empty_file(tmp_path):
    manifest = tmp_path / "empty.yml"
    manifest.write_text("")
    with pytest.raises(ParseError):
        load_resources(manifest)


def test_numeric_names_sort_with_string_names(tmp_path, builder):
    (tmp_path / "a-svc.yml").write_text("metadata:\n  name: 123\n")
    (tmp_path / "b-svc.yml").write_text("")

    collection = builder.build_from_directory(DEFAULT_RESOURCE_VERSIONING, "foo", tmp_path)
    assert [r.sort_key for r in collection.sorted()] == [("Service", "123"), ("Service", "b")]
