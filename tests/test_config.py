import pytest

from kubemold.core.config import EngineConfig, load_config
from kubemold.core.errors import ConfigError

CONFIG = """\
fragments_dir: fragments
output_dir: out
format: json
versions:
  extensions: apps/v1
project:
  group_id: io.fabric8
  artifact_id: demo
  version: 1.0-SNAPSHOT
  properties:
    jolokia.port: 8778
resources:
  env:
    JAVA_OPTS: -Xmx256m
  liveness:
    get_url: http://:8080/health
images:
  - name: fabric8/demo
    build:
      ports: [8080]
  - name: redis
"""


def write_config(tmp_path, text):
    path = tmp_path / "kubemold.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_config(tmp_path / "nope.yaml")
    assert cfg["fragments_dir"] == "src/main/fabric8"
    assert cfg["output_dir"] == "target/fabric8"
    assert cfg["format"] == "yaml"
    assert cfg["images"] == []


def test_load_full_config(tmp_path):
    config = EngineConfig.load(write_config(tmp_path, CONFIG))

    assert config.app_name == "demo"
    assert config.fragments_dir == tmp_path / "fragments"
    assert config.output_dir == tmp_path / "out"
    assert config.format == "json"
    assert config.versions.extensions_version == "apps/v1"
    assert config.versions.core_version == "v1"
    assert config.project.is_snapshot
    assert config.project.properties == {"jolokia.port": "8778"}
    assert config.resources.env == {"JAVA_OPTS": "-Xmx256m"}
    assert config.resources.liveness.get_url == "http://:8080/health"
    assert [i.name for i in config.images] == ["fabric8/demo", "redis"]
    assert config.images[0].build.ports == ["8080"]
    assert not config.images[1].is_buildable


def test_overrides_win(tmp_path):
    path = write_config(tmp_path, CONFIG)
    config = EngineConfig.load(path, app_name="other", format="yaml",
                               output_dir=str(tmp_path / "elsewhere"), fragments_dir=None)

    assert config.app_name == "other"
    assert config.format == "yaml"
    assert config.output_dir == tmp_path / "elsewhere"
    assert config.fragments_dir == tmp_path / "fragments"


@pytest.mark.parametrize("text", [
    "format: xml\napp_name: demo\n",
    "images: {name: x}\napp_name: demo\n",
    "versions: [v1]\napp_name: demo\n",
    "project: {}\n",
    "- a list\n",
    "app_name: demo\nimages:\n  - alias: nameless\n",
    "app_name: demo\nresources:\n  volumes:\n    - mounts: [/data]\n",
    "app_name: [unclosed\n",
])
def test_invalid_configs(tmp_path, text):
    with pytest.raises(ConfigError):
        EngineConfig.load(write_config(tmp_path, text))
