"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from simplees.backends.fields import FieldType
from simplees.backends.memory import MemoryClient
from simplees.backends.whoosh import WhooshClient
from simplees.config import (
    Config,
    create_client,
    default_config,
    get_config_paths,
    load_config,
)
from simplees.exceptions import ConfigError


def write_yaml(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data))
    return path


class TestConfigFile:
    """Test reading configuration files."""

    def test_from_file(self, tmp_path):
        path = write_yaml(tmp_path / "c.yaml", {"backend": "memory"})

        assert Config.from_file(path) == {"backend": "memory"}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert Config.from_file(path) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("backend: [unclosed")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            Config.from_file(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            Config.from_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Error reading"):
            Config.from_file(tmp_path / "absent.yaml")

    def test_config_paths(self, tmp_path):
        paths = get_config_paths()

        assert paths[0] == tmp_path / "config" / "simplees" / "config.yaml"
        assert paths[1:] == [Path(".simplees.yaml"), Path("simplees.yaml")]

    def test_merge_configs(self):
        merged = Config.merge_configs(
            {"indexes": {"a": {"x": "text"}}, "per_page": 15},
            {"indexes": {"a": {"y": "numeric"}}, "per_page": 20},
        )

        assert merged == {
            "indexes": {"a": {"x": "text", "y": "numeric"}},
            "per_page": 20,
        }


class TestLoadConfig:
    """Test load_config precedence."""

    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert config == default_config()
        assert config["backend"] == "whoosh"
        assert config["per_page"] == 15
        assert config["index_dir"] == str(tmp_path / "cache" / "simplees" / "index")

    def test_user_then_project_then_explicit(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        write_yaml(
            tmp_path / "config" / "simplees" / "config.yaml",
            {"backend": "memory", "per_page": 5, "indexes": {"people": {"name": "text"}}},
        )
        write_yaml(tmp_path / "simplees.yaml", {"per_page": 7})
        explicit = write_yaml(
            tmp_path / "explicit.yaml", {"indexes": {"people": {"age": "numeric"}}}
        )

        config = load_config(explicit)

        assert config["backend"] == "memory"
        assert config["per_page"] == 7
        assert config["indexes"] == {"people": {"name": "text", "age": "numeric"}}

    def test_invalid_default_file_is_skipped(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "simplees.yaml").write_text("backend: [unclosed")

        assert load_config()["backend"] == "whoosh"

    def test_invalid_explicit_file_raises(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "bad.yaml"
        path.write_text("backend: [unclosed")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        write_yaml(tmp_path / "simplees.yaml", {"backend": "whoosh", "per_page": 7})
        monkeypatch.setenv("SIMPLEES_BACKEND", "memory")
        monkeypatch.setenv("SIMPLEES_INDEX_DIR", str(tmp_path / "idx"))
        monkeypatch.setenv("SIMPLEES_PER_PAGE", "25")

        config = load_config()

        assert config["backend"] == "memory"
        assert config["index_dir"] == str(tmp_path / "idx")
        assert config["per_page"] == 25

    def test_invalid_per_page_override(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SIMPLEES_PER_PAGE", "many")

        with pytest.raises(ConfigError, match="SIMPLEES_PER_PAGE"):
            load_config()


class TestCreateClient:
    """Test client construction from configuration."""

    def test_memory(self):
        assert isinstance(create_client({"backend": "memory"}), MemoryClient)

    def test_whoosh(self, tmp_path):
        client = create_client(
            {
                "backend": "WHOOSH",
                "index_dir": str(tmp_path / "idx"),
                "indexes": {"people": {"age": "numeric", "name": {"type": "text"}}},
            }
        )

        try:
            assert isinstance(client, WhooshClient)
            assert client.index_dir == tmp_path / "idx"
            assert client.field_config("people").get("age").field_type == FieldType.NUMERIC
        finally:
            client.close()

    def test_invalid_field_type(self, tmp_path):
        with pytest.raises(ConfigError):
            create_client(
                {
                    "backend": "whoosh",
                    "index_dir": str(tmp_path),
                    "indexes": {"people": {"age": "integer"}},
                }
            )

    def test_unknown_backend(self):
        with pytest.raises(ConfigError, match="Unknown backend"):
            create_client({"backend": "solr"})
