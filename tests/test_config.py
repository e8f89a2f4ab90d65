"""Tests for configuration loading."""
import json

import pytest

from kinship.config import EngineConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ("KINSHIP_CONFIG", "KINSHIP_DB_PATH", "KINSHIP_LOG_LEVEL", "KINSHIP_METADATA_SUPPORTED"):
        monkeypatch.delenv(name, raising=False)
    # keep ./kinship.json lookups away from the real working directory
    monkeypatch.chdir(tmp_path)


def _write(path, data):
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


class TestLoadConfig:

    def test_defaults_without_file(self):
        assert load_config() == EngineConfig()

    def test_explicit_file(self, tmp_path):
        path = _write(tmp_path / "custom.json", {"db_path": "tree.db", "metadata_supported": False})
        config = load_config(path)
        assert config.db_path == "tree.db"
        assert config.metadata_supported is False
        assert config.log_level == "INFO"

    def test_file_from_environment(self, tmp_path, monkeypatch):
        path = _write(tmp_path / "elsewhere.json", {"log_level": "DEBUG"})
        monkeypatch.setenv("KINSHIP_CONFIG", str(path))
        assert load_config().log_level == "DEBUG"

    def test_working_directory_file(self, tmp_path):
        _write(tmp_path / "kinship.json", {"db_path": "local.db"})
        assert load_config().db_path == "local.db"

    def test_unknown_keys_are_ignored(self, tmp_path):
        path = _write(tmp_path / "c.json", {"db_path": "x.db", "theme": "dark"})
        assert load_config(path).db_path == "x.db"

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = _write(tmp_path / "c.json", {"db_path": "file.db", "log_level": "INFO"})
        monkeypatch.setenv("KINSHIP_DB_PATH", "env.db")
        monkeypatch.setenv("KINSHIP_LOG_LEVEL", "warning")
        monkeypatch.setenv("KINSHIP_METADATA_SUPPORTED", "yes")

        config = load_config(path)
        assert config.db_path == "env.db"
        assert config.log_level == "WARNING"
        assert config.metadata_supported is True

    def test_malformed_file(self, tmp_path):
        path = _write(tmp_path / "bad.json", "{not json")
        with pytest.raises(ValueError, match="Malformed config file"):
            load_config(path)

    def test_non_object_file(self, tmp_path):
        path = _write(tmp_path / "list.json", [1, 2])
        with pytest.raises(ValueError, match="must contain a JSON object"):
            load_config(path)
