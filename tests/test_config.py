"""Tests for configuration loading."""

import logging

import pytest
import yaml

from problembank.config import (
    Config,
    ConfigModel,
    SimilarityConfig,
    configure_logging,
    load_config,
    save_config,
)


class TestConfigModel:
    def test_defaults(self):
        config = ConfigModel()
        assert config.similarity.threshold == 0.3
        assert config.similarity.algorithm_version == "v1-keyword"
        assert config.clustering.min_members == 2
        assert config.clustering.top_members == 10
        assert config.postgres.password_env == "PROBLEMBANK_DB_PASSWORD"

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValueError):
            SimilarityConfig(text_weight=0.7, theme_weight=0.7)

    def test_threshold_range(self):
        with pytest.raises(ValueError):
            SimilarityConfig(threshold=1.2)

    def test_log_level_normalized(self):
        assert ConfigModel(logging={"level": "debug"}).logging.level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValueError):
            ConfigModel(logging={"level": "loud"})


class TestLoader:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "config.yaml"
        save_config(ConfigModel(similarity={"threshold": 0.45}), path)

        assert load_config(path).similarity.threshold == 0.45

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == ConfigModel()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("similarity: [unclosed")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"similarity": {"threshold": 3}}))
        with pytest.raises(ValueError, match="Invalid configuration"):
            load_config(path)

    def test_manager_falls_back_to_defaults(self, tmp_path):
        assert Config(tmp_path / "absent.yaml").config == ConfigModel()

    def test_manager_reads_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        save_config(ConfigModel(clustering={"min_members": 3}), path)
        monkeypatch.setenv("PROBLEMBANK_CONFIG", str(path))

        assert Config().config.clustering.min_members == 3

    def test_password_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PROBLEMBANK_DB_PASSWORD", "secret")
        assert Config(tmp_path / "absent.yaml").get_db_config()["password"] == "secret"


class TestLogging:
    def test_configure_logging_sets_level(self):
        configure_logging(ConfigModel(logging={"level": "WARNING"}))
        assert logging.getLogger().level == logging.WARNING
