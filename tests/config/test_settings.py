"""
Tests for runtime settings (inventory_config).

Covers:
- Packaged defaults
- YAML override files merged over defaults
- INVENTORY_* environment overrides
- Rejection of unknown keys and bad values
- Config trace log
"""

import pytest
import yaml

from inventory_config import Settings, get_settings
from inventory_config.loader import compute_checksum, load_yaml_file, merge


class TestDefaults:

    def test_packaged_defaults(self):
        settings = get_settings(environ={})

        assert isinstance(settings, Settings)
        assert settings.database.url == "sqlite://"
        assert settings.database.echo is False
        assert settings.logging.level == "INFO"
        assert settings.pagination.default_limit == 20
        assert settings.pagination.max_limit == 100
        assert settings.closing.min_justification_length == 10

    def test_settings_are_frozen(self):
        settings = get_settings(environ={})

        with pytest.raises(AttributeError):
            settings.closing.min_justification_length = 1

    def test_checksum_is_deterministic(self):
        assert get_settings(environ={}).checksum == get_settings(environ={}).checksum


class TestOverrides:

    def test_yaml_file_overrides_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump({
            "closing": {"min_justification_length": 25},
            "pagination": {"max_limit": 50},
        }))

        settings = get_settings(path, environ={})

        assert settings.closing.min_justification_length == 25
        assert settings.pagination.max_limit == 50
        assert settings.pagination.default_limit == 20

    def test_environment_wins(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("logging:\n  level: WARNING\n")

        settings = get_settings(
            path,
            environ={
                "INVENTORY_LOG_LEVEL": "DEBUG",
                "INVENTORY_DATABASE_URL": "postgresql://inv@localhost/inventario",
                "INVENTORY_SQL_ECHO": "true",
            },
        )

        assert settings.logging.level == "DEBUG"
        assert settings.database.url == "postgresql://inv@localhost/inventario"
        assert settings.database.echo is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_settings(tmp_path / "absent.yaml", environ={})


class TestRejections:

    def test_unknown_section(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("metrics:\n  enabled: true\n")

        with pytest.raises(ValueError, match="Unknown settings sections"):
            get_settings(path, environ={})

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("closing:\n  min_length: 3\n")

        with pytest.raises(ValueError, match="Unknown keys"):
            get_settings(path, environ={})

    def test_bad_integer(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("pagination:\n  max_limit: many\n")

        with pytest.raises(ValueError):
            get_settings(path, environ={})

    def test_default_above_max(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("pagination:\n  default_limit: 200\n")

        with pytest.raises(ValueError):
            get_settings(path, environ={})

    def test_bad_boolean_env(self):
        with pytest.raises(ValueError):
            get_settings(environ={"INVENTORY_SQL_ECHO": "maybe"})

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError):
            load_yaml_file(path)


class TestHelpers:

    def test_merge_is_deep_and_pure(self):
        base = {"a": {"x": 1, "y": 2}}

        merged = merge(base, {"a": {"y": 3}})

        assert merged == {"a": {"x": 1, "y": 3}}
        assert base == {"a": {"x": 1, "y": 2}}

    def test_checksum_ignores_key_order(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})


def test_config_trace_logged(captured_logs):
    settings = get_settings(environ={})

    traces = [r for r in captured_logs() if r["message"] == "INVENTORY_CONFIG_TRACE"]
    assert traces[-1]["checksum"] == settings.checksum
    assert "url" not in traces[-1]
