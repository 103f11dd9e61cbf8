"""
Tests for ledger_config -- YAML loading, environment overrides and
validation.
"""

import textwrap

import pytest

from ledger_config import ENV_OVERRIDES, LedgerConfig, get_active_config
from ledger_config.loader import (
    build_config,
    flatten,
    parse_lock_timeout,
    parse_weekend_days,
)
from ledger_kernel.exceptions import ConfigurationError


@pytest.fixture
def write_config(tmp_path):
    def _write(text: str):
        path = tmp_path / "ledger.yaml"
        path.write_text(textwrap.dedent(text))
        return path

    return _write


class TestDefaults:

    def test_packaged_defaults(self):
        config = get_active_config(environ={})
        assert config.business_timezone == "Africa/Lagos"
        assert config.weekend_days == (6, 7)
        assert config.database_url == "sqlite:///backoffice_ledger.db"
        assert config.log_level == "INFO"
        assert config.lock_timeout is None
        assert config.source.endswith("default.yaml")

    def test_schema_defaults_match_packaged_file(self):
        packaged = get_active_config(environ={})
        assert packaged.business_timezone == LedgerConfig().business_timezone
        assert packaged.weekend_days == LedgerConfig().weekend_days


class TestYamlFile:

    def test_sections_are_flattened(self, write_config):
        path = write_config(
            """
            ledger:
              business_timezone: Europe/London
              weekend_days: [5, 6]
              lock_timeout: 2.5
            database:
              url: postgresql://ledger:secret@db/ledger
              echo_sql: true
            logging:
              level: debug
            """
        )
        config = get_active_config(path, environ={})
        assert config.business_timezone == "Europe/London"
        assert config.weekend_days == (5, 6)
        assert config.lock_timeout == 2.5
        assert config.echo_sql is True
        assert config.log_level == "DEBUG"
        assert "secret" not in config.masked_database_url
        assert config.as_log_fields()["database"] == config.masked_database_url

    def test_empty_file_uses_defaults(self, write_config):
        config = get_active_config(write_config(""), environ={})
        assert config == LedgerConfig(source=config.source)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml", environ={})

    def test_non_mapping_document(self, write_config):
        with pytest.raises(ConfigurationError):
            get_active_config(write_config("- just\n- a list\n"), environ={})


class TestPrecedence:

    def test_environment_beats_file(self, write_config):
        path = write_config("ledger:\n  business_timezone: Europe/London\n")
        config = get_active_config(
            path,
            environ={
                "LEDGER_TIMEZONE": "Africa/Accra",
                "LEDGER_DATABASE_URL": "sqlite://",
            },
        )
        assert config.business_timezone == "Africa/Accra"
        assert config.database_url == "sqlite://"

    def test_overrides_beat_environment(self):
        config = get_active_config(
            environ={"LEDGER_TIMEZONE": "Africa/Accra"},
            overrides={"business_timezone": "UTC"},
        )
        assert config.business_timezone == "UTC"

    def test_empty_environment_value_ignored(self):
        config = get_active_config(environ={"LEDGER_TIMEZONE": ""})
        assert config.business_timezone == "Africa/Lagos"

    def test_env_variables_documented(self):
        assert set(ENV_OVERRIDES.values()) == {"database_url", "business_timezone"}


class TestValidation:

    @pytest.mark.parametrize(
        "values, setting",
        [
            ({"business_timezone": "Mars/Olympus_Mons"}, "business_timezone"),
            ({"business_timezone": ""}, "business_timezone"),
            ({"weekend_days": [0]}, "weekend_days"),
            ({"weekend_days": "6,7"}, "weekend_days"),
            ({"weekend_days": [1, 2, 3, 4, 5, 6, 7]}, "weekend_days"),
            ({"database_url": "not a url"}, "database_url"),
            ({"log_level": "LOUD"}, "log_level"),
            ({"lock_timeout": 0}, "lock_timeout"),
            ({"echo_sql": "yes"}, "echo_sql"),
            ({"weekend": [6, 7]}, "weekend"),
        ],
    )
    def test_invalid_values(self, values, setting):
        with pytest.raises(ConfigurationError) as exc_info:
            build_config(values)
        assert exc_info.value.setting == setting

    def test_weekend_days_sorted_and_deduplicated(self):
        assert parse_weekend_days([7, 6, 7]) == (6, 7)

    def test_lock_timeout_coerced_to_float(self):
        assert parse_lock_timeout(3) == 3.0
        assert parse_lock_timeout(None) is None

    def test_flatten_ignores_missing_sections(self):
        assert flatten({"database": {"url": "sqlite://"}}) == {"database_url": "sqlite://"}
