"""
Tests for pkgprobe.config.loader module.

Tests configuration loading and merging including:
- Built-in defaults
- YAML overlay merging
- Environment variable lookup
- Validation and error handling
"""

from __future__ import annotations

from pathlib import Path

import pytest

from pkgprobe.config import CONFIG_ENV_VAR, DEFAULTS, ProbeConfig, load_config
from pkgprobe.config.loader import _deep_merge_dicts
from pkgprobe.exceptions import ConfigError

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def no_env_config(monkeypatch):
    """Make sure a developer's PKGPROBE_CONFIG does not leak into tests."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestConfigLoading:
    """Tests for basic configuration loading."""

    def test_defaults_only(self):
        """Test that no file means built-in defaults."""
        config = load_config()

        assert config == ProbeConfig()
        assert config.api_base_url == "https://api.winget.run/v2"
        assert config.request_timeout == 30
        assert config.search_take == 12
        assert config.max_attempts == 3
        assert config.base_delay == 0.5
        assert config.prewarm_delay == 0.1
        assert config.winget_enabled is True
        assert config.winget_path is None
        assert config.source is None

    def test_partial_override(self, create_yaml_file):
        """Test that only the keys present override the defaults."""
        path = create_yaml_file(
            "pkgprobe.yaml",
            {"api": {"timeout": 10}, "retry": {"base_delay": 1.5}},
        )

        config = load_config(path)

        assert config.request_timeout == 10
        assert config.base_delay == 1.5
        assert config.search_take == 12
        assert config.max_attempts == 3
        assert config.source == path.resolve()

    def test_env_var(self, create_yaml_file, monkeypatch):
        """Test that PKGPROBE_CONFIG is used when no path is given."""
        path = create_yaml_file("env.yaml", {"winget": {"enabled": False}})
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert load_config().winget_enabled is False

    def test_explicit_path_beats_env_var(self, create_yaml_file, monkeypatch):
        env_path = create_yaml_file("env.yaml", {"api": {"take": 5}})
        cli_path = create_yaml_file("cli.yaml", {"api": {"take": 7}})
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_path))

        assert load_config(cli_path).search_take == 7

    def test_empty_file_is_defaults(self, tmp_test_dir):
        path = tmp_test_dir / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path).request_timeout == 30


class TestConfigMerging:
    """Tests for _deep_merge_dicts."""

    def test_nested_dicts_merge(self):
        base = {"api": {"timeout": 30, "take": 12}}
        overlay = {"api": {"take": 5}}
        assert _deep_merge_dicts(base, overlay) == {"api": {"timeout": 30, "take": 5}}

    def test_lists_are_replaced(self):
        assert _deep_merge_dicts({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}

    def test_inputs_not_mutated(self):
        base = {"api": {"timeout": 30}}
        _deep_merge_dicts(base, {"api": {"timeout": 5}})
        assert base == {"api": {"timeout": 30}}
        assert DEFAULTS["api"]["timeout"] == 30


class TestErrorHandling:
    """Tests for configuration errors."""

    def test_missing_file(self, tmp_test_dir):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_test_dir / "missing.yaml")

    def test_invalid_yaml(self, tmp_test_dir):
        path = tmp_test_dir / "bad.yaml"
        path.write_text("api: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="parsing YAML"):
            load_config(path)

    def test_non_mapping_document(self, tmp_test_dir):
        path = tmp_test_dir / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_unknown_section(self, create_yaml_file):
        path = create_yaml_file("x.yaml", {"cache": {"ttl": 60}})
        with pytest.raises(ConfigError, match="unknown config section"):
            load_config(path)

    def test_unknown_key(self, create_yaml_file):
        path = create_yaml_file("x.yaml", {"api": {"retries": 5}})
        with pytest.raises(ConfigError, match="api.retries"):
            load_config(path)

    @pytest.mark.parametrize(
        "data, message",
        [
            ({"api": {"timeout": "fast"}}, "api.timeout"),
            ({"api": {"take": 0}}, "api.take"),
            ({"retry": {"max_attempts": 2.5}}, "retry.max_attempts"),
            ({"retry": {"base_delay": -1}}, "retry.base_delay"),
            ({"api": {"base_url": "ftp://example.com"}}, "api.base_url"),
            ({"winget": {"enabled": "yes please"}}, "winget.enabled"),
            ({"winget": {"path": 42}}, "winget.path"),
            ({"api": {"timeout": 2}}, "api.timeout"),
            ({"api": {"timeout": 301}}, "api.timeout"),
            ({"winget": {"timeout": 1000}}, "winget.timeout"),
        ],
    )
    def test_invalid_values(self, create_yaml_file, data, message):
        path = create_yaml_file("x.yaml", data)
        with pytest.raises(ConfigError, match=message):
            load_config(path)

    def test_config_error_is_pkgprobe_error(self, tmp_test_dir: Path):
        from pkgprobe.exceptions import PkgProbeError

        with pytest.raises(PkgProbeError):
            load_config(tmp_test_dir / "missing.yaml")


class TestTimeoutBounds:
    """Tests for the accepted timeout range."""

    @pytest.mark.parametrize("section", ["api", "winget"])
    def test_bounds_are_inclusive(self, create_yaml_file, section):
        low = load_config(create_yaml_file("low.yaml", {section: {"timeout": 5}}))
        high = load_config(create_yaml_file("high.yaml", {section: {"timeout": 300}}))

        attr = "request_timeout" if section == "api" else "winget_timeout"
        assert getattr(low, attr) == 5
        assert getattr(high, attr) == 300

    def test_error_names_limit(self, create_yaml_file):
        path = create_yaml_file("x.yaml", {"api": {"timeout": 301}})
        with pytest.raises(ConfigError, match="<= 300"):
            load_config(path)
