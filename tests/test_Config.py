"""
Tests for Config loading and validation.
"""

import textwrap

import pytest

from Config import Config, DEFAULTS
from Errors import ConfigError


def write_config(tmp_path, text, name="CronManager"):
    etc = tmp_path / "etc"
    etc.mkdir(exist_ok=True)
    path = etc / ("%s.yaml" % name)
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


class TestConfig:

    def test_missing_file_fails_closed(self, tmp_path):
        with pytest.raises(ConfigError, match="Missing required config file"):
            Config(str(tmp_path))

    def test_empty_file_uses_defaults(self, tmp_path):
        write_config(tmp_path, "")
        assert Config(str(tmp_path)).config == DEFAULTS

    def test_overrides_merge_with_defaults(self, tmp_path):
        write_config(tmp_path, """
            cron:
              agent: roundrobin
              scan_period: 60
            wpcli:
              path: /usr/local/bin/wp
        """)
        config = Config(str(tmp_path)).config
        assert config["cron"]["agent"] == "roundrobin"
        assert config["cron"]["scan_period"] == 60
        assert config["cron"]["stale_grace"] == 120
        assert config["wpcli"]["path"] == "/usr/local/bin/wp"
        assert config["wpcli"]["multisite"] is True

    def test_defaults_not_mutated(self, tmp_path):
        write_config(tmp_path, "cron: {scan_period: 5}")
        Config(str(tmp_path))
        assert DEFAULTS["cron"]["scan_period"] == 300

    def test_explicit_path(self, tmp_path):
        path = write_config(tmp_path, "cron: {max_workers: 3}", name="other")
        config = Config("/nonexistent", path=str(path))
        assert config.path == path
        assert config.config["cron"]["max_workers"] == 3

    def test_invalid_yaml(self, tmp_path):
        write_config(tmp_path, "cron: [unclosed")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            Config(str(tmp_path))

    def test_non_mapping_root(self, tmp_path):
        write_config(tmp_path, "- a\n- b\n")
        with pytest.raises(ConfigError, match="root object"):
            Config(str(tmp_path))

    @pytest.mark.parametrize("text", [
        "cron: {scan_period: 0}",
        "cron: {stale_grace: -1}",
        "cron: {max_workers: eight}",
        "actions: {max_workers: true}",
        "cron: {hook_refresh: -5}",
    ])
    def test_invalid_numbers(self, tmp_path, text):
        write_config(tmp_path, text)
        with pytest.raises(ConfigError):
            Config(str(tmp_path))

    def test_hook_refresh_may_be_zero(self, tmp_path):
        write_config(tmp_path, "cron: {hook_refresh: 0}")
        assert Config(str(tmp_path)).config["cron"]["hook_refresh"] == 0

    def test_unknown_agent(self, tmp_path):
        write_config(tmp_path, "cron: {agent: fastest}")
        with pytest.raises(ConfigError, match="cron.agent"):
            Config(str(tmp_path))
