"""Test suite for config management functionality.

This test suite validates:
- Preferences module functionality
- Config loader functionality and sync defaults
- Dynamic config path resolution (no module-level caching)
- CLI commands for config management
"""
import json
from argparse import Namespace

import pytest
import yaml

from op_bruno.secrets.domains import preferences
from op_bruno.secrets.domains import config_loader
from op_bruno.secrets.domains.config_loader import ConfigError


@pytest.fixture
def temp_config_dir(temp_home):
    """Fixture to create temporary config directory."""
    config_dir = temp_home / ".config" / "op-bruno"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


@pytest.fixture
def temp_config_file(temp_config_dir):
    """Fixture to create a config file at the default location."""
    config_file = temp_config_dir / "config.yml"
    with open(config_file, 'w') as f:
        yaml.dump({"defaults": {"vault": "Engineering", "output": "secrets.yml"}}, f)
    return config_file


class TestPreferencesModule:
    """Test suite for preferences module."""

    def test_get_preference_returns_none_when_not_set(self, temp_home):
        assert preferences.get_preference("config_path") is None

    def test_set_preference_stores_value(self, temp_home):
        preferences.set_preference("config_path", "/path/to/config.yml")
        assert preferences.get_preference("config_path") == "/path/to/config.yml"

    def test_clear_preference_removes_value(self, temp_home):
        preferences.set_preference("config_path", "/path/to/config.yml")
        preferences.clear_preference("config_path")
        assert preferences.get_preference("config_path") is None

    def test_preferences_persisted_to_json_file(self, temp_home):
        preferences.set_preference("config_path", "/path/to/config.yml")

        with open(preferences.PREFERENCES_FILE, 'r') as f:
            data = json.load(f)

        assert data["config_path"] == "/path/to/config.yml"

    def test_corrupt_preferences_file_ignored(self, temp_home):
        preferences.PREFERENCES_DIR.mkdir(parents=True)
        preferences.PREFERENCES_FILE.write_text("{ broken")

        assert preferences.get_preference("config_path") is None

    def test_clear_nonexistent_preference(self, temp_home):
        # Should not raise an error
        preferences.clear_preference("nonexistent_key")


class TestConfigLoader:
    """Test suite for config_loader module."""

    def test_no_config_file_uses_builtin_defaults(self, temp_home):
        assert config_loader._get_config_path() is None
        assert config_loader.load_config() == {}

        defaults = config_loader.load_sync_defaults()
        assert defaults.vault == "Employee"
        assert defaults.output == "op-secrets.json"
        assert defaults.title is None
        assert defaults.strict is True

    def test_default_location_used(self, temp_home, temp_config_file):
        assert config_loader._get_config_path() == str(temp_config_file)

        defaults = config_loader.load_sync_defaults()
        assert defaults.vault == "Engineering"
        assert defaults.output == "secrets.yml"

    def test_preference_wins_over_default(self, temp_home, temp_config_file, tmp_path):
        custom = tmp_path / "custom.yml"
        custom.write_text(yaml.dump({"defaults": {"vault": "Custom", "strict": False}}))
        preferences.set_preference("config_path", str(custom))

        defaults = config_loader.load_sync_defaults()

        assert defaults.vault == "Custom"
        assert defaults.strict is False

    def test_preference_change_reflected_immediately(self, temp_home, tmp_path):
        """Config path is resolved on every call, not cached at import time."""
        first = tmp_path / "first.yml"
        second = tmp_path / "second.yml"
        first.write_text(yaml.dump({"defaults": {"vault": "One"}}))
        second.write_text(yaml.dump({"defaults": {"vault": "Two"}}))

        preferences.set_preference("config_path", str(first))
        assert config_loader.load_sync_defaults().vault == "One"

        preferences.set_preference("config_path", str(second))
        assert config_loader.load_sync_defaults().vault == "Two"

    def test_preference_with_nonexistent_path_falls_back(self, temp_home, temp_config_file, tmp_path):
        preferences.set_preference("config_path", str(tmp_path / "nonexistent.yml"))
        assert config_loader._get_config_path() == str(temp_config_file)

    def test_env_var_overrides_vault(self, temp_home, temp_config_file, monkeypatch):
        monkeypatch.setenv("OP_BRUNO_VAULT", "FromEnv")
        assert config_loader.load_sync_defaults().vault == "FromEnv"


class TestEdgeCases:
    """Test edge cases and error handling."""

    def test_empty_config_file(self, temp_home, temp_config_dir):
        (temp_config_dir / "config.yml").write_text("")
        assert config_loader.load_config() == {}

    def test_invalid_yaml_config(self, temp_home, temp_config_dir):
        (temp_config_dir / "config.yml").write_text("invalid: yaml: content: [")

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "parse" in str(exc_info.value).lower()

    def test_non_mapping_config(self, temp_home, temp_config_dir):
        (temp_config_dir / "config.yml").write_text("- a\n- b\n")

        with pytest.raises(ConfigError):
            config_loader.load_config()

    def test_invalid_default_type(self, temp_home, temp_config_dir):
        (temp_config_dir / "config.yml").write_text(yaml.dump({"defaults": {"strict": "yes"}}))

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_sync_defaults()

        assert "strict" in str(exc_info.value)


class TestCLICommands:
    """Test suite for config CLI commands."""

    def test_config_set_path_validates_file_exists(self, temp_home, tmp_path):
        from op_bruno.cli.main import cmd_config_set_path

        args = Namespace(path=str(tmp_path / "nonexistent.yml"))

        with pytest.raises(SystemExit) as exc_info:
            cmd_config_set_path(args)

        assert exc_info.value.code == 1

    def test_config_set_path_stores_absolute_path(self, temp_home, temp_config_file):
        from op_bruno.cli.main import cmd_config_set_path

        cmd_config_set_path(Namespace(path=str(temp_config_file)))

        assert preferences.get_preference("config_path") == str(temp_config_file.resolve())

    def test_config_show_with_preference(self, temp_home, temp_config_file, capsys):
        from op_bruno.cli.main import cmd_config_show

        preferences.set_preference("config_path", str(temp_config_file))
        cmd_config_show(Namespace())

        captured = capsys.readouterr()
        assert str(temp_config_file) in captured.out
        assert "preference" in captured.out.lower()

    def test_config_show_without_preference(self, temp_home, capsys):
        from op_bruno.cli.main import cmd_config_show

        cmd_config_show(Namespace())

        captured = capsys.readouterr()
        assert "default" in captured.out.lower()
        assert "op-bruno" in captured.out

    def test_config_clear_removes_preference(self, temp_home, temp_config_file, capsys):
        from op_bruno.cli.main import cmd_config_clear

        preferences.set_preference("config_path", str(temp_config_file))
        cmd_config_clear(Namespace())

        assert preferences.get_preference("config_path") is None
        assert "cleared" in capsys.readouterr().out.lower()
