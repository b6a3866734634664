"""
Tests for settings loading from the environment and CLI overrides.
"""

from pathlib import Path

import pytest

from updatewiz.config import SCRIPT_NAME, find_script, load_settings
from updatewiz.engine.errors import ConfigError
from updatewiz.safety.guardrails import SUDO_VALIDATE


class TestLoadSettings:
    def test_defaults(self, tmp_path):
        script = tmp_path / SCRIPT_NAME
        settings = load_settings({"UPDATEWIZ_SCRIPT": str(script)})
        assert settings.script_path == script
        assert settings.elevation_command == SUDO_VALIDATE
        assert settings.timeout is None
        assert settings.log_level == "WARNING"

    def test_environment_values(self):
        settings = load_settings({
            "UPDATEWIZ_SCRIPT": "/opt/htotheizzo.sh",
            "UPDATEWIZ_TIMEOUT": "90",
            "UPDATEWIZ_ELEVATION": "doas -u root true",
            "UPDATEWIZ_LOG_LEVEL": "DEBUG",
            "UPDATEWIZ_LOG_FILE": "/tmp/uw.log",
        })
        assert settings.script_path == Path("/opt/htotheizzo.sh")
        assert settings.timeout == 90.0
        assert settings.elevation_command == ("doas", "-u", "root", "true")
        assert settings.log_level == "DEBUG"
        assert settings.log_file == "/tmp/uw.log"

    def test_overrides_beat_environment(self):
        settings = load_settings(
            {"UPDATEWIZ_SCRIPT": "/opt/a.sh", "UPDATEWIZ_TIMEOUT": "10"},
            script_path="/opt/b.sh",
            timeout=5,
            log_level=None,
        )
        assert settings.script_path == Path("/opt/b.sh")
        assert settings.timeout == 5.0
        assert settings.log_level == "WARNING"

    @pytest.mark.parametrize("raw", ["soon", "0", "-3"])
    def test_bad_timeout(self, raw):
        with pytest.raises(ConfigError):
            load_settings({"UPDATEWIZ_SCRIPT": "/x", "UPDATEWIZ_TIMEOUT": raw})

    def test_unknown_override(self):
        with pytest.raises(ConfigError):
            load_settings({"UPDATEWIZ_SCRIPT": "/x"}, colour="blue")

    def test_falls_back_to_search(self, tmp_path, monkeypatch):
        (tmp_path / SCRIPT_NAME).write_text("#!/bin/sh\n")
        monkeypatch.chdir(tmp_path)
        assert load_settings({}).script_path == (tmp_path / SCRIPT_NAME).resolve()


class TestFindScript:
    def test_walks_up(self, tmp_path):
        (tmp_path / SCRIPT_NAME).write_text("#!/bin/sh\n")
        nested = tmp_path / "gui" / "deep"
        nested.mkdir(parents=True)
        assert find_script(nested) == (tmp_path / SCRIPT_NAME).resolve()

    def test_path_lookup(self, tmp_path, monkeypatch):
        empty = tmp_path / "empty"
        empty.mkdir()
        monkeypatch.setattr("updatewiz.config.shutil.which",
                            lambda name: "/usr/local/bin/htotheizzo" if name == "htotheizzo" else None)
        assert find_script(empty) == Path("/usr/local/bin/htotheizzo")

    def test_not_found(self, tmp_path, monkeypatch):
        monkeypatch.setattr("updatewiz.config.shutil.which", lambda name: None)
        assert find_script(tmp_path) is None
