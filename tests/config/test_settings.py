"""Tests for FSMSettings loading and precedence."""

import pytest
import yaml
from pydantic import ValidationError

from scriptfsm.config.settings import FSMSettings, YamlConfigSource
from scriptfsm.resolver.script import DEFAULT_BLOCKED_MODULES


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Empty working directory with no config-related env vars."""
    monkeypatch.chdir(tmp_path)
    for name in ("SCRIPTFSM_CONFIG", "SCRIPTFSM_DEBUG", "SCRIPTFSM_ENGINE__MAX_STEPS"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


class TestDefaults:
    def test_defaults(self, workdir):
        settings = FSMSettings(_env_file=None)

        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.engine.max_steps is None
        assert settings.script.blocked_modules == list(DEFAULT_BLOCKED_MODULES)
        assert settings.script.filename == "<user>"

    def test_max_steps_must_be_positive(self, workdir):
        with pytest.raises(ValidationError):
            FSMSettings(engine={"max_steps": 0}, _env_file=None)


class TestYamlConfig:
    def test_discovered_in_cwd(self, workdir):
        (workdir / "scriptfsm.yaml").write_text(
            "log_level: DEBUG\nengine:\n  max_steps: 100\n"
        )

        settings = FSMSettings(_env_file=None)

        assert settings.log_level == "DEBUG"
        assert settings.engine.max_steps == 100

    def test_yml_extension(self, workdir):
        (workdir / "scriptfsm.yml").write_text("debug: true\n")

        assert FSMSettings(_env_file=None).debug is True

    def test_explicit_path(self, workdir):
        path = workdir / "custom.yaml"
        path.write_text("script:\n  blocked_modules: [socket]\n")

        settings = FSMSettings(config_file=path, _env_file=None)

        assert settings.script.blocked_modules == ["socket"]

    def test_missing_explicit_path_does_not_fall_back(self, workdir):
        (workdir / "scriptfsm.yaml").write_text("debug: true\n")

        settings = FSMSettings(config_file=workdir / "absent.yaml", _env_file=None)

        assert settings.debug is False

    def test_explicit_path_does_not_leak_into_later_loads(self, workdir):
        path = workdir / "custom.yaml"
        path.write_text("engine:\n  max_steps: 9\n")

        FSMSettings(config_file=path, _env_file=None)

        assert FSMSettings(_env_file=None).engine.max_steps is None

    def test_config_file_not_dumped(self, workdir):
        path = workdir / "custom.yaml"
        path.write_text("debug: true\n")

        settings = FSMSettings(config_file=path, _env_file=None)

        assert settings.config_file == path
        assert "config_file" not in settings.model_dump()

    def test_env_var_path(self, workdir, monkeypatch):
        path = workdir / "elsewhere.yaml"
        path.write_text("engine:\n  max_steps: 7\n")
        monkeypatch.setenv("SCRIPTFSM_CONFIG", str(path))

        assert FSMSettings(_env_file=None).engine.max_steps == 7

    def test_unknown_keys_ignored(self, workdir):
        (workdir / "scriptfsm.yaml").write_text("unknown: 1\ndebug: true\n")

        source = YamlConfigSource(FSMSettings)

        assert source() == {"debug": True}

    def test_invalid_yaml_raises(self, workdir):
        (workdir / "scriptfsm.yaml").write_text("engine: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            FSMSettings(_env_file=None)


class TestPrecedence:
    def test_env_var(self, workdir, monkeypatch):
        monkeypatch.setenv("SCRIPTFSM_ENGINE__MAX_STEPS", "5")

        assert FSMSettings(_env_file=None).engine.max_steps == 5

    def test_yaml_over_env(self, workdir, monkeypatch):
        (workdir / "scriptfsm.yaml").write_text("debug: false\n")
        monkeypatch.setenv("SCRIPTFSM_DEBUG", "true")

        assert FSMSettings(_env_file=None).debug is False

    def test_init_over_yaml(self, workdir):
        (workdir / "scriptfsm.yaml").write_text("log_level: DEBUG\n")

        assert FSMSettings(log_level="ERROR", _env_file=None).log_level == "ERROR"
