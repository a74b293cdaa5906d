from pathlib import Path

import pytest

from autocli.config.loader import find_config_file, load_config
from autocli.config.models import AgentConfig


def test_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = AgentConfig()
    assert config.model == "deepseek-ai/DeepSeek-V3-0324"
    assert config.temperature == 0.5
    assert config.max_iterations == 70
    assert config.tools.shell_timeout == 30
    assert config.plan.completion_token == "TASK COMPLETE"
    assert config.project_root == Path.cwd()


def test_load_toml_sections_and_overrides(tmp_path):
    project = tmp_path / "proj"
    project.mkdir()
    path = tmp_path / "autocli.toml"
    path.write_text(
        "[agent]\n"
        'model = "some/model"\n'
        "max_iterations = 5\n"
        "[tools]\n"
        "shell_timeout = 12\n"
        "[plan]\n"
        "enabled = false\n"
        "[paths]\n"
        f'project_path = "{project}"\n'
        "[logging]\n"
        'level = "debug"\n'
    )
    config = load_config(path, {"tools.fetch_max_chars": 100, "brave": True})

    assert config.model == "some/model"
    assert config.max_iterations == 5
    assert config.tools.shell_timeout == 12
    assert config.tools.fetch_max_chars == 100
    assert config.plan.enabled is False
    assert config.project_root == project.resolve()
    assert config.logging.level == "DEBUG"
    assert config.brave is True


def test_missing_config_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.toml")


def test_invalid_values_are_rejected():
    with pytest.raises(ValueError):
        load_config(None, {"max_iterations": 0})
    with pytest.raises(ValueError):
        load_config(None, {"tools.shell_timeout": -1})


def test_api_key_lookup(monkeypatch):
    monkeypatch.delenv("CHUTES_API_KEY", raising=False)
    monkeypatch.delenv("CHUTES_API_TOKEN", raising=False)
    config = AgentConfig()
    assert not config.has_api_key()
    with pytest.raises(ValueError):
        config.get_api_key()

    monkeypatch.setenv("CHUTES_API_TOKEN", "tok")
    assert config.get_api_key() == "tok"


def test_find_config_file_prefers_local(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    assert find_config_file() is None
    (tmp_path / "autocli.toml").write_text("")
    assert find_config_file() == tmp_path / "autocli.toml"
