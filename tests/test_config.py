"""Tests for configuration loading and validation."""

import json
import tempfile

import pytest
import yaml

from context_replay.config import config_to_dict, load_config, validate_config
from context_replay.types import DEFAULT_END_MARKER, DEFAULT_INTRO_BANNER


class TestLoadConfig:
    def test_load_defaults(self):
        config = load_config(config_dict={})
        assert config.version == "0.1"
        assert config.token_counter == "estimate"
        assert config.replay.max_tokens_per_chunk == 2000
        assert config.replay.max_tokens_per_send == 1800
        assert config.replay.auto_advance is True
        assert config.replay.tick_interval_ms == 250
        assert config.replay.intro_banner == DEFAULT_INTRO_BANNER
        assert config.replay.end_marker == DEFAULT_END_MARKER
        assert config.replay.hide_seed_messages is True
        assert config.output.directory == "."

    def test_load_from_dict(self):
        config = load_config(config_dict={
            "replay": {
                "max_tokens_per_chunk": 500,
                "auto_advance": False,
                "end_marker": "done",
            },
            "output": {"directory": "/tmp/logs"},
        })
        assert config.replay.max_tokens_per_chunk == 500
        assert config.replay.max_tokens_per_send == 1800
        assert config.replay.auto_advance is False
        assert config.replay.end_marker == "done"
        assert config.output.directory == "/tmp/logs"

    def test_null_sections_use_defaults(self):
        config = load_config(config_dict={"replay": None, "output": None})
        assert config.replay.max_tokens_per_chunk == 2000
        assert config.output.directory == "."

    def test_load_from_yaml_file(self):
        raw = {"version": "0.1", "replay": {"max_tokens_per_send": 900}}
        with tempfile.NamedTemporaryFile(suffix=".yaml", mode="w", delete=False) as f:
            yaml.dump(raw, f)
            f.flush()
            config = load_config(config_path=f.name)
        assert config.replay.max_tokens_per_send == 900

    def test_load_from_json_file(self, tmp_path):
        path = tmp_path / "context-replay.json"
        path.write_text(json.dumps({"token_counter": "estimate", "replay": {"tick_interval_ms": 50}}))
        config = load_config(config_path=path)
        assert config.replay.tick_interval_ms == 50

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / "context-replay.yaml"
        path.write_text("")
        config = load_config(config_path=path)
        assert config.replay.max_tokens_per_chunk == 2000

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "missing.yaml")

    def test_discovers_config_in_cwd(self, tmp_path, monkeypatch):
        (tmp_path / "context-replay.yml").write_text("replay:\n  max_tokens_per_chunk: 321\n")
        monkeypatch.chdir(tmp_path)
        assert load_config().replay.max_tokens_per_chunk == 321

    def test_discovers_config_in_parent(self, tmp_path, monkeypatch):
        (tmp_path / "contextreplay.yaml").write_text("replay:\n  tick_interval_ms: 99\n")
        child = tmp_path / "a" / "b"
        child.mkdir(parents=True)
        monkeypatch.chdir(child)
        assert load_config().replay.tick_interval_ms == 99

    def test_round_trip_through_yaml(self):
        config = load_config(config_dict={"replay": {"max_tokens_per_chunk": 1234}})
        dumped = yaml.safe_dump(config_to_dict(config))
        assert load_config(config_dict=yaml.safe_load(dumped)) == config


class TestValidateConfig:
    def test_defaults_valid(self):
        assert validate_config(load_config(config_dict={})) == []

    @pytest.mark.parametrize("key", ["max_tokens_per_chunk", "max_tokens_per_send", "tick_interval_ms"])
    @pytest.mark.parametrize("value", [0, -5, "100", True, 1.5])
    def test_bad_integers(self, key, value):
        config = load_config(config_dict={"replay": {key: value}})
        errors = validate_config(config)
        assert len(errors) == 1
        assert f"replay.{key}" in errors[0]

    def test_empty_banner_and_marker(self):
        config = load_config(config_dict={"replay": {"intro_banner": "  ", "end_marker": ""}})
        errors = validate_config(config)
        assert any("intro_banner" in e for e in errors)
        assert any("end_marker" in e for e in errors)

    @pytest.mark.parametrize("mode", ["tiktoken", "callable:", "callable:mod", "callable::f"])
    def test_bad_token_counter(self, mode):
        errors = validate_config(load_config(config_dict={"token_counter": mode}))
        assert any("token_counter" in e for e in errors)

    def test_callable_token_counter_valid(self):
        config = load_config(config_dict={"token_counter": "callable:pkg.mod:count"})
        assert validate_config(config) == []


class TestMalformedSections:
    @pytest.mark.parametrize("section", ["replay", "output"])
    @pytest.mark.parametrize("value", [["a"], "text", 3])
    def test_non_mapping_section(self, section, value):
        with pytest.raises(ValueError, match=f"{section} must be a mapping"):
            load_config(config_dict={section: value})

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "context-replay.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="config must be a mapping"):
            load_config(config_path=path)

    def test_quoted_number_loads_but_fails_validation(self, tmp_path):
        path = tmp_path / "context-replay.yaml"
        path.write_text('replay:\n  max_tokens_per_send: "1800"\n')
        config = load_config(config_path=path)
        errors = validate_config(config)
        assert errors == ["replay.max_tokens_per_send must be an integer >= 1 (got '1800')"]

    def test_non_string_token_counter(self):
        errors = validate_config(load_config(config_dict={"token_counter": 5}))
        assert errors == ["token_counter must be a string (got 5)"]
