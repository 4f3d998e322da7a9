"""Unit tests for environment variable configuration utilities."""

from __future__ import annotations

import pytest

from .env_config import EnvConfigError, apply_env_overrides, apply_well_known_env, parse_env_value


class TestParseEnvValue:
    """Tests for parse_env_value function."""

    def test_parse_boolean_variants(self):
        for value in ["true", "Yes", "1", "ON"]:
            assert parse_env_value(value, False) is True, f"Failed for: {value}"
        for value in ["false", "No", "0", "off"]:
            assert parse_env_value(value, True) is False, f"Failed for: {value}"

    def test_parse_boolean_invalid(self):
        with pytest.raises(EnvConfigError, match="Cannot parse .* as boolean"):
            parse_env_value("maybe", False)

    def test_parse_numbers(self):
        assert parse_env_value("50000", 0) == 50000
        assert parse_env_value("0.25", 0.0) == 0.25
        with pytest.raises(EnvConfigError, match="as integer"):
            parse_env_value("lots", 0)
        with pytest.raises(EnvConfigError, match="as float"):
            parse_env_value("soon", 0.0)

    def test_parse_json_mapping(self):
        assert parse_env_value('{"de": "voice-de"}', {}) == {"de": "voice-de"}
        with pytest.raises(EnvConfigError, match="Expected JSON dict"):
            parse_env_value("[1]", {})

    def test_null_and_unset_types(self):
        assert parse_env_value("null", "x") is None
        assert parse_env_value("", 3) is None
        assert parse_env_value("sk-123", None) == "sk-123"


class TestApplyEnvOverrides:
    def test_nested_override(self, monkeypatch):
        monkeypatch.setenv("TOURLINGO_SERVICES_ELEVENLABS_REQUEST_TIMEOUT_S", "2.5")
        config = {"services": {"elevenlabs": {"request_timeout_s": 10.0, "api_key": None}}}

        result = apply_env_overrides(config)

        assert result["services"]["elevenlabs"]["request_timeout_s"] == 2.5
        assert result["services"]["elevenlabs"]["api_key"] is None
        assert config["services"]["elevenlabs"]["request_timeout_s"] == 10.0

    def test_custom_prefix(self, monkeypatch):
        monkeypatch.setenv("TOUR_ROOM_PORT", "9001")
        assert apply_env_overrides({"room": {"port": 7880}}, prefix="TOUR") == {"room": {"port": 9001}}

    def test_explicit_mapping_is_used_instead_of_os_environ(self, monkeypatch):
        monkeypatch.setenv("TOURLINGO_ROOM_PORT", "9001")
        result = apply_env_overrides({"room": {"port": 7880, "host": "0.0.0.0"}}, environ={"TOURLINGO_ROOM_HOST": "127.0.0.1"})
        assert result == {"room": {"port": 7880, "host": "127.0.0.1"}}

    def test_parse_error_names_the_variable(self, monkeypatch):
        monkeypatch.setenv("TOURLINGO_ROOM_PORT", "http")
        with pytest.raises(EnvConfigError, match="TOURLINGO_ROOM_PORT"):
            apply_env_overrides({"room": {"port": 7880}})


class TestApplyWellKnownEnv:
    def test_configured_values_win(self):
        config = {"services": {"elevenlabs": {"api_key": "from-file", "language_voices": {"fr": "voice-fr"}}}}
        environ = {"ELEVENLABS_API_KEY": "from-env", "ELEVENLABS_VOICE_FR": "other", "ELEVENLABS_VOICE_JA": "voice-ja"}

        result = apply_well_known_env(config, environ)

        assert result["services"]["elevenlabs"]["api_key"] == "from-file"
        assert result["services"]["elevenlabs"]["language_voices"] == {"fr": "voice-fr", "ja": "voice-ja"}

    def test_input_is_not_mutated(self):
        config = {"services": {"elevenlabs": {"api_key": None, "language_voices": {}}}}

        result = apply_well_known_env(config, {"ELEVENLABS_API_KEY": "el", "ELEVENLABS_VOICE_IT": "voice-it"})

        assert result["services"]["elevenlabs"]["api_key"] == "el"
        assert config == {"services": {"elevenlabs": {"api_key": None, "language_voices": {}}}}

    def test_empty_values_are_ignored(self):
        result = apply_well_known_env({}, {"GOOGLE_TRANSLATE_API_KEY": ""})
        assert "google_translate" not in result["services"]
