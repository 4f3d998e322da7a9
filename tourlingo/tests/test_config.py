from pathlib import Path

import pytest

from tourlingo.config import Config, ConfigError
from tourlingo.errors import ConfigurationError


def _write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("ELEVENLABS_API_KEY", "GOOGLE_TRANSLATE_API_KEY", "ELEVENLABS_OPERATOR_VOICE_ID", "ELEVENLABS_VOICE_DE"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = Config.load([], environ={})
    assert config.services.elevenlabs.default_voice_id == "2pwMUCWPsm9t6AwXYaCj"
    assert config.services.google_translate.language_code_map == {"zh": "zh-CN"}
    assert config.messaging.max_chunk_chars == 50_000
    assert config.messaging.reassembly_timeout_s == 30.0
    assert config.room.max_message_bytes == 65_536


def test_yaml_files_merge_left_to_right(tmp_path):
    base = _write(tmp_path, "base.yml", "pipeline:\n  fast_mode: false\n  voice_style: conversation\n")
    override = _write(tmp_path, "override.yml", "pipeline:\n  voice_style: announcement\nroom:\n  port: 9000\n")

    config = Config.load([base, override], environ={})

    assert config.pipeline.fast_mode is False
    assert config.pipeline.voice_style == "announcement"
    assert config.room.port == 9000


def test_missing_file_is_skipped(tmp_path):
    config = Config.load([tmp_path / "nope.yml"], environ={})
    assert config.room.port == 7880


def test_prefixed_env_overrides_yaml(tmp_path, monkeypatch):
    path = _write(tmp_path, "c.yml", "messaging:\n  playback_queue_max: 8\n")
    monkeypatch.setenv("TOURLINGO_MESSAGING_PLAYBACK_QUEUE_MAX", "4")
    monkeypatch.setenv("TOURLINGO_PIPELINE_GENERATE_AUDIO", "no")

    config = Config.load([path])

    assert config.messaging.playback_queue_max == 4
    assert config.pipeline.generate_audio is False


def test_injected_environment_replaces_process_environment(tmp_path, monkeypatch):
    path = _write(tmp_path, "c.yml", "messaging:\n  playback_queue_max: 8\n")
    monkeypatch.setenv("TOURLINGO_MESSAGING_PLAYBACK_QUEUE_MAX", "4")

    config = Config.load([path], environ={"TOURLINGO_ROOM_PORT": "9100"})

    assert config.messaging.playback_queue_max == 8
    assert config.room.port == 9100


def test_vendor_variables_fill_unset_values(tmp_path):
    path = _write(tmp_path, "c.yml", "services:\n  google_translate:\n    api_key: from-yaml\n")
    environ = {
        "ELEVENLABS_API_KEY": "el-env",
        "GOOGLE_TRANSLATE_API_KEY": "g-env",
        "ELEVENLABS_OPERATOR_VOICE_ID": "clone-1",
        "ELEVENLABS_VOICE_DE": "voice-de",
    }

    config = Config.load([path], environ=environ)

    assert config.services.elevenlabs.api_key == "el-env"
    assert config.services.google_translate.api_key == "from-yaml"
    assert config.services.elevenlabs.operator_voice_id == "clone-1"
    assert config.services.elevenlabs.language_voices == {"de": "voice-de"}


@pytest.mark.parametrize(
    "text",
    [
        "messaging:\n  max_chunk_chars: 70000\n",
        "messaging:\n  max_chunk_chars: 0\n",
        "pipeline:\n  voice_style: whisper\n",
        "messaging:\n  overflow_policy: BLOCK\n",
        "room:\n  colour: blue\n",
        "- just\n- a list\n",
        "pipeline: [unclosed\n",
    ],
)
def test_invalid_configuration_is_rejected(tmp_path, text):
    path = _write(tmp_path, "bad.yml", text)
    with pytest.raises(ConfigError):
        Config.load([path], environ={})


def test_config_errors_are_configuration_errors():
    assert issubclass(ConfigError, ConfigurationError)


def test_to_dict_round_trips():
    config = Config()
    config.pipeline.voice_style = "conversation"
    assert Config.from_dict(config.to_dict()).to_dict() == config.to_dict()
