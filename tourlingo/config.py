from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import yaml

from .errors import ConfigurationError
from .utils.dict_utils import deep_merge
from .utils.env_config import apply_env_overrides, apply_well_known_env

logger = logging.getLogger(__name__)


class ConfigError(ConfigurationError):
    """Raised when configuration cannot be loaded or is invalid."""


@dataclass
class SystemConfig:
    log_level: str = "INFO"

    def to_dict(self) -> Dict:
        return {"log_level": self.log_level}


@dataclass
class ElevenLabsConfig:
    api_key: Optional[str] = None
    base_url: str = "https://api.elevenlabs.io/v1"
    stt_model: str = "scribe_v1"
    realtime_url: str = "wss://api.elevenlabs.io/v1/speech-to-text/realtime"
    realtime_stt_model: str = "scribe_v2_realtime"
    tts_fast_model: str = "eleven_flash_v2_5"
    tts_quality_model: str = "eleven_multilingual_v2"
    default_voice_id: str = "2pwMUCWPsm9t6AwXYaCj"
    operator_voice_id: Optional[str] = None
    language_voices: Dict[str, str] = field(default_factory=dict)
    request_timeout_s: float = 10.0
    stream_latency_optimization: int = 3

    def to_dict(self) -> Dict:
        return {
            "api_key": self.api_key,
            "base_url": self.base_url,
            "stt_model": self.stt_model,
            "realtime_url": self.realtime_url,
            "realtime_stt_model": self.realtime_stt_model,
            "tts_fast_model": self.tts_fast_model,
            "tts_quality_model": self.tts_quality_model,
            "default_voice_id": self.default_voice_id,
            "operator_voice_id": self.operator_voice_id,
            "language_voices": dict(self.language_voices),
            "request_timeout_s": self.request_timeout_s,
            "stream_latency_optimization": self.stream_latency_optimization,
        }


@dataclass
class GoogleTranslateConfig:
    api_key: Optional[str] = None
    base_url: str = "https://translation.googleapis.com/language/translate/v2"
    # generic code -> service-specific variant
    language_code_map: Dict[str, str] = field(default_factory=lambda: {"zh": "zh-CN"})
    request_timeout_s: float = 5.0

    def to_dict(self) -> Dict:
        return {
            "api_key": self.api_key,
            "base_url": self.base_url,
            "language_code_map": dict(self.language_code_map),
            "request_timeout_s": self.request_timeout_s,
        }


@dataclass
class ServicesConfig:
    elevenlabs: ElevenLabsConfig = field(default_factory=ElevenLabsConfig)
    google_translate: GoogleTranslateConfig = field(default_factory=GoogleTranslateConfig)

    def to_dict(self) -> Dict:
        return {
            "elevenlabs": self.elevenlabs.to_dict(),
            "google_translate": self.google_translate.to_dict(),
        }


@dataclass
class PipelineConfig:
    generate_audio: bool = True
    enable_noise_filter: bool = True
    use_operator_voice: bool = False
    fast_mode: bool = True
    voice_style: str = "narration"  # narration | conversation | announcement
    segment_timeout_s: float = 15.0

    def to_dict(self) -> Dict:
        return {
            "generate_audio": self.generate_audio,
            "enable_noise_filter": self.enable_noise_filter,
            "use_operator_voice": self.use_operator_voice,
            "fast_mode": self.fast_mode,
            "voice_style": self.voice_style,
            "segment_timeout_s": self.segment_timeout_s,
        }


@dataclass
class MessagingConfig:
    max_chunk_chars: int = 50_000
    inter_chunk_delay_ms: int = 10
    reassembly_timeout_s: float = 30.0
    sweep_interval_s: float = 5.0
    playback_queue_max: int = 32
    overflow_policy: str = "DROP_OLDEST"

    def to_dict(self) -> Dict:
        return {
            "max_chunk_chars": self.max_chunk_chars,
            "inter_chunk_delay_ms": self.inter_chunk_delay_ms,
            "reassembly_timeout_s": self.reassembly_timeout_s,
            "sweep_interval_s": self.sweep_interval_s,
            "playback_queue_max": self.playback_queue_max,
            "overflow_policy": self.overflow_policy,
        }


@dataclass
class RoomConfig:
    host: str = "0.0.0.0"
    port: int = 7880
    max_message_bytes: int = 65_536

    def to_dict(self) -> Dict:
        return {
            "host": self.host,
            "port": self.port,
            "max_message_bytes": self.max_message_bytes,
        }


@dataclass
class Config:
    system: SystemConfig = field(default_factory=SystemConfig)
    services: ServicesConfig = field(default_factory=ServicesConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    messaging: MessagingConfig = field(default_factory=MessagingConfig)
    room: RoomConfig = field(default_factory=RoomConfig)

    def to_dict(self) -> Dict:
        return {
            "system": self.system.to_dict(),
            "services": self.services.to_dict(),
            "pipeline": self.pipeline.to_dict(),
            "messaging": self.messaging.to_dict(),
            "room": self.room.to_dict(),
        }

    @classmethod
    def load(
        cls,
        paths: Optional[Iterable[Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Config":
        """Load YAML files, then environment overrides, then vendor variables.

        Precedence (highest first): TOURLINGO_* variables, YAML files (later
        files win), defaults. Vendor variables such as ELEVENLABS_API_KEY only
        fill values that are still unset.
        """
        merged = cls._merge_yaml(list(paths or []))
        merged = apply_env_overrides(merged, environ=environ)
        merged = apply_well_known_env(merged, environ)
        return cls.from_dict(merged)

    @classmethod
    def from_yaml(cls, paths: list[Path]) -> "Config":
        """Load and merge multiple YAML config files.

        Configs are merged left-to-right, with later configs overriding earlier ones.
        """
        return cls.from_dict(cls._merge_yaml(paths))

    @classmethod
    def _merge_yaml(cls, paths: list[Path]) -> Dict[str, Any]:
        valid_paths = []
        for path in paths or []:
            path = Path(path)
            if path.is_file():
                valid_paths.append(path)
            else:
                logger.warning("Config path does not exist or is not a file: %s", path)

        merged_dict = DEFAULT_CONFIG.to_dict()
        if not valid_paths:
            logger.info("No valid config files found, using default config")
            return merged_dict

        for path in valid_paths:
            with path.open("r", encoding="utf-8") as f:
                try:
                    data = yaml.safe_load(f) or {}
                except yaml.YAMLError as exc:
                    raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
            if not isinstance(data, dict):
                raise ConfigError(f"Config file {path} must contain a mapping at the top level")
            merged_dict = deep_merge(merged_dict, data)

        logger.info("Loaded and merged %s config file(s)", len(valid_paths))
        return merged_dict

    @classmethod
    def from_dict(cls, data: Dict) -> "Config":
        system = data.get("system", {}) or {}
        services = data.get("services", {}) or {}
        pipeline = data.get("pipeline", {}) or {}
        messaging = data.get("messaging", {}) or {}
        room = data.get("room", {}) or {}

        try:
            config = cls(
                system=SystemConfig(**system),
                services=ServicesConfig(
                    elevenlabs=ElevenLabsConfig(**(services.get("elevenlabs") or {})),
                    google_translate=GoogleTranslateConfig(**(services.get("google_translate") or {})),
                ),
                pipeline=PipelineConfig(**pipeline),
                messaging=MessagingConfig(**messaging),
                room=RoomConfig(**room),
            )
        except TypeError as exc:
            raise ConfigError(f"Unknown configuration key: {exc}") from exc

        config.validate()
        return config

    def validate(self) -> None:
        if self.messaging.max_chunk_chars <= 0:
            raise ConfigError("messaging.max_chunk_chars must be positive")
        if self.messaging.max_chunk_chars >= self.room.max_message_bytes:
            raise ConfigError(
                f"messaging.max_chunk_chars ({self.messaging.max_chunk_chars}) must stay below "
                f"room.max_message_bytes ({self.room.max_message_bytes})"
            )
        if self.messaging.reassembly_timeout_s <= 0:
            raise ConfigError("messaging.reassembly_timeout_s must be positive")
        if self.pipeline.voice_style not in ("narration", "conversation", "announcement"):
            raise ConfigError(f"Unknown pipeline.voice_style '{self.pipeline.voice_style}'")
        if self.messaging.overflow_policy not in ("DROP_OLDEST", "DROP_NEWEST"):
            raise ConfigError(f"Unknown messaging.overflow_policy '{self.messaging.overflow_policy}'")


DEFAULT_CONFIG = Config()
