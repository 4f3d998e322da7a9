"""Environment variable configuration utilities.

Overrides configuration values from environment variables named
TOURLINGO_{PATH_TO_PROPERTY}:
- TOURLINGO_ is the prefix
- Path components are separated by underscores
- All characters are UPPERCASE

Examples:
    TOURLINGO_SYSTEM_LOG_LEVEL=DEBUG
    TOURLINGO_SERVICES_ELEVENLABS_API_KEY=xi-123
    TOURLINGO_PIPELINE_FAST_MODE=false

A handful of well-known vendor variables (ELEVENLABS_API_KEY and friends) fill
values that are still unset after the prefixed overrides.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from typing import Any, Dict, List, Mapping

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "TOURLINGO"

# config path -> vendor variable consulted when the path has no value
WELL_KNOWN_ENV_VARS: Dict[tuple, str] = {
    ("services", "elevenlabs", "api_key"): "ELEVENLABS_API_KEY",
    ("services", "elevenlabs", "operator_voice_id"): "ELEVENLABS_OPERATOR_VOICE_ID",
    ("services", "google_translate", "api_key"): "GOOGLE_TRANSLATE_API_KEY",
}
LANGUAGE_VOICE_ENV_PREFIX = "ELEVENLABS_VOICE_"


class EnvConfigError(ConfigurationError):
    """Raised when environment variable configuration fails."""


def parse_env_value(value: str, existing_value: Any) -> Any:
    """Parse environment variable string to appropriate Python type.

    Infers the target type from the existing value in the config.

    Raises:
        EnvConfigError: If value cannot be parsed to the expected type

    Examples:
        >>> parse_env_value("true", False)
        True
        >>> parse_env_value("123", 0)
        123
        >>> parse_env_value("0.5", 0.0)
        0.5
    """
    if value == "" or value.lower() in ("null", "none"):
        return None

    target_type = type(existing_value) if existing_value is not None else str

    if target_type is bool:
        value_lower = value.lower()
        if value_lower in ("true", "yes", "1", "on"):
            return True
        elif value_lower in ("false", "no", "0", "off"):
            return False
        else:
            raise EnvConfigError(
                f"Cannot parse '{value}' as boolean. "
                f"Valid values: true/false, yes/no, 1/0, on/off (case-insensitive)"
            )

    if target_type is int:
        try:
            return int(value)
        except ValueError as exc:
            raise EnvConfigError(f"Cannot parse '{value}' as integer") from exc

    if target_type is float:
        try:
            return float(value)
        except ValueError as exc:
            raise EnvConfigError(f"Cannot parse '{value}' as float") from exc

    if target_type in (dict, list):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as exc:
            raise EnvConfigError(
                f"Cannot parse '{value}' as JSON {target_type.__name__}"
            ) from exc
        if not isinstance(parsed, target_type):
            raise EnvConfigError(
                f"Expected JSON {target_type.__name__}, got {type(parsed).__name__}"
            )
        return parsed

    return value


def _build_env_var_name(path: List[str], prefix: str) -> str:
    """Build environment variable name from config path.

    Examples:
        >>> _build_env_var_name(["system", "log_level"], "TOURLINGO")
        'TOURLINGO_SYSTEM_LOG_LEVEL'
    """
    parts = [prefix] + path
    return "_".join(part.upper() for part in parts)


def apply_env_overrides(
    config_dict: Dict[str, Any],
    prefix: str = ENV_PREFIX,
    path: List[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Dict[str, Any]:
    """Recursively apply environment variable overrides to config dict.

    Walks the configuration dictionary and checks for corresponding environment
    variables. If found, parses and overrides the value. Skips list values.

    Raises:
        EnvConfigError: If environment variable value cannot be parsed
    """
    if path is None:
        path = []

    result = dict(config_dict)

    for key, value in result.items():
        current_path = path + [key]

        if isinstance(value, list):
            continue

        if isinstance(value, dict):
            result[key] = apply_env_overrides(value, prefix, current_path, environ)
            continue

        env_var_name = _build_env_var_name(current_path, prefix)
        env_value = (os.environ if environ is None else environ).get(env_var_name)

        if env_value is not None:
            try:
                parsed_value = parse_env_value(env_value, value)
            except EnvConfigError as exc:
                raise EnvConfigError(
                    f"Failed to parse environment variable {env_var_name}: {exc}"
                ) from exc
            result[key] = parsed_value
            logger.info(
                "config_override_from_env var=%s value_type=%s path=%s",
                env_var_name,
                type(parsed_value).__name__,
                ".".join(current_path),
            )

    return result


def apply_well_known_env(
    config_dict: Dict[str, Any],
    environ: Mapping[str, str] | None = None,
) -> Dict[str, Any]:
    """Fill unset service credentials and voices from vendor environment variables.

    Values already present in the config win. Per-language voices are read from
    ELEVENLABS_VOICE_<LANG> (e.g. ELEVENLABS_VOICE_DE).
    """
    env = os.environ if environ is None else environ
    result = copy.deepcopy(config_dict)

    for config_path, env_var in WELL_KNOWN_ENV_VARS.items():
        env_value = env.get(env_var)
        if not env_value:
            continue
        node = result
        for part in config_path[:-1]:
            node = node.setdefault(part, {})
        if node.get(config_path[-1]) in (None, ""):
            node[config_path[-1]] = env_value
            logger.info("config_value_from_vendor_env var=%s path=%s", env_var, ".".join(config_path))

    voices = result.setdefault("services", {}).setdefault("elevenlabs", {}).setdefault("language_voices", {})
    for env_var, env_value in env.items():
        if not env_var.startswith(LANGUAGE_VOICE_ENV_PREFIX) or not env_value:
            continue
        language = env_var[len(LANGUAGE_VOICE_ENV_PREFIX):].lower()
        if language and language not in voices:
            voices[language] = env_value

    return result


__all__ = [
    "apply_env_overrides",
    "apply_well_known_env",
    "parse_env_value",
    "EnvConfigError",
    "ENV_PREFIX",
]
