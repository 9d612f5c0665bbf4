"""Typed settings loader for formula completion."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Tuple
import json
import os


_MISSING = object()
_VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
_VALID_PROVIDERS = ("auto", "openai", "huggingface")
_VALID_OPENAI_BACKENDS = ("http", "sdk")

DEFAULT_OPENAI_MODEL = "text-davinci-002"
HUGGINGFACE_MODELS_URL = "https://api-inference.huggingface.co/models"
DEFAULT_HUGGINGFACE_URL = f"{HUGGINGFACE_MODELS_URL}/NovelAI/genji-python-6B"


class SettingsError(ValueError):
    """Raised when settings cannot be loaded or validated."""


@dataclass(frozen=True)
class CompletionSettings:
    openai_api_key: Optional[str] = None
    huggingface_api_key: Optional[str] = None
    model: Optional[str] = None
    completion_url: Optional[str] = None
    provider: str = "auto"
    openai_backend: str = "http"
    max_attempts: int = 3
    retry_delay_seconds: float = 1.0
    loading_delay_seconds: float = 10.0
    timeout_seconds: float = 30.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        provider = self.provider.strip().lower()
        if provider not in _VALID_PROVIDERS:
            raise SettingsError("provider must be 'auto', 'openai', or 'huggingface'.")

        openai_backend = self.openai_backend.strip().lower()
        if openai_backend not in _VALID_OPENAI_BACKENDS:
            raise SettingsError("openai_backend must be 'http' or 'sdk'.")

        if self.max_attempts <= 0:
            raise SettingsError("max_attempts must be > 0.")

        if self.retry_delay_seconds < 0:
            raise SettingsError("retry_delay_seconds must be >= 0.")

        if self.loading_delay_seconds < 0:
            raise SettingsError("loading_delay_seconds must be >= 0.")

        if self.timeout_seconds <= 0:
            raise SettingsError("timeout_seconds must be > 0.")

        log_level = self.log_level.strip().upper()
        if log_level not in _VALID_LOG_LEVELS:
            raise SettingsError(
                "log_level must be one of: " + ", ".join(sorted(_VALID_LOG_LEVELS))
            )

        object.__setattr__(self, "openai_api_key", _blank_to_none(self.openai_api_key))
        object.__setattr__(
            self, "huggingface_api_key", _blank_to_none(self.huggingface_api_key)
        )
        object.__setattr__(self, "model", _blank_to_none(self.model))
        object.__setattr__(self, "completion_url", _blank_to_none(self.completion_url))
        object.__setattr__(self, "provider", provider)
        object.__setattr__(self, "openai_backend", openai_backend)
        object.__setattr__(self, "log_level", log_level)

    @property
    def openai_model(self) -> str:
        return self.model or DEFAULT_OPENAI_MODEL

    @property
    def huggingface_url(self) -> str:
        if self.completion_url:
            return self.completion_url
        if self.model:
            return f"{HUGGINGFACE_MODELS_URL}/{self.model}"
        return DEFAULT_HUGGINGFACE_URL


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> CompletionSettings:
    """Load validated settings from environment and an optional JSON config.

    API keys are only ever read from the environment. Every other value is
    resolved environment first, then config file, then default.
    """

    env = dict(environ) if environ is not None else dict(os.environ)
    config = _load_config(config_path)

    return CompletionSettings(
        openai_api_key=_as_optional_str(env.get("OPENAI_API_KEY")),
        huggingface_api_key=_as_optional_str(env.get("HUGGINGFACE_API_KEY")),
        model=_read_value(
            config, env, key="model", env_key="COMPLETION_MODEL",
            caster=_as_optional_str, default=None,
        ),
        completion_url=_read_value(
            config, env, key="completion_url", env_key="COMPLETION_URL",
            caster=_as_optional_str, default=None,
        ),
        provider=_read_value(
            config, env, key="provider", env_key="COMPLETION_PROVIDER",
            caster=_as_str, default="auto",
        ),
        openai_backend=_read_value(
            config, env, key="openai_backend", env_key="COMPLETION_OPENAI_BACKEND",
            caster=_as_str, default="http",
        ),
        max_attempts=_read_value(
            config, env, key="max_attempts", env_key="COMPLETION_MAX_ATTEMPTS",
            caster=_as_int, default=3,
        ),
        retry_delay_seconds=_read_value(
            config, env, key="retry_delay_seconds",
            env_key="COMPLETION_RETRY_DELAY_SECONDS", caster=_as_float, default=1.0,
        ),
        loading_delay_seconds=_read_value(
            config, env, key="loading_delay_seconds",
            env_key="COMPLETION_LOADING_DELAY_SECONDS", caster=_as_float, default=10.0,
        ),
        timeout_seconds=_read_value(
            config, env, key="timeout_seconds", env_key="COMPLETION_TIMEOUT_SECONDS",
            caster=_as_float, default=30.0,
        ),
        log_level=_read_value(
            config, env, key="log_level", env_key="COMPLETION_LOG_LEVEL",
            caster=_as_str, default="INFO",
        ),
    )


def settings_summary(settings: CompletionSettings) -> dict:
    """Render redacted settings for diagnostics."""

    return {
        "openai_api_key": "set" if settings.openai_api_key else "unset",
        "huggingface_api_key": "set" if settings.huggingface_api_key else "unset",
        "model": settings.model,
        "openai_model": settings.openai_model,
        "completion_url": settings.completion_url,
        "huggingface_url": settings.huggingface_url,
        "provider": settings.provider,
        "openai_backend": settings.openai_backend,
        "max_attempts": settings.max_attempts,
        "retry_delay_seconds": settings.retry_delay_seconds,
        "loading_delay_seconds": settings.loading_delay_seconds,
        "timeout_seconds": settings.timeout_seconds,
        "log_level": settings.log_level,
    }


def _load_config(config_path: Optional[Path]) -> Mapping[str, Any]:
    if config_path is None:
        return {}

    resolved = config_path.expanduser()
    if not resolved.exists():
        raise SettingsError(f"Config file does not exist: {resolved}")

    try:
        with resolved.open("r", encoding="utf-8") as handle:
            loaded = json.load(handle)
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Config file is not valid JSON: {resolved}") from exc

    if not isinstance(loaded, dict):
        raise SettingsError("Config root must be an object.")

    for secret_key in ("openai_api_key", "huggingface_api_key"):
        if secret_key in loaded:
            raise SettingsError(
                f"'{secret_key}' cannot be set in a config file; use the environment."
            )

    return loaded


def _read_value(
    config: Mapping[str, Any],
    environ: Mapping[str, str],
    *,
    key: str,
    env_key: str,
    caster: Callable[[Any], Any],
    default: Any = _MISSING,
) -> Any:
    raw_value, source = _resolve_raw_value(
        config=config,
        environ=environ,
        key=key,
        env_key=env_key,
        default=default,
    )

    try:
        return caster(raw_value)
    except SettingsError:
        raise
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"Invalid value for {key} from {source}: {raw_value!r}") from exc


def _resolve_raw_value(
    *,
    config: Mapping[str, Any],
    environ: Mapping[str, str],
    key: str,
    env_key: str,
    default: Any,
) -> Tuple[Any, str]:
    env_value = environ.get(env_key)
    if env_value not in (None, ""):
        return env_value, "environment"

    if key in config:
        return config[key], "config"

    if default is not _MISSING:
        return default, "default"

    raise SettingsError(f"Missing required setting '{key}'. Provide it in config or via '{env_key}'.")


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = value.strip()
    return text if text else None


def _as_str(value: Any) -> str:
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise SettingsError("Value cannot be empty.")
        return text

    raise SettingsError("Expected string value.")


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        return text if text else None
    raise SettingsError("Expected string value.")


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise SettingsError("Boolean is not a valid integer value.")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        return int(value.strip())

    raise SettingsError("Expected integer value.")


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        raise SettingsError("Boolean is not a valid float value.")

    if isinstance(value, (int, float)):
        return float(value)

    if isinstance(value, str):
        return float(value.strip())

    raise SettingsError("Expected float value.")
