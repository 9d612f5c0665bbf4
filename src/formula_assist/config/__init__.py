"""Configuration APIs."""

from formula_assist.config.settings import (
    DEFAULT_HUGGINGFACE_URL,
    DEFAULT_OPENAI_MODEL,
    CompletionSettings,
    SettingsError,
    load_settings,
    settings_summary,
)

__all__ = [
    "DEFAULT_HUGGINGFACE_URL",
    "DEFAULT_OPENAI_MODEL",
    "CompletionSettings",
    "SettingsError",
    "load_settings",
    "settings_summary",
]
