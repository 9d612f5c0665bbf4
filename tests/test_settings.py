import json
from pathlib import Path
import sys
import tempfile
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from formula_assist.config.settings import (
    DEFAULT_HUGGINGFACE_URL,
    CompletionSettings,
    SettingsError,
    load_settings,
    settings_summary,
)


class SettingsLoaderTests(unittest.TestCase):
    def test_defaults_when_environment_is_empty(self):
        settings = load_settings(environ={})

        self.assertIsNone(settings.openai_api_key)
        self.assertIsNone(settings.huggingface_api_key)
        self.assertIsNone(settings.model)
        self.assertEqual(settings.openai_model, "text-davinci-002")
        self.assertEqual(settings.huggingface_url, DEFAULT_HUGGINGFACE_URL)
        self.assertEqual(settings.provider, "auto")
        self.assertEqual(settings.openai_backend, "http")
        self.assertEqual(settings.max_attempts, 3)
        self.assertEqual(settings.retry_delay_seconds, 1.0)
        self.assertEqual(settings.loading_delay_seconds, 10.0)

    def test_reads_keys_and_model_from_environment(self):
        settings = load_settings(
            environ={
                "OPENAI_API_KEY": "sk-test",
                "HUGGINGFACE_API_KEY": "hf-test",
                "COMPLETION_MODEL": "gpt-3.5-turbo",
            }
        )

        self.assertEqual(settings.openai_api_key, "sk-test")
        self.assertEqual(settings.huggingface_api_key, "hf-test")
        self.assertEqual(settings.openai_model, "gpt-3.5-turbo")

    def test_huggingface_url_resolution_order(self):
        from_model = load_settings(environ={"COMPLETION_MODEL": "codeparrot/codeparrot"})
        self.assertEqual(
            from_model.huggingface_url,
            "https://api-inference.huggingface.co/models/codeparrot/codeparrot",
        )

        override = load_settings(
            environ={
                "COMPLETION_MODEL": "codeparrot/codeparrot",
                "COMPLETION_URL": "http://localhost:8080/generate",
            }
        )
        self.assertEqual(override.huggingface_url, "http://localhost:8080/generate")

    def test_blank_key_counts_as_unset(self):
        settings = load_settings(environ={"OPENAI_API_KEY": "   "})
        self.assertIsNone(settings.openai_api_key)

    def test_environment_overrides_config_file(self):
        config = {"model": "file-model", "max_attempts": 5, "retry_delay_seconds": 0.5}

        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.json"
            config_path.write_text(json.dumps(config), encoding="utf-8")

            settings = load_settings(
                config_path=config_path,
                environ={"COMPLETION_MAX_ATTEMPTS": "2"},
            )

        self.assertEqual(settings.model, "file-model")
        self.assertEqual(settings.max_attempts, 2)
        self.assertEqual(settings.retry_delay_seconds, 0.5)

    def test_config_file_cannot_carry_api_keys(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.json"
            config_path.write_text(json.dumps({"openai_api_key": "sk"}), encoding="utf-8")

            with self.assertRaises(SettingsError):
                load_settings(config_path=config_path, environ={})

    def test_missing_config_file_raises_settings_error(self):
        with self.assertRaises(SettingsError):
            load_settings(config_path=Path("/nonexistent/config.json"), environ={})

    def test_invalid_integer_raises_settings_error(self):
        with self.assertRaises(SettingsError):
            load_settings(environ={"COMPLETION_MAX_ATTEMPTS": "three"})

    def test_invalid_provider_raises_settings_error(self):
        with self.assertRaises(SettingsError):
            load_settings(environ={"COMPLETION_PROVIDER": "anthropic"})

    def test_zero_attempts_rejected(self):
        with self.assertRaises(SettingsError):
            CompletionSettings(max_attempts=0)

    def test_summary_redacts_keys(self):
        settings = CompletionSettings(openai_api_key="sk-secret")
        summary = settings_summary(settings)

        self.assertEqual(summary["openai_api_key"], "set")
        self.assertEqual(summary["huggingface_api_key"], "unset")
        self.assertNotIn("sk-secret", json.dumps(summary))


if __name__ == "__main__":
    unittest.main()
