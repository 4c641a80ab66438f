"""
設定のテスト
"""
import pytest
from pydantic import ValidationError

from immersive_translate.config import DEFAULT_USER_PROMPT_TEMPLATE, Settings
from immersive_translate.services.translation_adapter import AdapterConfig


@pytest.mark.unit
class TestSettings:
    """Settingsのテスト"""

    def test_default_template_has_one_placeholder(self):
        assert DEFAULT_USER_PROMPT_TEMPLATE.count("%s") == 1

    def test_custom_template(self):
        settings = Settings(
            _env_file=None,
            IMMERSIVE_TRANSLATE_USER_PROMPT_TEMPLATE="Into Japanese (100%):\n%s"
        )

        assert settings.IMMERSIVE_TRANSLATE_USER_PROMPT_TEMPLATE == "Into Japanese (100%):\n%s"

    @pytest.mark.parametrize("template", ["no placeholder", "%s and %s"])
    def test_template_needs_exactly_one_placeholder(self, template):
        with pytest.raises(ValidationError, match="exactly one"):
            Settings(_env_file=None, IMMERSIVE_TRANSLATE_USER_PROMPT_TEMPLATE=template)

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, IMMERSIVE_TRANSLATE_BACKEND="openai")

    def test_configured_backends(self):
        settings = Settings(_env_file=None, CLAUDE_API_KEY="", GEMINI_API_KEY="g")

        assert settings.configured_backends == ["gemini"]

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("IMMERSIVE_TRANSLATE_STREAM", "false")
        monkeypatch.setenv("IMMERSIVE_TRANSLATE_MODEL", "claude-haiku")

        settings = Settings(_env_file=None)

        assert settings.IMMERSIVE_TRANSLATE_STREAM is False
        assert settings.IMMERSIVE_TRANSLATE_MODEL == "claude-haiku"

    def test_allowed_origins_list(self):
        settings = Settings(_env_file=None, ALLOWED_ORIGINS="http://a, http://b")

        assert settings.allowed_origins_list == ["http://a", "http://b"]


@pytest.mark.unit
class TestAdapterConfig:
    """AdapterConfig.from_settingsのテスト"""

    def test_from_settings(self):
        settings = Settings(
            _env_file=None,
            IMMERSIVE_TRANSLATE_SYSTEM_PROMPT="SYS",
            IMMERSIVE_TRANSLATE_BACKEND="gemini",
            IMMERSIVE_TRANSLATE_MODEL="gemini-pro",
            IMMERSIVE_TRANSLATE_STREAM=False,
            IMMERSIVE_TRANSLATE_ERROR_PREFIX="oops:",
        )

        config = AdapterConfig.from_settings(settings)

        assert config.system_prompt == "SYS"
        assert config.backend == "gemini"
        assert config.model == "gemini-pro"
        assert config.stream is False
        assert config.error_prefix == "oops:"
        assert config.user_prompt_template == settings.IMMERSIVE_TRANSLATE_USER_PROMPT_TEMPLATE
