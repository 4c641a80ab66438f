"""
アプリケーション設定管理
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal, Optional


BackendName = Literal["claude", "gemini"]

DEFAULT_SYSTEM_PROMPT = (
    "You are a professional translator. Translate the user's text faithfully "
    "and fluently. Keep the original formatting, line breaks and markup. "
    "Output only the translation, without explanations or comments."
)

DEFAULT_USER_PROMPT_TEMPLATE = (
    "Translate the following text into the target language. "
    "Reply with the translation only.\n\n%s"
)

PROMPT_PLACEHOLDER = "%s"


class Settings(BaseSettings):
    """アプリケーション設定"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Immersive translate
    IMMERSIVE_TRANSLATE_SYSTEM_PROMPT: str = DEFAULT_SYSTEM_PROMPT
    IMMERSIVE_TRANSLATE_USER_PROMPT_TEMPLATE: str = DEFAULT_USER_PROMPT_TEMPLATE
    # None = ホストの現在のバックエンド/モデルを使用
    IMMERSIVE_TRANSLATE_BACKEND: Optional[BackendName] = None
    IMMERSIVE_TRANSLATE_MODEL: Optional[str] = None
    IMMERSIVE_TRANSLATE_STREAM: bool = True
    IMMERSIVE_TRANSLATE_ERROR_PREFIX: str = "LLM request error:"

    # LLM request library (ambient current backend/model)
    LLM_BACKEND: Optional[BackendName] = None
    LLM_MODEL: Optional[str] = None

    # API Keys (empty = backend not registered)
    CLAUDE_API_KEY: str = ""
    GEMINI_API_KEY: str = ""

    # Vendor defaults, used when no model resolves
    CLAUDE_DEFAULT_MODEL: str = "claude-sonnet-4-5-20250929"
    GEMINI_DEFAULT_MODEL: str = "gemini-2.5-flash"
    MAX_TOKENS: int = 8000
    REQUEST_TIMEOUT: float = 120.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
    LOG_COLORS: bool = True

    # Backend server
    BACKEND_PORT: int = 8000
    BACKEND_HOST: str = "0.0.0.0"

    # CORS
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    @field_validator("IMMERSIVE_TRANSLATE_USER_PROMPT_TEMPLATE")
    @classmethod
    def _single_placeholder(cls, value: str) -> str:
        """テンプレートはプレースホルダーを1つだけ含むこと"""
        count = value.count(PROMPT_PLACEHOLDER)
        if count != 1:
            raise ValueError(
                f"User prompt template must contain exactly one "
                f"'{PROMPT_PLACEHOLDER}' placeholder (found {count})"
            )
        return value

    @property
    def allowed_origins_list(self) -> List[str]:
        """CORS許可オリジンのリスト"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def configured_backends(self) -> List[str]:
        """APIキーが設定されているバックエンド"""
        backends = []
        if self.CLAUDE_API_KEY:
            backends.append("claude")
        if self.GEMINI_API_KEY:
            backends.append("gemini")
        return backends


# グローバル設定インスタンス
settings = Settings()
