"""
カスタム例外クラス

アダプターとLLMリクエストライブラリで使用する例外を定義
"""


class AppException(Exception):
    """アプリケーション基底例外"""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class TranslationException(AppException):
    """翻訳処理関連の例外"""
    pass


class ConfigurationException(AppException):
    """設定不備による例外（リクエスト送信前に発生）"""
    pass


class LibraryUnavailableError(ConfigurationException):
    """LLMリクエストライブラリが利用できない"""

    def __init__(self, message: str = "LLM request library is not available", details: dict = None):
        super().__init__(message, details)


class BackendNotConfiguredError(ConfigurationException):
    """有効なバックエンドが解決できない"""

    def __init__(self, message: str = "No LLM backend configured", details: dict = None):
        super().__init__(message, details)


class APIRateLimitException(AppException):
    """APIレート制限例外"""

    def __init__(
        self,
        message: str,
        retry_after: float = None,
        details: dict = None
    ):
        super().__init__(message, details)
        self.retry_after = retry_after


class APIException(AppException):
    """API呼び出し関連の例外"""

    def __init__(
        self,
        message: str,
        status_code: int = None,
        details: dict = None
    ):
        super().__init__(message, details)
        self.status_code = status_code
