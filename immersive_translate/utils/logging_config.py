"""
ログ設定

サーバー起動時に一度だけ呼び出す。SettingsのLOG_*を反映する。
"""
import logging
import sys

from immersive_translate.config import Settings
from immersive_translate.exceptions import ConfigurationException


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

# 常にWARNING以上に絞るロガー
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

# バックエンドごとのSDKロガー（登録されたバックエンドのみ絞る）
BACKEND_SDK_LOGGERS = {
    "claude": "anthropic",
    "gemini": "google_genai",
}


class ColoredFormatter(logging.Formatter):
    """コンソール用: レベル名をANSIカラーで表示"""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        # ファイルハンドラーと共有されるレコードは変更しない
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ConfigurationException(
            f"Unknown LOG_LEVEL: {name}",
            details={"choices": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]}
        )
    return level


def setup_logging(settings: Settings) -> None:
    """
    ルートロガーを設定

    Args:
        settings: LOG_LEVEL, LOG_COLORS, LOG_FILE と登録バックエンドを参照

    Raises:
        ConfigurationException: LOG_LEVELが不正
    """
    level = resolve_level(settings.LOG_LEVEL)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        ColoredFormatter(LOG_FORMAT) if settings.LOG_COLORS else logging.Formatter(LOG_FORMAT)
    )
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        file_handler = logging.FileHandler(settings.LOG_FILE, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)

    quiet = list(QUIET_LOGGERS)
    quiet.extend(BACKEND_SDK_LOGGERS[name] for name in settings.configured_backends)
    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(
        f"Logging initialized: level={settings.LOG_LEVEL}, "
        f"backends={settings.configured_backends or 'none'}"
    )
