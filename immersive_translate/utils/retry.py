"""
リトライユーティリティ

LLMバックエンドのレート制限（429）に対するリトライデコレーター。
retry_afterがあればそれを待ち、なければエクスポネンシャルバックオフ。
"""
import asyncio
import logging
from functools import wraps
from typing import Callable, Optional

from immersive_translate.exceptions import APIRateLimitException

logger = logging.getLogger(__name__)


def backoff_delay(
    attempt: int,
    retry_after: Optional[float],
    base_delay: float,
    max_delay: float,
    exponential_base: float
) -> float:
    """attempt回目の失敗後の待機時間（秒）"""
    if retry_after:
        return min(retry_after, max_delay)
    return min(base_delay * (exponential_base ** attempt), max_delay)


def async_retry(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0
):
    """
    APIRateLimitExceptionのみをリトライする非同期デコレーター

    その他の例外はそのまま送出する。

    Args:
        max_retries: 最大リトライ回数
        base_delay: 基本待機時間（秒）
        max_delay: 最大待機時間（秒）
        exponential_base: エクスポネンシャルバックオフの基数
    """
    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(max_retries + 1):
                try:
                    result = await func(*args, **kwargs)
                    if attempt > 0:
                        logger.info(f"{func.__name__} succeeded after {attempt} rate-limit retries")
                    return result

                except APIRateLimitException as e:
                    if attempt >= max_retries:
                        logger.error(f"{func.__name__} still rate limited after {max_retries} retries")
                        raise

                    wait_time = backoff_delay(
                        attempt, e.retry_after, base_delay, max_delay, exponential_base
                    )
                    logger.warning(
                        f"{func.__name__} rate limited; waiting {wait_time}s "
                        f"(retry {attempt + 1}/{max_retries})"
                    )
                    await asyncio.sleep(wait_time)

        return wrapper
    return decorator
