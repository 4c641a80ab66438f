"""
翻訳API
"""
from fastapi import APIRouter
from functools import lru_cache
import logging

from immersive_translate.config import settings
from immersive_translate.exceptions import ConfigurationException
from immersive_translate.models.schemas import TranslateRequest, TranslateResponse
from immersive_translate.services.llm_client import LLMClient, build_client
from immersive_translate.services.text_buffer import MemoryBuffer
from immersive_translate.services.translation_adapter import (
    AdapterConfig,
    SourceText,
    TranslationRequestAdapter,
    default_callback,
)
from immersive_translate.utils.error_handlers import raise_bad_request, raise_service_unavailable

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def get_llm_client() -> LLMClient:
    """プロセス共有のLLMクライアント"""
    return build_client(settings)


def get_adapter() -> TranslationRequestAdapter:
    return TranslationRequestAdapter(get_llm_client(), AdapterConfig.from_settings(settings))


@router.post("/translate", response_model=TranslateResponse)
async def translate(request: TranslateRequest):
    """
    テキスト翻訳

    Args:
        content: 翻訳対象テキスト
        raw_prompt: Trueの場合はcontentをそのままプロンプトとして送信

    Returns:
        翻訳結果（失敗時は is_error=True とエラーメッセージ）
    """
    if not request.content.strip():
        raise_bad_request("content must not be empty")

    content = request.content if request.raw_prompt else SourceText(request.content)
    # 既定の完了ハンドラーで結果をバッファへ書き込む
    buffer = MemoryBuffer()

    try:
        result, descriptor = await get_adapter().translate_and_wait(
            {"content": content, "buffer": buffer, "position": 0},
            default_callback
        )
    except ConfigurationException as e:
        logger.error(f"Translation unavailable: {e.message}")
        raise_service_unavailable(e.message)

    return TranslateResponse(
        text=buffer.text,
        is_error=result.is_error,
        status=descriptor.get("status"),
        error=descriptor.get("error"),
        backend=descriptor.get("backend"),
        model=descriptor.get("model"),
    )
