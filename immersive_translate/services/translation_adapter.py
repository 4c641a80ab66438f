"""
イマーシブ翻訳アダプター

翻訳リクエストをLLMリクエストクライアントへ転送し、応答をコールバックへ返す。
"""
from dataclasses import dataclass
import logging
from typing import Any, Optional

from immersive_translate.config import (
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_USER_PROMPT_TEMPLATE,
    PROMPT_PLACEHOLDER,
    Settings,
)
from immersive_translate.exceptions import (
    BackendNotConfiguredError,
    LibraryUnavailableError,
    TranslationException,
)
from immersive_translate.models.llm_response import (
    INTERMEDIATE_RESPONSES,
    Aborted,
    Failed,
    RequestInfo,
    Success,
    TranslationResult,
)
from immersive_translate.services.llm_client import LLMClient
from immersive_translate.services.text_buffer import TextBuffer
from immersive_translate.services.translator_base import (
    Descriptor,
    TranslationCallback,
    TranslatorBase,
)

logger = logging.getLogger(__name__)


FAILURE_NOTICE = "Translation failed."


@dataclass(frozen=True)
class SourceText:
    """テンプレートに埋め込まれる翻訳対象テキスト"""
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class AdapterConfig:
    """アダプター設定（backend/modelがNoneの場合はクライアントの現在値を使用）"""
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    user_prompt_template: str = DEFAULT_USER_PROMPT_TEMPLATE
    backend: Optional[str] = None
    model: Optional[str] = None
    stream: bool = True
    error_prefix: str = "LLM request error:"

    @classmethod
    def from_settings(cls, settings: Settings) -> "AdapterConfig":
        return cls(
            system_prompt=settings.IMMERSIVE_TRANSLATE_SYSTEM_PROMPT,
            user_prompt_template=settings.IMMERSIVE_TRANSLATE_USER_PROMPT_TEMPLATE,
            backend=settings.IMMERSIVE_TRANSLATE_BACKEND,
            model=settings.IMMERSIVE_TRANSLATE_MODEL,
            stream=settings.IMMERSIVE_TRANSLATE_STREAM,
            error_prefix=settings.IMMERSIVE_TRANSLATE_ERROR_PREFIX,
        )


def build_prompt(content: Any, template: str) -> str:
    """
    プロンプト生成

    文字列はそのまま使用し、それ以外はテンプレートのプレースホルダーに埋め込む。
    テンプレートの他の部分（%記号を含む）はそのまま残る。
    """
    if isinstance(content, str):
        return content
    return template.replace(PROMPT_PLACEHOLDER, str(content), 1)


def format_error_response(
    prefix: Optional[str],
    status: Optional[int] = None,
    error: Optional[str] = None
) -> TranslationResult:
    """エラー結果を生成（prefix, status, errorのうち空でないものを連結）"""
    parts = [str(part) for part in (prefix, status, error) if part not in (None, "")]
    message = f"{' '.join(parts)}\n{FAILURE_NOTICE}".strip()
    return TranslationResult.failure(message)


def default_callback(result: TranslationResult, descriptor: Descriptor) -> None:
    """既定の完了ハンドラー: 記述子のbuffer（TextBuffer）のpositionへ結果を挿入"""
    if result.is_error:
        logger.warning(f"Translation failed: {result.text}")

    buffer: Optional[TextBuffer] = descriptor.get("buffer")
    if buffer is None:
        logger.warning("Descriptor has no buffer; dropping translation result")
        return
    if not isinstance(buffer, TextBuffer):
        raise TranslationException(
            f"Descriptor buffer does not support insert: {type(buffer).__name__}"
        )
    buffer.insert(descriptor.get("position") or 0, result.text)


class _CompletionHandler:
    """クライアントからの応答を受け取り、終端結果を1回だけコールバックへ渡す"""

    def __init__(
        self,
        callback: TranslationCallback,
        request_descriptor: Descriptor,
        backend: str,
        model: Optional[str],
        error_prefix: str
    ):
        self.callback = callback
        self.request_descriptor = request_descriptor
        self.backend = backend
        self.model = model
        self.error_prefix = error_prefix
        self.delivered = False

    def __call__(self, response: Any, info: RequestInfo) -> None:
        if isinstance(response, INTERMEDIATE_RESPONSES):
            logger.debug(f"Ignoring {type(response).__name__} from {self.backend}")
            return
        if response is not None and not isinstance(response, (str, Success, Aborted, Failed)):
            logger.warning(f"Ignoring unexpected response type: {type(response).__name__}")
            return
        if self.delivered:
            logger.warning(f"Ignoring {type(response).__name__} after the result was delivered")
            return
        self.delivered = True

        final = self._final_descriptor(info)

        if isinstance(response, str):
            result = TranslationResult.success(response)
        elif isinstance(response, Success):
            result = TranslationResult.success(response.text)
        else:
            status = info.status
            error = info.error
            if isinstance(response, Failed):
                status = status if status is not None else response.status
                error = error or response.message
            result = format_error_response(self.error_prefix, status, error)

        self.callback(result, final)

    def _final_descriptor(self, info: RequestInfo) -> Descriptor:
        context = info.context if isinstance(info.context, dict) else self.request_descriptor
        final = dict(context)
        if info.status is not None:
            final["status"] = info.status
        if info.error:
            final["error"] = info.error
        final["backend"] = self.backend
        if self.model:
            final["model"] = self.model
        return final


class TranslationRequestAdapter(TranslatorBase):
    """LLMリクエストクライアントを用いた翻訳アダプター"""

    def __init__(self, client: Optional[LLMClient], config: Optional[AdapterConfig] = None):
        self.client = client
        self.config = config or AdapterConfig()

    def translate(
        self,
        descriptor: Descriptor,
        callback: Optional[TranslationCallback] = None
    ):
        """
        翻訳リクエストを送信

        Args:
            descriptor: content（必須）, buffer, position を含む記述子
            callback: 完了ハンドラー（Noneの場合はdefault_callback）

        Returns:
            クライアントのリクエストハンドル

        Raises:
            LibraryUnavailableError: クライアントが利用できない
            BackendNotConfiguredError: バックエンドが解決できない
            TranslationException: contentがない
        """
        if self.client is None or not self.client.is_available():
            raise LibraryUnavailableError()

        backend = self.resolve_backend()
        model = self.resolve_model()

        if "content" not in descriptor:
            raise TranslationException("Descriptor has no content")
        prompt = build_prompt(descriptor["content"], self.config.user_prompt_template)

        request_descriptor = dict(descriptor)
        request_descriptor["content"] = prompt

        handler = _CompletionHandler(
            callback or default_callback,
            request_descriptor,
            backend,
            model,
            self.config.error_prefix,
        )

        logger.info(f"Dispatching translation ({len(prompt)} chars) to {backend} (model={model})")

        return self.client.request(
            prompt,
            buffer=descriptor.get("buffer"),
            position=descriptor.get("position"),
            system=self.config.system_prompt,
            stream=self.config.stream,
            context=dict(request_descriptor),
            callback=handler,
            backend=backend,
            model=model,
        )

    def resolve_backend(self) -> str:
        """設定のバックエンド、なければクライアントの現在のバックエンド"""
        name = self.config.backend or self.client.backend
        if not name:
            raise BackendNotConfiguredError()
        if self.client.get_backend(name) is None:
            raise BackendNotConfiguredError(
                f"Backend '{name}' is not configured",
                details={"available": sorted(self.client.backends)}
            )
        return name

    def resolve_model(self) -> Optional[str]:
        """設定のモデル、なければクライアントの現在のモデル（未設定可）"""
        return self.config.model or self.client.model
