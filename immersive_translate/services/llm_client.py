"""
LLMリクエストクライアント

登録済みバックエンドへのリクエスト送信と、応答のコールバック配信を行う。
現在のバックエンド/モデル（backend, model属性）はホスト全体の既定値として扱う。

コールバックは callback(response, info) の形で呼び出される:
    - 途中経過 (ReasoningChunk / ToolCallChunk / ToolResultChunk) は到着ごと
    - 終端応答 (Success / Failed / Aborted) はリクエストごとに1回
"""
import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, Optional

from immersive_translate.config import Settings
from immersive_translate.exceptions import APIException, AppException, BackendNotConfiguredError
from immersive_translate.models.llm_response import (
    Aborted,
    Failed,
    LLMResponse,
    RequestInfo,
    Success,
)
from immersive_translate.services.backends.base import LLMBackend

logger = logging.getLogger(__name__)


RequestCallback = Callable[[Optional[LLMResponse], RequestInfo], None]


class LLMClient:
    """LLMリクエストライブラリ"""

    def __init__(
        self,
        backends: Optional[Iterable[LLMBackend]] = None,
        backend: Optional[str] = None,
        model: Optional[str] = None
    ):
        self.backends: Dict[str, LLMBackend] = {b.name: b for b in backends or []}
        self.backend = backend
        self.model = model
        self._tasks: Dict[asyncio.Task, RequestInfo] = {}

    def is_available(self) -> bool:
        """リクエスト可能なバックエンドが1つ以上登録されているか"""
        return bool(self.backends)

    def get_backend(self, name: Optional[str]) -> Optional[LLMBackend]:
        if not name:
            return None
        return self.backends.get(name)

    def request(
        self,
        prompt: str,
        *,
        callback: RequestCallback,
        buffer: Any = None,
        position: Any = None,
        system: Optional[str] = None,
        stream: bool = False,
        context: Any = None,
        backend: Optional[str] = None,
        model: Optional[str] = None
    ) -> asyncio.Task:
        """
        リクエストを送信（実行中のイベントループが必要）

        Args:
            prompt: ユーザープロンプト
            callback: 応答ハンドラー
            buffer: 出力先バッファ（そのままinfoへ渡す）
            position: 出力位置（そのままinfoへ渡す）
            system: システムプロンプト
            stream: ストリーミングを使用するか
            context: 任意のコンテキスト（そのままinfoへ渡す）
            backend: バックエンド名（Noneの場合は現在のバックエンド）
            model: モデル名（Noneの場合は現在のモデル）

        Returns:
            リクエストハンドル（abortに渡す）
        """
        backend_name = backend or self.backend
        llm_backend = self.get_backend(backend_name)
        if llm_backend is None:
            raise BackendNotConfiguredError(
                f"Backend '{backend_name}' is not registered",
                details={"available": sorted(self.backends)}
            )

        info = RequestInfo(
            context=context,
            backend=backend_name,
            model=model or self.model,
            buffer=buffer,
            position=position,
        )

        task = asyncio.get_running_loop().create_task(
            self._run(llm_backend, prompt, info, system, stream, callback)
        )
        self._tasks[task] = info
        task.add_done_callback(lambda t: self._finish(t, info, callback))
        return task

    def abort(self, handle: asyncio.Task) -> bool:
        """
        未完了のリクエストを中断（コールバックにはAbortedが1回渡される）

        終端応答の配信が始まったリクエストは中断しない。
        """
        info = self._tasks.get(handle)
        if handle.done() or info is None or info.completed:
            return False
        return handle.cancel()

    async def _run(
        self,
        llm_backend: LLMBackend,
        prompt: str,
        info: RequestInfo,
        system: Optional[str],
        stream: bool,
        callback: RequestCallback
    ) -> None:
        try:
            text = await llm_backend.generate(
                prompt,
                system=system,
                model=info.model,
                stream=stream,
                on_chunk=lambda chunk: callback(chunk, info)
            )
        except APIException as e:
            logger.error(f"{info.backend} request failed ({e.status_code}): {e.message}")
            info.status = e.status_code
            info.error = e.message
            self._deliver(callback, Failed(status=e.status_code, message=e.message), info)
            return
        except AppException as e:
            logger.error(f"{info.backend} request failed: {e.message}")
            info.error = e.message
            self._deliver(callback, Failed(message=e.message), info)
            return
        except Exception as e:
            logger.exception(f"Unexpected error during {info.backend} request")
            info.error = str(e)
            self._deliver(callback, Failed(message=str(e)), info)
            return

        info.status = 200
        self._deliver(callback, Success(text=text), info)

    @staticmethod
    def _deliver(callback: RequestCallback, response: LLMResponse, info: RequestInfo) -> None:
        """終端応答を配信（以降のabortとAbortedは無効）"""
        info.completed = True
        callback(response, info)

    def _finish(self, task: asyncio.Task, info: RequestInfo, callback: RequestCallback) -> None:
        self._tasks.pop(task, None)
        if task.cancelled():
            if info.completed:
                return
            logger.info(f"{info.backend} request aborted")
            self._deliver(callback, Aborted(), info)
            return

        error = task.exception()
        if error is not None:
            logger.error(
                f"Response callback for {info.backend} request raised: {error!r}",
                exc_info=error
            )


def build_client(settings: Settings) -> LLMClient:
    """設定からクライアントを構築（APIキーのあるバックエンドのみ登録）"""
    backends = []

    for name in settings.configured_backends:
        if name == "claude":
            from immersive_translate.services.backends.claude import ClaudeBackend
            backends.append(ClaudeBackend(
                settings.CLAUDE_API_KEY,
                default_model=settings.CLAUDE_DEFAULT_MODEL,
                max_tokens=settings.MAX_TOKENS,
                timeout=settings.REQUEST_TIMEOUT,
            ))
        elif name == "gemini":
            from immersive_translate.services.backends.gemini import GeminiBackend
            backends.append(GeminiBackend(
                settings.GEMINI_API_KEY,
                default_model=settings.GEMINI_DEFAULT_MODEL,
            ))

    # LLM_BACKEND未設定時は最初に登録したバックエンドを現在のバックエンドとする
    current = settings.LLM_BACKEND or (backends[0].name if backends else None)
    client = LLMClient(backends, backend=current, model=settings.LLM_MODEL)
    logger.info(
        f"LLM client ready: backends={sorted(client.backends)}, "
        f"current={client.backend}, model={client.model}"
    )
    return client
