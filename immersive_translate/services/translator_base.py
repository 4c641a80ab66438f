"""
翻訳エンジンの基底クラス
"""
from abc import ABC, abstractmethod
import asyncio
from typing import Any, Callable, Dict, Optional, Tuple

from immersive_translate.models.llm_response import TranslationResult


# リクエスト記述子（content, buffer, position, 完了後は status, error, backend, model）
Descriptor = Dict[str, Any]
TranslationCallback = Callable[[TranslationResult, Descriptor], None]


class TranslatorBase(ABC):
    """翻訳エンジンの基底クラス"""

    @abstractmethod
    def translate(
        self,
        descriptor: Descriptor,
        callback: Optional[TranslationCallback] = None
    ) -> Any:
        """
        翻訳リクエストを送信

        Args:
            descriptor: リクエスト記述子（呼び出し元の辞書は変更しない）
            callback: 完了時に (result, descriptor) で1回だけ呼ばれる

        Returns:
            リクエストハンドル
        """
        pass

    async def translate_and_wait(
        self,
        descriptor: Descriptor,
        callback: Optional[TranslationCallback] = None
    ) -> Tuple[TranslationResult, Descriptor]:
        """
        翻訳を送信し、最初の終端結果を待つ

        Args:
            descriptor: リクエスト記述子
            callback: 結果を返す前に呼ぶハンドラー（バッファへの書き込み等）
        """
        future = asyncio.get_running_loop().create_future()

        def deliver(result: TranslationResult, final: Descriptor) -> None:
            if future.done():
                return
            if callback is not None:
                try:
                    callback(result, final)
                except Exception as e:
                    future.set_exception(e)
                    raise
            future.set_result((result, final))

        self.translate(descriptor, deliver)
        return await future
