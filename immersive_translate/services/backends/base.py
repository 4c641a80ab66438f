"""
LLMバックエンドの基底クラス
"""
from abc import ABC, abstractmethod
from typing import Callable, Optional

from immersive_translate.models.llm_response import LLMResponse


ChunkHandler = Callable[[LLMResponse], None]


class LLMBackend(ABC):
    """LLMバックエンドの基底クラス"""

    name: str = ""

    def __init__(self, default_model: str):
        self.default_model = default_model

    def resolve_model(self, model: Optional[str]) -> str:
        """モデル未指定時はバックエンドの既定モデルを使用"""
        return model or self.default_model

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        model: Optional[str] = None,
        stream: bool = False,
        on_chunk: Optional[ChunkHandler] = None
    ) -> str:
        """
        テキスト生成

        Args:
            prompt: ユーザープロンプト
            system: システムプロンプト
            model: モデル名（Noneの場合は既定モデル）
            stream: ストリーミングAPIを使用するか
            on_chunk: 推論/ツール呼び出し等の途中経過を受け取るハンドラー

        Returns:
            生成されたテキスト

        Raises:
            APIRateLimitException: レート制限
            APIException: API呼び出しエラー
        """
        pass
