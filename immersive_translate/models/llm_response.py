"""
LLMリクエストライブラリの応答型

コールバックに渡される応答は以下のいずれか:
    Success          最終的な翻訳テキスト
    Aborted          リクエストの中断
    Failed           ステータスコード/エラーメッセージ付きの失敗
    ReasoningChunk   推論（thinking）の途中経過
    ToolCallChunk    ツール呼び出し
    ToolResultChunk  ツール実行結果
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class Aborted:
    pass


@dataclass(frozen=True)
class Failed:
    status: Optional[int] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class ReasoningChunk:
    text: str


@dataclass(frozen=True)
class ToolCallChunk:
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResultChunk:
    name: str
    content: Any = None


LLMResponse = Union[Success, Aborted, Failed, ReasoningChunk, ToolCallChunk, ToolResultChunk]

# 終端ではない応答（ストリーミング途中の成果物）
INTERMEDIATE_RESPONSES = (ReasoningChunk, ToolCallChunk, ToolResultChunk)


@dataclass
class RequestInfo:
    """リクエスト情報（コールバックの第2引数）"""
    context: Any = None
    status: Optional[int] = None
    error: Optional[str] = None
    backend: Optional[str] = None
    model: Optional[str] = None
    buffer: Any = None
    position: Any = None
    # 終端応答の配信が始まった
    completed: bool = False


@dataclass(frozen=True)
class TranslationResult:
    """翻訳結果（成功テキストまたはエラーメッセージ）"""
    text: str
    is_error: bool = False

    @classmethod
    def success(cls, text: str) -> "TranslationResult":
        return cls(text=text)

    @classmethod
    def failure(cls, message: str) -> "TranslationResult":
        return cls(text=message, is_error=True)
