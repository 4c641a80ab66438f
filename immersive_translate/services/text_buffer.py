"""
翻訳結果の書き込み先バッファ
"""
from typing import List, Protocol, Tuple, runtime_checkable


@runtime_checkable
class TextBuffer(Protocol):
    """位置を指定してテキストを挿入できるバッファ"""

    def insert(self, position: int, text: str) -> None:
        ...


class MemoryBuffer:
    """文字列を保持するインメモリバッファ"""

    def __init__(self, text: str = ""):
        self.text = text
        self.insertions: List[Tuple[int, str]] = []

    def insert(self, position: int, text: str) -> None:
        """positionの位置にtextを挿入（範囲外は末尾/先頭に丸める）"""
        position = max(0, min(position, len(self.text)))
        self.text = self.text[:position] + text + self.text[position:]
        self.insertions.append((position, text))

    def __str__(self) -> str:
        return self.text
