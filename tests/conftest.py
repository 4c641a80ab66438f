"""
pytest設定とフィクスチャ

テスト全体で共有されるフィクスチャや設定を定義
"""
import asyncio
from pathlib import Path
import sys
from typing import Optional
from unittest.mock import MagicMock

import pytest

# リポジトリのルートをパスに追加
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

from immersive_translate.services.backends.base import LLMBackend  # noqa: E402
from immersive_translate.services.llm_client import LLMClient  # noqa: E402


class FakeBackend(LLMBackend):
    """ネットワークを使わないテスト用バックエンド"""

    def __init__(
        self,
        name: str = "claude",
        text: str = "Hello, world",
        chunks=(),
        error: Optional[Exception] = None,
        hang: bool = False,
        default_model: str = "fake-model"
    ):
        super().__init__(default_model)
        self.name = name
        self.text = text
        self.chunks = list(chunks)
        self.error = error
        self.hang = hang
        self.calls = []

    async def generate(self, prompt, *, system=None, model=None, stream=False, on_chunk=None):
        self.calls.append({
            "prompt": prompt,
            "system": system,
            "model": model,
            "stream": stream,
        })
        for chunk in self.chunks:
            on_chunk(chunk)
        if self.hang:
            await asyncio.Event().wait()
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def fake_backend():
    """成功するテスト用バックエンド"""
    return FakeBackend()


@pytest.fixture
def llm_client(fake_backend):
    """テスト用バックエンドを登録したクライアント"""
    return LLMClient([fake_backend], backend="claude")


@pytest.fixture
def spy_client():
    """リクエストを送信しないスパイクライアント"""
    client = MagicMock(spec=LLMClient)
    client.is_available.return_value = True
    client.backend = "claude"
    client.model = None
    client.backends = {"claude": MagicMock(), "gemini": MagicMock()}
    client.get_backend.side_effect = lambda name: client.backends.get(name)
    return client


@pytest.fixture
def sample_text():
    """サンプル翻訳対象テキスト"""
    return """# Chapter 1 Introduction

This is a sample paragraph for immersive translation.

- point 1
- point 2
"""
