"""
翻訳APIの統合テスト
"""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch

from conftest import FakeBackend
from immersive_translate.exceptions import APIException
from immersive_translate.main import app
from immersive_translate.services.llm_client import LLMClient
from immersive_translate.services.text_buffer import MemoryBuffer
from immersive_translate.services.translation_adapter import (
    FAILURE_NOTICE,
    AdapterConfig,
    TranslationRequestAdapter,
    default_callback,
)


@pytest.fixture
def client():
    """FastAPI TestClient"""
    return TestClient(app)


@pytest.fixture
def backend():
    return FakeBackend(text="Bonjour le monde")


@pytest.fixture
def adapter(backend):
    """テスト用バックエンドを使うアダプター"""
    config = AdapterConfig(user_prompt_template="Translate:\n%s", model="fake-1")
    return TranslationRequestAdapter(LLMClient([backend], backend="claude"), config)


@pytest.mark.integration
class TestTranslateAPI:
    """翻訳APIの統合テスト"""

    @patch('immersive_translate.api.translate.get_adapter')
    def test_translate_success(self, mock_get_adapter, client, adapter, backend):
        """translate - 成功ケース"""
        mock_get_adapter.return_value = adapter

        response = client.post("/api/translate", json={"content": "Hello world"})

        assert response.status_code == 200
        data = response.json()
        assert data == {
            "text": "Bonjour le monde",
            "is_error": False,
            "status": 200,
            "error": None,
            "backend": "claude",
            "model": "fake-1",
        }
        assert backend.calls[0]["prompt"] == "Translate:\nHello world"

    @patch('immersive_translate.api.translate.get_adapter')
    def test_translate_raw_prompt(self, mock_get_adapter, client, adapter, backend):
        """raw_prompt - テンプレートを使わない"""
        mock_get_adapter.return_value = adapter

        response = client.post(
            "/api/translate",
            json={"content": "Say hi in French", "raw_prompt": True}
        )

        assert response.status_code == 200
        assert backend.calls[0]["prompt"] == "Say hi in French"

    @patch('immersive_translate.api.translate.get_adapter')
    def test_translate_writes_through_default_callback(self, mock_get_adapter, client, adapter):
        """translate - 結果は既定の完了ハンドラーでバッファへ書き込まれる"""
        mock_get_adapter.return_value = adapter
        handler = MagicMock(wraps=default_callback)

        with patch('immersive_translate.api.translate.default_callback', handler):
            response = client.post("/api/translate", json={"content": "Hello"})

        assert response.json()["text"] == "Bonjour le monde"
        handler.assert_called_once()
        result, final = handler.call_args.args
        assert isinstance(final["buffer"], MemoryBuffer)
        assert final["buffer"].text == result.text == "Bonjour le monde"
        assert final["position"] == 0

    @patch('immersive_translate.api.translate.get_adapter')
    def test_translate_failure(self, mock_get_adapter, client, adapter, backend):
        """translate - バックエンドエラーはエラー結果として返す"""
        backend.error = APIException("Claude API error: overloaded", status_code=529)
        mock_get_adapter.return_value = adapter

        response = client.post("/api/translate", json={"content": "Hello"})

        assert response.status_code == 200
        data = response.json()
        assert data["is_error"] is True
        assert data["status"] == 529
        assert data["error"] == "Claude API error: overloaded"
        assert data["text"].endswith(FAILURE_NOTICE)

    @patch('immersive_translate.api.translate.get_adapter')
    def test_translate_no_backend(self, mock_get_adapter, client):
        """translate - バックエンド未設定は503"""
        mock_get_adapter.return_value = TranslationRequestAdapter(LLMClient())

        response = client.post("/api/translate", json={"content": "Hello"})

        assert response.status_code == 503
        assert "not available" in response.json()["detail"]

    def test_translate_empty_content(self, client):
        """translate - 空のテキストは400"""
        response = client.post("/api/translate", json={"content": "   "})

        assert response.status_code == 400

    def test_translate_missing_content(self, client):
        """translate - contentなしは422"""
        response = client.post("/api/translate", json={})

        assert response.status_code == 422


@pytest.mark.integration
class TestHealthAPI:
    """ヘルスチェックの統合テスト"""

    @patch('immersive_translate.api.translate.get_llm_client')
    def test_health(self, mock_get_client, client):
        mock_get_client.return_value = LLMClient(
            [FakeBackend("gemini"), FakeBackend("claude")], backend="gemini"
        )

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["configured_backends"] == ["claude", "gemini"]
        assert data["current_backend"] == "gemini"

    @patch('immersive_translate.api.translate.get_llm_client')
    def test_health_without_backends(self, mock_get_client, client):
        mock_get_client.return_value = LLMClient()

        response = client.get("/health")

        assert response.json()["status"] == "degraded"

    def test_api_root(self, client):
        response = client.get("/api")

        assert response.status_code == 200
        assert response.json()["status"] == "running"
