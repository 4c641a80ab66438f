"""
Pydantic データモデル
"""
from pydantic import BaseModel, Field
from typing import List, Optional


# ============================================================================
# 翻訳関連モデル
# ============================================================================

class TranslateRequest(BaseModel):
    """翻訳リクエスト"""
    content: str
    # True: contentをそのままプロンプトとして送信 / False: テンプレートに埋め込む
    raw_prompt: bool = False


class TranslateResponse(BaseModel):
    """翻訳レスポンス"""
    text: str
    is_error: bool = False
    status: Optional[int] = None
    error: Optional[str] = None
    backend: Optional[str] = None
    model: Optional[str] = None


# ============================================================================
# APIレスポンスモデル
# ============================================================================

class HealthCheckResponse(BaseModel):
    """ヘルスチェックレスポンス"""
    status: str
    configured_backends: List[str] = Field(default_factory=list)
    current_backend: Optional[str] = None
    translate_backend: Optional[str] = None
