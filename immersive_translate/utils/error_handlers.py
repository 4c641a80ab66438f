"""
エラーハンドリング
"""
from fastapi import HTTPException, status


def raise_bad_request(message: str):
    """400 Bad Requestを発生させる"""
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=message
    )


def raise_service_unavailable(message: str):
    """503 Service Unavailableを発生させる（LLM未設定時）"""
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=message
    )
