"""
FastAPI メインアプリケーション
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from immersive_translate.config import settings
from immersive_translate.api import translate
from immersive_translate.models.schemas import HealthCheckResponse
from immersive_translate.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """アプリケーションライフサイクル管理"""
    setup_logging(settings)
    logger.info("Starting Immersive Translate API...")

    yield

    logger.info("Shutting down Immersive Translate API...")


app = FastAPI(
    title="Immersive Translate API",
    description="LLMバックエンドへの翻訳リクエストアダプター",
    version="1.0.0",
    lifespan=lifespan
)

# CORS設定
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api")
async def api_root():
    """API ルートエンドポイント"""
    return {
        "message": "Immersive Translate API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """ヘルスチェック"""
    client = translate.get_llm_client()
    return HealthCheckResponse(
        status="healthy" if client.is_available() else "degraded",
        configured_backends=sorted(client.backends),
        current_backend=client.backend,
        translate_backend=settings.IMMERSIVE_TRANSLATE_BACKEND,
    )


app.include_router(translate.router, prefix="/api", tags=["translate"])


def run():
    """uvicornでサーバーを起動"""
    import uvicorn
    uvicorn.run(
        "immersive_translate.main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT
    )


if __name__ == "__main__":
    run()
