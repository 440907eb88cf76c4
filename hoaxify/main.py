"""
FastAPI メインアプリケーション
Hoaxify - ユーザーアカウント管理API
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from datetime import datetime
import logging
import time
from dotenv import load_dotenv

load_dotenv()

from hoaxify.config import settings
from hoaxify.database import engine, Base
from hoaxify.errors import ApiException, ValidationException
from hoaxify.i18n import resolve_language, translate
from hoaxify.auth import router as auth_router
from hoaxify.routers.user import router as user_router
from hoaxify.services.scheduler_service import (
    get_scheduler_status,
    start_scheduler,
    stop_scheduler,
)
import hoaxify.models  # noqa: F401  テーブル定義の登録

# ログ設定
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# ============================================
# ライフサイクル管理
# ============================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """アプリケーションの起動・終了処理"""
    logger.info(f"🚀 {settings.PROJECT_NAME} Backend starting...")
    logger.info(f"Database engine: {engine.url}")

    # DB接続テスト・テーブル作成
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            logger.info("✅ Database connection test successful")
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"❌ Database connection test failed: {e}")

    if settings.SCHEDULER_ENABLED:
        start_scheduler()

    yield

    logger.info(f"👋 {settings.PROJECT_NAME} Backend shutting down...")
    stop_scheduler()
    engine.dispose()


# ============================================
# FastAPI アプリケーション
# ============================================
app = FastAPI(
    title="Hoaxify API",
    description="ユーザー登録・メールによるアカウント有効化・認証・パスワードリセット",
    version=settings.VERSION,
    lifespan=lifespan,
)

# CORS設定
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)


# ============================================
# エラーレスポンス
# ============================================
def error_body(request: Request, code: str) -> dict:
    """共通エラーレスポンス: パス・タイムスタンプ（ミリ秒）・コード・メッセージ"""
    language = resolve_language(request.headers.get("accept-language"))
    return {
        "path": request.url.path,
        "timestamp": int(time.time() * 1000),
        "code": code,
        "message": translate(code, language),
    }


@app.exception_handler(ApiException)
async def api_exception_handler(request: Request, exc: ApiException):
    body = error_body(request, exc.code)
    if isinstance(exc, ValidationException):
        language = resolve_language(request.headers.get("accept-language"))
        body["validation_errors"] = {
            field: translate(code, language) for field, code in exc.errors.items()
        }
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
):
    """JSONとして解釈できないリクエストボディなど"""
    logger.info(f"不正なリクエスト: path={request.url.path}, errors={exc.errors()}")
    return JSONResponse(
        status_code=400, content=error_body(request, "validation_failure")
    )


# ルーティング由来のHTTPエラー（存在しないパス・許可されていないメソッドなど）
HTTP_ERROR_CODES = {
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = HTTP_ERROR_CODES.get(exc.status_code, "http_error")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, code),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """想定外のエラー（詳細はログのみに出力）"""
    logger.exception(f"❌ 想定外のエラー: path={request.url.path}, error={exc}")
    return JSONResponse(status_code=500, content=error_body(request, "internal_error"))


# ルータ登録
app.include_router(auth_router)
app.include_router(user_router)


# ============================================
# 基本エンドポイント
# ============================================
@app.get("/")
async def root():
    """ルートエンドポイント"""
    return {
        "message": f"{settings.PROJECT_NAME} Backend API",
        "version": settings.VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/api/health")
async def health_check():
    """ヘルスチェックエンドポイント"""
    return {
        "status": "ok",
        "service": f"{settings.PROJECT_NAME} Backend",
        "scheduler": get_scheduler_status(),
        "timestamp": datetime.now().isoformat(),
    }


# ============================================
# 開発サーバー起動
# ============================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hoaxify.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info"
    )
