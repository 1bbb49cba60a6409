"""
FastAPI application factory
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from .config import AppConfig
from .health import HealthStatus, StorageHealthCheck
from .logger import configure_logging
from .postgrest import PostgrestSessionStorage
from .routes import WebhookAuthenticator, create_webhook_router
from .storage import SessionStorage


def create_app(
    config: AppConfig,
    authenticator: WebhookAuthenticator,
    storage: SessionStorage | None = None,
) -> FastAPI:
    """Webhook エンドポイントとヘルスチェックを持つアプリを作成する。

    storage を省略した場合は config.storage から Supabase ストレージを作る。
    設定とストレージはプロセスの生存期間中この 1 インスタンスを使い続ける。
    """
    session_storage = (
        storage if storage is not None else PostgrestSessionStorage(config.storage)
    )
    health_check = StorageHealthCheck(session_storage)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(config.log)
        yield

    app = FastAPI(title="shop-session-store", lifespan=lifespan)
    app.state.session_storage = session_storage
    app.include_router(
        create_webhook_router(session_storage, authenticator),
        prefix="/webhooks",
        tags=["webhooks"],
    )

    @app.get("/health")
    async def health() -> JSONResponse:
        result = await health_check.run()
        status_code = 200 if result.status == HealthStatus.HEALTHY else 503
        body: dict[str, str] = {"status": result.status.value}
        if result.message:
            body["message"] = result.message
        return JSONResponse(body, status_code=status_code)

    return app
