"""
Webhook API endpoints
"""

from __future__ import annotations

from typing import Protocol

import structlog
from fastapi import APIRouter, Request, Response

from .exceptions import SessionStorageError
from .storage import SessionStorage
from .webhooks import WebhookContext, handle_app_uninstalled, handle_scopes_update

logger = structlog.get_logger(__name__)


class WebhookAuthenticator(Protocol):
    """webhook リクエストを検証してコンテキストを取り出すプロトコル。

    署名検証はこの実装側の責務。検証に失敗した場合は
    fastapi.HTTPException を送出すること。
    """

    async def authenticate_webhook(self, request: Request) -> WebhookContext: ...


def create_webhook_router(
    storage: SessionStorage, authenticator: WebhookAuthenticator
) -> APIRouter:
    """ライフサイクル webhook のルーターを作成する。

    ハンドラー内のストレージエラーはログに残し、レスポンスは 200 を返す。
    失敗を返すとプラットフォームが再配信を繰り返すため。
    """
    router = APIRouter()

    @router.post("/app/scopes_update")
    async def scopes_update(request: Request) -> Response:
        ctx = await authenticator.authenticate_webhook(request)
        try:
            await handle_scopes_update(storage, ctx)
        except SessionStorageError as e:
            logger.error(
                "Webhook handler failed", topic=ctx.topic, shop=ctx.shop, error=str(e)
            )
        return Response(status_code=200)

    @router.post("/app/uninstalled")
    async def app_uninstalled(request: Request) -> Response:
        ctx = await authenticator.authenticate_webhook(request)
        try:
            await handle_app_uninstalled(storage, ctx)
        except SessionStorageError as e:
            logger.error(
                "Webhook handler failed", topic=ctx.topic, shop=ctx.shop, error=str(e)
            )
        return Response(status_code=200)

    return router
