"""アプリのライフサイクル webhook ハンドラー

Shopify の webhook は少なくとも 1 回配信され、順序も保証されない。
どちらのハンドラーも重複配信・遅延配信に対して冪等に動作する。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import structlog

from .exceptions import SessionStorageError, SessionStorageErrorCodes
from .models import Session, join_scopes
from .storage import SessionStorage

logger = structlog.get_logger(__name__)


class WebhookTopic(StrEnum):
    """処理対象の webhook トピック。"""

    APP_SCOPES_UPDATE = "APP_SCOPES_UPDATE"
    APP_UNINSTALLED = "APP_UNINSTALLED"


@dataclass
class WebhookContext:
    """認証済み webhook から取り出した情報。

    session はセッションが既に削除済みの場合 None になる。
    """

    shop: str
    topic: str
    session: Session | None = None
    payload: dict[str, Any] = field(default_factory=dict)


async def handle_scopes_update(storage: SessionStorage, ctx: WebhookContext) -> bool:
    """付与スコープの変更をセッションに反映する。

    スコープは payload["current"] で丸ごと置き換える（マージしない）。

    Returns:
        セッションを保存した場合 True、対象セッションがなく何もしなかった場合 False

    Raises:
        SessionStorageError: 保存に失敗した場合
    """
    logger.info("Received webhook", topic=ctx.topic, shop=ctx.shop)
    if ctx.session is None:
        return False

    current = ctx.payload.get("current")
    if not isinstance(current, list):
        logger.warning(
            "Scopes update payload has no scope list", shop=ctx.shop, payload=ctx.payload
        )
        return False

    session = ctx.session
    session.scope = join_scopes([str(s) for s in current])
    if not await storage.store_session(session):
        raise SessionStorageError(
            code=SessionStorageErrorCodes.STORE_FAILED,
            message=f"Failed to store updated scopes for {ctx.shop}",
        )
    logger.info("Updated scopes", shop=ctx.shop, scope=session.scope)
    return True


async def handle_app_uninstalled(storage: SessionStorage, ctx: WebhookContext) -> int:
    """ショップの全セッション（オンライン・オフライン問わず）を削除する。

    インストール状態はセッション単位ではなくショップ単位のため、
    payload のセッションだけでなくショップに属するものをすべて消す。

    Returns:
        削除したセッション数。再配信時は 0。

    Raises:
        SessionStorageError: 検索または削除に失敗した場合
    """
    logger.info("Received webhook", topic=ctx.topic, shop=ctx.shop)
    # 既に処理済みの再配信ではセッションが残っていない
    if ctx.session is None:
        return 0

    sessions = await storage.find_sessions_by_shop(ctx.shop)
    if not sessions:
        return 0

    if not await storage.delete_sessions(s.id for s in sessions):
        raise SessionStorageError(
            code=SessionStorageErrorCodes.DELETE_FAILED,
            message=f"Failed to delete {len(sessions)} sessions for {ctx.shop}",
        )
    logger.info("Deleted sessions", shop=ctx.shop, count=len(sessions))
    return len(sessions)
