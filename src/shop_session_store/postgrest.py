"""Supabase (PostgREST) セッションストレージ実装"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import httpx
import structlog

from .config import StorageConfig
from .exceptions import SessionStorageError, SessionStorageErrorCodes
from .models import Session
from .storage import SessionStorage

logger = structlog.get_logger(__name__)

# PostgREST が単一行要求に対して 0 行だったときに返すエラーコード
NO_ROWS_ERROR_CODE = "PGRST116"
SINGLE_OBJECT_MEDIA_TYPE = "application/vnd.pgrst.object+json"


def _quote(value: str) -> str:
    """PostgREST の in フィルタ用に値をダブルクォートで囲む。"""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _error_code(resp: httpx.Response) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        code = body.get("code")
        return str(code) if code is not None else None
    return None


class PostgrestSessionStorage(SessionStorage):
    """httpx を使った Supabase REST API 上のセッションストレージ。

    service role キーで認証するため RLS はバイパスされる。
    全リクエストは timeout_seconds で打ち切られ、タイムアウトは
    「見つからない」ではなくストレージエラーとして扱う。
    """

    def __init__(self, config: StorageConfig) -> None:
        self._config = config
        self._path = f"/rest/v1/{config.table}"
        self._headers: dict[str, str] = {
            "apikey": config.service_role_key,
            "Authorization": f"Bearer {config.service_role_key}",
            "Content-Type": "application/json",
        }

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.url.rstrip("/"),
            headers=self._headers,
            timeout=self._config.timeout_seconds,
        )

    async def _send(
        self,
        method: str,
        code: str,
        *,
        params: dict[str, str],
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            async with self._make_client() as client:
                return await client.request(
                    method, self._path, params=params, json=json, headers=headers
                )
        except httpx.TimeoutException as e:
            raise SessionStorageError(
                code=SessionStorageErrorCodes.TIMEOUT,
                message=(
                    f"{method} {self._config.table} timed out after "
                    f"{self._config.timeout_seconds}s"
                ),
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise SessionStorageError(
                code=code,
                message=f"{method} {self._config.table} failed: {e}",
                cause=e,
            ) from e

    def _check_status(self, resp: httpx.Response, code: str, context: str) -> None:
        if resp.status_code >= 400:
            raise SessionStorageError(
                code=code,
                message=f"{context}: HTTP {resp.status_code}: {resp.text}",
            )

    async def store_session(self, session: Session) -> bool:
        session.validate()
        row = session.to_row(tenant_id=self._config.tenant_id)
        try:
            resp = await self._send(
                "POST",
                SessionStorageErrorCodes.STORE_FAILED,
                params={"on_conflict": "id"},
                json=row,
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            )
            self._check_status(
                resp, SessionStorageErrorCodes.STORE_FAILED, f"store_session({session.id})"
            )
        except SessionStorageError as e:
            logger.error(
                "Failed to store session",
                session_id=session.id,
                shop=session.shop,
                has_token=bool(session.access_token),
                error=str(e),
            )
            return False

        logger.info(
            "Stored session",
            session_id=session.id,
            shop=session.shop,
            is_online=session.is_online,
            has_token=bool(session.access_token),
            scope=session.scope,
        )
        return True

    async def load_session(self, id: str) -> Session | None:
        resp = await self._send(
            "GET",
            SessionStorageErrorCodes.LOAD_FAILED,
            params={"select": "*", "id": f"eq.{id}"},
            headers={"Accept": SINGLE_OBJECT_MEDIA_TYPE},
        )
        if resp.status_code == 406 and _error_code(resp) == NO_ROWS_ERROR_CODE:
            return None
        self._check_status(resp, SessionStorageErrorCodes.LOAD_FAILED, f"load_session({id})")
        try:
            return Session.from_row(resp.json())
        except (ValueError, KeyError, TypeError) as e:
            raise SessionStorageError(
                code=SessionStorageErrorCodes.LOAD_FAILED,
                message=f"load_session({id}): malformed row: {e}",
                cause=e,
            ) from e

    async def delete_session(self, id: str) -> bool:
        try:
            resp = await self._send(
                "DELETE",
                SessionStorageErrorCodes.DELETE_FAILED,
                params={"id": f"eq.{id}"},
            )
            self._check_status(
                resp, SessionStorageErrorCodes.DELETE_FAILED, f"delete_session({id})"
            )
        except SessionStorageError as e:
            logger.error("Failed to delete session", session_id=id, error=str(e))
            return False
        return True

    async def delete_sessions(self, ids: Iterable[str]) -> bool:
        unique_ids = sorted(set(ids))
        if not unique_ids:
            return True
        # 1 文の DELETE にまとめることで部分削除を起こさない
        id_filter = ",".join(_quote(i) for i in unique_ids)
        try:
            resp = await self._send(
                "DELETE",
                SessionStorageErrorCodes.DELETE_FAILED,
                params={"id": f"in.({id_filter})"},
            )
            self._check_status(
                resp, SessionStorageErrorCodes.DELETE_FAILED, "delete_sessions"
            )
        except SessionStorageError as e:
            logger.error(
                "Failed to delete sessions", session_ids=unique_ids, error=str(e)
            )
            return False
        return True

    async def find_sessions_by_shop(self, shop: str) -> list[Session]:
        params = {"select": "*", "shop": f"eq.{shop}"}
        if self._config.tenant_id is not None:
            params["tenant_id"] = f"eq.{self._config.tenant_id}"
        resp = await self._send("GET", SessionStorageErrorCodes.QUERY_FAILED, params=params)
        self._check_status(
            resp, SessionStorageErrorCodes.QUERY_FAILED, f"find_sessions_by_shop({shop})"
        )
        try:
            rows = resp.json()
            return [Session.from_row(row) for row in rows or []]
        except (ValueError, KeyError, TypeError) as e:
            raise SessionStorageError(
                code=SessionStorageErrorCodes.QUERY_FAILED,
                message=f"find_sessions_by_shop({shop}): malformed rows: {e}",
                cause=e,
            ) from e
