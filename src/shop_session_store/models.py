"""セッションデータモデル"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

SCOPE_SEPARATOR = ","


def join_scopes(scopes: list[str]) -> str:
    """スコープ一覧をカンマ区切り文字列に変換する。

    例: ["read_products", "write_products"] -> "read_products,write_products"
    """
    return SCOPE_SEPARATOR.join(scopes)


def split_scopes(scope: str | None) -> list[str]:
    """カンマ区切りのスコープ文字列を一覧に分解する。空要素は除外。"""
    if not scope:
        return []
    return [s.strip() for s in scope.split(SCOPE_SEPARATOR) if s.strip()]


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


@dataclass
class Session:
    """ショップ 1 件へのインストール 1 件に対応する OAuth セッション。

    オンラインセッションはユーザー単位で有効期限を持ち、
    オフラインセッションはアプリ単位で期限を持たない（expires_at は None）。
    access_token は OAuth 開始フェーズではまだ存在しない。
    """

    id: str
    shop: str
    state: str | None = None
    is_online: bool = False
    scope: str | None = None
    expires_at: datetime | None = None
    access_token: str | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """永続化に必要な識別子が揃っているか確認する。"""
        if not self.id:
            raise ValueError("session id cannot be empty")
        if not self.shop:
            raise ValueError("session shop cannot be empty")

    @property
    def scopes(self) -> list[str]:
        return split_scopes(self.scope)

    def is_expired(self, within_seconds: float = 0) -> bool:
        """within_seconds 秒以内に期限切れになるなら True。オフラインは常に False。"""
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at - timedelta(seconds=within_seconds) < datetime.now(UTC)

    def is_active(self, scopes: str | list[str]) -> bool:
        """API 呼び出しに使えるか確認する。

        アクセストークンがあり、期限切れでなく、付与スコープが要求スコープと
        一致する場合に True。スコープの順序は問わない。
        """
        required = split_scopes(scopes) if isinstance(scopes, str) else scopes
        return (
            bool(self.access_token)
            and not self.is_expired()
            and set(self.scopes) == {s.strip() for s in required if s.strip()}
        )

    def to_row(self, tenant_id: str | None = None) -> dict[str, Any]:
        """テーブル行（snake_case カラム）に変換する。全カラムを含む。"""
        row: dict[str, Any] = {
            "id": self.id,
            "shop": self.shop,
            "state": self.state,
            "is_online": self.is_online,
            "scope": self.scope,
            "expires_at": _format_timestamp(self.expires_at),
            "access_token": self.access_token,
        }
        if tenant_id is not None:
            row["tenant_id"] = tenant_id
        return row

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Session:
        """テーブル行から Session を生成する。"""
        return cls(
            id=row["id"],
            shop=row["shop"],
            state=row.get("state"),
            is_online=bool(row.get("is_online", False)),
            scope=row.get("scope"),
            expires_at=_parse_timestamp(row.get("expires_at")),
            access_token=row.get("access_token"),
        )
