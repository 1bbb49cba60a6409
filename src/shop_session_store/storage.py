"""SessionStorage 抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from .models import Session


class SessionStorage(ABC):
    """セッションストレージ抽象基底クラス。

    見つからないことはエラーではない。書き込み・削除系は成否を bool で返し、
    読み込み系はバックエンド障害時に SessionStorageError を送出する。
    """

    @abstractmethod
    async def store_session(self, session: Session) -> bool:
        """id をキーにセッションを upsert する。行全体を置き換え、マージはしない。"""
        ...

    @abstractmethod
    async def load_session(self, id: str) -> Session | None:
        """id に対応するセッションを取得する。存在しなければ None。"""
        ...

    @abstractmethod
    async def delete_session(self, id: str) -> bool:
        """セッションを削除する。存在しない id の削除も成功扱い。"""
        ...

    @abstractmethod
    async def delete_sessions(self, ids: Iterable[str]) -> bool:
        """複数セッションを一括削除する。空の入力は何もせず成功。"""
        ...

    @abstractmethod
    async def find_sessions_by_shop(self, shop: str) -> list[Session]:
        """ショップに属する全セッションを返す。順序は保証しない。"""
        ...
