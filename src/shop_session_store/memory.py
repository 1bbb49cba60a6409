"""InMemorySessionStorage 実装"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable

from .models import Session
from .storage import SessionStorage


class InMemorySessionStorage(SessionStorage):
    """テスト用インメモリセッションストレージ。

    保存時・取得時ともにコピーを扱うため、呼び出し側が後から
    オブジェクトを変更しても保存済みの値には影響しない。
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    async def store_session(self, session: Session) -> bool:
        session.validate()
        self._sessions[session.id] = dataclasses.replace(session)
        return True

    async def load_session(self, id: str) -> Session | None:
        session = self._sessions.get(id)
        if session is None:
            return None
        return dataclasses.replace(session)

    async def delete_session(self, id: str) -> bool:
        self._sessions.pop(id, None)
        return True

    async def delete_sessions(self, ids: Iterable[str]) -> bool:
        for id in set(ids):
            self._sessions.pop(id, None)
        return True

    async def find_sessions_by_shop(self, shop: str) -> list[Session]:
        return [
            dataclasses.replace(s) for s in self._sessions.values() if s.shop == shop
        ]

    def all_sessions(self) -> list[Session]:
        return [dataclasses.replace(s) for s in self._sessions.values()]
