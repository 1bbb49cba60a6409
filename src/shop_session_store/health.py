"""Session storage health check."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from .exceptions import SessionStorageError
from .storage import SessionStorage

# 存在しない前提の id。見つからないことは正常応答として扱う。
PROBE_SESSION_ID = "__health_check__"


class HealthStatus(str, Enum):
    """Health status enum."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthResponse:
    """Health check result."""

    status: HealthStatus
    message: str | None = None
    timestamp: datetime | None = None


class StorageHealthCheck:
    """Checks that the session storage backend answers reads."""

    name = "session_storage"

    def __init__(self, storage: SessionStorage) -> None:
        self._storage = storage

    async def check(self) -> None:
        """Raises SessionStorageError when the backend is unreachable."""
        await self._storage.load_session(PROBE_SESSION_ID)

    async def run(self) -> HealthResponse:
        now = datetime.now(timezone.utc)
        try:
            await self.check()
        except SessionStorageError as e:
            return HealthResponse(
                status=HealthStatus.UNHEALTHY, message=str(e), timestamp=now
            )
        return HealthResponse(status=HealthStatus.HEALTHY, timestamp=now)
