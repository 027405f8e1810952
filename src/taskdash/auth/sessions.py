"""Server-side browser sessions.

Learn: The browser only ever sees an opaque random id in a cookie.
The record behind it lives in a SessionStore: in process memory for
single-node/dev setups, or in Redis when several workers must see the
same sessions. A record holds at most {credential, username}.

BrowserSession is the request-scoped handle on one record. It's passed
explicitly to the session bridge (no thread-locals), so destroying a
session on a failed check is a visible, testable side effect.
"""

import json
import secrets
import time
from typing import Any, Optional, Protocol

import redis.asyncio as aioredis

CREDENTIAL_KEY = "credential"
USERNAME_KEY = "username"


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


class SessionStore(Protocol):
    async def get(self, session_id: str) -> Optional[dict[str, Any]]: ...

    async def set(self, session_id: str, data: dict[str, Any]) -> None: ...

    async def remove(self, session_id: str) -> None: ...


class InMemorySessionStore:
    """Dict-backed store with per-record expiry. One process only."""

    def __init__(self, ttl_seconds: int = 86400):
        self.ttl_seconds = ttl_seconds
        self._records: dict[str, tuple[float, dict[str, Any]]] = {}

    async def get(self, session_id: str) -> Optional[dict[str, Any]]:
        record = self._records.get(session_id)
        if record is None:
            return None
        expires_at, data = record
        if expires_at <= time.monotonic():
            del self._records[session_id]
            return None
        return dict(data)

    async def set(self, session_id: str, data: dict[str, Any]) -> None:
        now = time.monotonic()
        # Abandoned sessions are never read again, so writes evict them.
        self._records = {
            sid: record for sid, record in self._records.items() if record[0] > now
        }
        self._records[session_id] = (now + self.ttl_seconds, dict(data))

    async def remove(self, session_id: str) -> None:
        self._records.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._records)


class RedisSessionStore:
    """Redis-backed store. Records are JSON strings with a TTL.

    Key naming: taskdash:session:{session_id}
    """

    def __init__(self, redis: aioredis.Redis, ttl_seconds: int = 86400):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(session_id: str) -> str:
        return f"taskdash:session:{session_id}"

    async def get(self, session_id: str) -> Optional[dict[str, Any]]:
        raw = await self.redis.get(self._key(session_id))
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, session_id: str, data: dict[str, Any]) -> None:
        await self.redis.set(self._key(session_id), json.dumps(data), ex=self.ttl_seconds)

    async def remove(self, session_id: str) -> None:
        await self.redis.delete(self._key(session_id))


class BrowserSession:
    """One browser's session record for the duration of a request."""

    def __init__(
        self,
        store: SessionStore,
        session_id: Optional[str] = None,
        data: Optional[dict[str, Any]] = None,
    ):
        self.store = store
        self.session_id = session_id if data is not None else None
        self._data = data
        # Cookie bookkeeping for the session middleware
        self.issued = False
        self.destroyed = False

    @classmethod
    async def load(cls, store: SessionStore, session_id: Optional[str]) -> "BrowserSession":
        data = await store.get(session_id) if session_id else None
        return cls(store, session_id, data)

    @property
    def exists(self) -> bool:
        return self._data is not None

    def get(self, key: str, default: Any = None) -> Any:
        if self._data is None:
            return default
        return self._data.get(key, default)

    async def set(self, key: str, value: Any) -> None:
        if self._data is None:
            await self.renew()
        self._data[key] = value
        await self.store.set(self.session_id, self._data)

    async def remove(self, key: str) -> None:
        if self._data is None or key not in self._data:
            return
        del self._data[key]
        await self.store.set(self.session_id, self._data)

    async def renew(self) -> None:
        """Drop the current record (if any) and start an empty one under a new id."""
        if self.session_id:
            await self.store.remove(self.session_id)
        self.session_id = new_session_id()
        self._data = {}
        self.issued = True
        self.destroyed = False
        await self.store.set(self.session_id, self._data)

    async def destroy(self) -> None:
        """Invalidate the whole session, not just its credential."""
        if self.session_id:
            await self.store.remove(self.session_id)
        self.session_id = None
        self._data = None
        self.issued = False
        self.destroyed = True
