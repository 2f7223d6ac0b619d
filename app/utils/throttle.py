from app.core.cache import CacheBackend, cache
from app.core.config import settings


class ViolationThrottle:
    """Drops repeats of the same violation type on the same session inside a short window,
    so a held key or a flapping focus event does not flood the ledger."""

    def __init__(self, backend: CacheBackend, window_seconds: int):
        self.backend = backend
        self.window_seconds = window_seconds

    def _key(self, session_id: int, violation_type: str) -> str:
        return f"violation-throttle:{session_id}:{violation_type}"

    async def allow(self, session_id: int, violation_type: str) -> bool:
        if self.window_seconds <= 0:
            return True
        return await self.backend.add(self._key(session_id, violation_type), 1, ttl=self.window_seconds)


violation_throttle = ViolationThrottle(cache, settings.VIOLATION_THROTTLE_SECONDS)
