"""Process-wide cache of secondary id to canonical id resolutions."""

from __future__ import annotations

from typing import Awaitable, Callable

from ..models import placeholder_id

CacheKey = tuple[str, str, str]

_MISSING = object()
UNRESOLVED = object()


class IdentifierCache:
    """Remember resolved canonical ids per ``(service, secondary id, kind)``.

    Negative answers are cached as ``None`` so a title without a canonical
    id is only looked up once per process.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, str | None] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: CacheKey) -> str | None:
        return self._entries.get(key)

    def set(self, key: CacheKey, value: str | None) -> None:
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()

    async def resolve(
        self,
        service: str,
        secondary_id: object,
        kind: str,
        lookup: Callable[[], Awaitable[object]],
    ) -> str:
        """Return the canonical id, or a ``service:id`` placeholder.

        ``lookup`` returns the canonical id, ``None`` when the upstream
        definitively has none, or ``UNRESOLVED`` when the lookup itself
        failed; failures are not cached.
        """

        key: CacheKey = (service, str(secondary_id), kind)
        cached = self._entries.get(key, _MISSING)
        if cached is _MISSING:
            result = await lookup()
            if result is UNRESOLVED:
                return placeholder_id(service, secondary_id)
            cached = result if isinstance(result, str) and result else None
            self._entries[key] = cached
        if isinstance(cached, str):
            return cached
        return placeholder_id(service, secondary_id)

