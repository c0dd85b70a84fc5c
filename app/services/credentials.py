"""Ordered API key rotation shared by every upstream that needs it."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Generic, Sequence, TypeVar

import httpx
from pydantic import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CredentialRing(Generic[T]):
    """Try each configured key in order until a call produces a result.

    A call "fails" for a key when it raises a transport/HTTP error, returns a
    malformed payload, or returns ``None``. Empty results are treated as
    failures too so that an exhausted or rate-limited key hands over to the
    next one, mirroring how the public OMDb keys behave.
    """

    def __init__(self, service: str, keys: Sequence[str]):
        self._service = service
        self._keys = tuple(key for key in keys if key)

    @property
    def keys(self) -> tuple[str, ...]:
        return self._keys

    def __bool__(self) -> bool:
        return bool(self._keys)

    async def first_success(
        self,
        call: Callable[[str], Awaitable[T | None]],
        *,
        accept_empty: bool = False,
    ) -> T | None:
        for index, key in enumerate(self._keys, start=1):
            try:
                result = await call(key)
            except (httpx.HTTPError, ValueError, ValidationError) as exc:
                logger.warning(
                    "%s request failed with key %s/%s: %s",
                    self._service,
                    index,
                    len(self._keys),
                    exc,
                )
                continue
            if result is None:
                continue
            if not accept_empty and _is_empty(result):
                continue
            return result
        return None


def _is_empty(value: object) -> bool:
    try:
        return len(value) == 0  # type: ignore[arg-type]
    except TypeError:
        return False
