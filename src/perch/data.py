"""Data sources — where a component's render data comes from.

A ``DataSource`` exposes a synchronous ``snapshot()`` of its current data
and an awaitable ``fetch()`` that refreshes that data from somewhere
remote. The transport behind ``fetch`` is the host's business; once it
returns, ``snapshot()`` reflects the new data.

The render pipeline wraps every fetch in a ``FetchOutcome`` so success
and failure are both explicit; a failed fetch is reported, never
silently left pending.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DataSource(Protocol):
    """Render data contract."""

    def snapshot(self) -> dict[str, Any]: ...

    async def fetch(self, **params: Any) -> None: ...


class MappingSource:
    """An in-memory data source.

    ``fetch`` resolves immediately and changes nothing. Used for
    components embedded through the ``module()`` template helper, which
    receive their context as their data.
    """

    __slots__ = ("_data",)

    # A mapping source never needs fetching before the first render.
    remote = False

    def __init__(self, data: Mapping[str, Any] | None = None, **values: Any) -> None:
        self._data: dict[str, Any] = {**(data or {}), **values}

    def snapshot(self) -> dict[str, Any]:
        return dict(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, values: Mapping[str, Any] | None = None, **more: Any) -> None:
        self._data.update(values or {})
        self._data.update(more)

    async def fetch(self, **params: Any) -> None:
        return None


@dataclass(frozen=True, slots=True)
class FetchOutcome:
    """How a render pipeline's fetch step ended."""

    error: BaseException | None = None

    @classmethod
    def from_future(cls, future: asyncio.Future[Any]) -> FetchOutcome:
        if future.cancelled():
            return cls(error=asyncio.CancelledError())
        return cls(error=future.exception())

    @property
    def ok(self) -> bool:
        return self.error is None


def is_remote(source: DataSource | None) -> bool:
    """Whether *source* has to be fetched before a component can render."""
    if source is None:
        return False
    return bool(getattr(source, "remote", True))
