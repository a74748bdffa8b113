"""Double-ended, exact-size iteration over compiled services."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from iana_ports.models import Service


class ServiceIter(Iterator[Service]):
    """Cursor over a run of canonical-array positions.

    ``positions`` is either a ``range`` over the whole array or a bucket
    from one of the indices; services are dereferenced lazily.  The front
    and back cursors meet in the middle, so mixing ``next()`` and
    ``next_back()`` visits every service exactly once.  ``len()`` is the
    number of services not yet yielded.
    """

    __slots__ = ("_services", "_positions", "_front", "_back")

    def __init__(self, services: Sequence[Service], positions: Sequence[int]) -> None:
        self._services = services
        self._positions = positions
        self._front = 0
        self._back = len(positions)

    def __next__(self) -> Service:
        if self._front >= self._back:
            raise StopIteration
        service = self._services[self._positions[self._front]]
        self._front += 1
        return service

    def next_back(self) -> Service:
        """Yield from the back. Raises StopIteration when exhausted."""
        if self._front >= self._back:
            raise StopIteration
        self._back -= 1
        return self._services[self._positions[self._back]]

    def __len__(self) -> int:
        return self._back - self._front

    def __length_hint__(self) -> int:
        return len(self)

    def __reversed__(self) -> ReversedServiceIter:
        return ReversedServiceIter(self)

    def copy(self) -> ServiceIter:
        """Independent cursor at the same position."""
        clone = ServiceIter(self._services, self._positions)
        clone._front = self._front
        clone._back = self._back
        return clone

    __copy__ = copy

    def __repr__(self) -> str:
        return f"ServiceIter(remaining={len(self)})"


class ReversedServiceIter(Iterator[Service]):
    """Back-to-front view sharing its cursors with a ServiceIter."""

    __slots__ = ("_inner",)

    def __init__(self, inner: ServiceIter) -> None:
        self._inner = inner

    def __next__(self) -> Service:
        return self._inner.next_back()

    def next_back(self) -> Service:
        return next(self._inner)

    def __len__(self) -> int:
        return len(self._inner)

    def __length_hint__(self) -> int:
        return len(self._inner)

    def __reversed__(self) -> ServiceIter:
        return self._inner

    def copy(self) -> ReversedServiceIter:
        return ReversedServiceIter(self._inner.copy())

    __copy__ = copy

    def __repr__(self) -> str:
        return f"ReversedServiceIter(remaining={len(self)})"
