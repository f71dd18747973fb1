"""
Fixed-capacity slot pool for reusable entity records.

Records are preallocated once and addressed by integer handles. Free slots
sit on a stack, so acquire and release are both O(1). The active set keeps
acquisition order, which is the order objects are drawn in.
"""

from __future__ import annotations

from typing import Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class SlotPool(Generic[T]):
    """Arena of `capacity` records with a free list of handles"""

    def __init__(self, factory: Callable[[], T], reset: Callable[[T], None], capacity: int):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._reset = reset
        self._slots: List[T] = [factory() for _ in range(capacity)]
        # popped from the end, so handle 0 is handed out first
        self._free: List[int] = list(range(capacity - 1, -1, -1))
        self._active: Dict[int, None] = {}

    @property
    def capacity(self) -> int:
        return len(self._slots)

    @property
    def free_count(self) -> int:
        return len(self._free)

    def __len__(self) -> int:
        return len(self._active)

    def __contains__(self, handle: int) -> bool:
        return handle in self._active

    def acquire(self) -> Optional[int]:
        """Take a free slot; returns its handle, or None when the pool is exhausted"""
        if not self._free:
            return None
        handle = self._free.pop()
        self._active[handle] = None
        return handle

    def get(self, handle: int) -> T:
        if handle not in self._active:
            raise KeyError(f"handle {handle} is not active")
        return self._slots[handle]

    def release(self, handle: int) -> bool:
        """Reset the record and return its slot; False if it was not active"""
        if handle not in self._active:
            return False
        del self._active[handle]
        self._reset(self._slots[handle])
        self._free.append(handle)
        return True

    def release_all(self) -> None:
        for handle in list(self._active):
            self.release(handle)

    def handles(self) -> List[int]:
        """Snapshot of active handles; safe to release while iterating it"""
        return list(self._active)

    def active(self) -> Iterator[Tuple[int, T]]:
        for handle in self.handles():
            if handle in self._active:
                yield handle, self._slots[handle]

    def values(self) -> List[T]:
        return [self._slots[h] for h in self._active]

    def stats(self) -> Dict[str, int]:
        return {
            "active": len(self._active),
            "free": len(self._free),
            "capacity": len(self._slots),
        }
