from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager


class BuildStack:
    """Keys currently under construction, mapped to their depth.

    A key is present at most once. Entries are removed in the same order they
    were pushed, including when a build fails.
    """

    __slots__ = ("_frames",)

    def __init__(self) -> None:
        self._frames: dict[Hashable, int] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._frames

    def __len__(self) -> int:
        return len(self._frames)

    def push(self, key: Hashable) -> int:
        depth = len(self._frames)
        self._frames[key] = depth
        return depth

    def pop(self, key: Hashable) -> None:
        self._frames.pop(key, None)

    @contextmanager
    def frame(self, key: Hashable) -> Iterator[int]:
        """Hold ``key`` on the stack for the duration of the ``with`` block."""
        depth = self.push(key)
        try:
            yield depth
        finally:
            self.pop(key)

    def keys(self) -> tuple[Hashable, ...]:
        """Return keys ordered by depth, shallowest first."""
        return tuple(sorted(self._frames, key=self._frames.__getitem__))


class ThreadLocalBuildStacks(threading.local):
    """Give every thread its own build stack for one resolver."""

    def __init__(self) -> None:
        self.stack = BuildStack()


__all__ = ["BuildStack", "ThreadLocalBuildStacks"]
