"""Application layer - Resolution path tracking."""

import threading
from typing import List

from bindgraph.domain import CyclicDependencyError


class CircularDependencyDetector:
    """Per-thread record of the class nodes currently being resolved.

    The injector pushes a node before selecting and constructing it and pops
    it afterwards. Reaching a node that is already on the path means the
    configuration is cyclic. The path doubles as the resolution chain carried
    by resolution errors.

    Attributes:
        _local: Holds the ``path`` list of the calling thread.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    @property
    def _path(self) -> List[str]:
        path = getattr(self._local, "path", None)
        if path is None:
            path = self._local.path = []
        return path

    def push(self, name: str) -> None:
        """Enter ``name`` on the calling thread's path.

        Raises:
            CyclicDependencyError: If ``name`` is already on the path. The
                error's chain ends with the repeated name and its
                ``dependency_chain`` holds only the cycle.
        """
        path = self._path
        if name in path:
            raise CyclicDependencyError(path + [name], path[path.index(name) :] + [name])
        path.append(name)

    def pop(self) -> None:
        path = self._path
        if path:
            path.pop()

    def current_chain(self) -> List[str]:
        """Snapshot of the path, outermost request first."""
        return list(self._path)

    def clear(self) -> None:
        """Forget the calling thread's path."""
        self._local.path = []
