"""Document — where component output is attached.

The visible document is an external collaborator. Perch only needs to
mount placeholder containers, replace or empty a container's content,
remove a container, and ask whether a container is attached to the
visible tree. ``MemoryDocument`` implements that contract in memory and
is what the runtime uses unless a host supplies its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class Document(Protocol):
    """Container attachment contract."""

    def mount(self, container_id: str, *, parent_id: str | None = None, content: str = "") -> None: ...

    def is_attached(self, container_id: str) -> bool: ...

    def set_content(self, container_id: str, content: str) -> None: ...

    def empty(self, container_id: str) -> None: ...

    def remove(self, container_id: str) -> None: ...

    def content(self, container_id: str) -> str | None: ...


@dataclass(slots=True)
class _Mount:
    parent_id: str | None
    content: str = ""
    children: list[str] = field(default_factory=list)


class MemoryDocument:
    """An in-memory tree of containers keyed by id.

    A container mounted without a parent hangs off the document root and
    is attached. A nested container is attached while its whole parent
    chain is. Replacing or emptying a container's content discards the
    containers mounted inside it, the same way replacing markup discards
    the elements it contained.
    """

    __slots__ = ("_mounts",)

    def __init__(self) -> None:
        self._mounts: dict[str, _Mount] = {}

    def mount(self, container_id: str, *, parent_id: str | None = None, content: str = "") -> None:
        if container_id in self._mounts:
            self._detach(container_id)
        self._mounts[container_id] = _Mount(parent_id=parent_id, content=content)
        if parent_id is not None and parent_id in self._mounts:
            self._mounts[parent_id].children.append(container_id)

    def is_attached(self, container_id: str) -> bool:
        mount = self._mounts.get(container_id)
        while mount is not None:
            if mount.parent_id is None:
                return True
            mount = self._mounts.get(mount.parent_id)
        return False

    def set_content(self, container_id: str, content: str) -> None:
        mount = self._mounts.get(container_id)
        if mount is None:
            self.mount(container_id, content=content)
            return
        self._drop_children(mount)
        mount.content = content

    def empty(self, container_id: str) -> None:
        mount = self._mounts.get(container_id)
        if mount is not None:
            self._drop_children(mount)
            mount.content = ""

    def remove(self, container_id: str) -> None:
        if container_id in self._mounts:
            self._detach(container_id)

    def content(self, container_id: str) -> str | None:
        mount = self._mounts.get(container_id)
        return None if mount is None else mount.content

    def __contains__(self, container_id: object) -> bool:
        return container_id in self._mounts

    def _detach(self, container_id: str) -> None:
        mount = self._mounts.pop(container_id)
        self._drop_children(mount)
        parent = self._mounts.get(mount.parent_id) if mount.parent_id else None
        if parent is not None and container_id in parent.children:
            parent.children.remove(container_id)

    def _drop_children(self, mount: _Mount) -> None:
        children, mount.children = mount.children, []
        for child_id in children:
            child = self._mounts.pop(child_id, None)
            if child is not None:
                self._drop_children(child)
