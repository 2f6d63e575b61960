"""ViewState — a lifecycle node bound to a route.

Each ViewState class has exactly one long-lived instance per route
manager. Its container is mounted at the document root when the
instance is created and is only ever emptied, never removed, so the
singleton can be entered again on a later navigation.

View states form their own containment hierarchy through ``parent``.
The route manager uses it to classify navigations; entering a view
state enters its ancestors first.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, ClassVar

from perch.lifecycle import Enterable, LifecycleAccess, LifecycleCore

if TYPE_CHECKING:
    from perch.data import DataSource
    from perch.runtime import Runtime


class ViewState(LifecycleAccess):
    """A routed, persistent lifecycle node.

    ``path`` forms:

    - ``"users/{id}"``: joined onto the parent's path with ``/``
    - ``"#users/{id}"``: used as written, without the leading ``#``
    - ``re.compile(r"^raw/(\\d+)$")``: matched as a raw pattern
    """

    name: ClassVar[str] = "view-state"
    path: ClassVar[str | re.Pattern[str] | None] = None
    container_id: ClassVar[str | None] = None
    template: ClassVar[str | None] = None
    template_name: ClassVar[str | None] = None
    tag_name: ClassVar[str | None] = None
    class_name: ClassVar[str] = ""
    placeholder: ClassVar[str] = ""
    skip_render: ClassVar[bool] = False
    sync_on_start: ClassVar[bool] = True

    def __init__(
        self,
        runtime: Runtime,
        *,
        data_source: DataSource | None = None,
        child_config: dict[str, dict[str, Any]] | None = None,
        **options: Any,
    ) -> None:
        self.runtime = runtime
        self.data_source = data_source
        self.child_config = dict(child_config or {})
        self.options = options
        self.logical_parent: ViewState | None = None
        self.core = LifecycleCore(
            self,
            runtime,
            id=self.container_id or runtime.next_id("vs"),
            template=self.template,
            template_name=self.template_name,
            persistent=True,
        )

    # -- Hooks --

    def before_enter(self, *args: str) -> None:
        """Called before rendering starts; inject data or config here."""

    def enter(self, *args: str) -> None:
        """Called once per entry. Output may not exist yet."""

    def transition(self) -> None:
        """In-place visual change used instead of a teardown."""

    def fetch_params(self) -> dict[str, Any]:
        return dict(self.options.get("data") or {})

    def render(self) -> None:
        self.core.render_output()

    # -- Lifecycle --

    def handle_enter(self, *args: str) -> None:
        # Ancestors first; entering an active ancestor is a no-op.
        if self.parent is not None:
            self.parent.handle_enter(*args)
        self.core.handle_enter(args)

    def cleanup(self) -> None:
        self.core.cleanup()

    def destroy(self) -> None:
        self.cleanup()
        self.core.teardown()

    def refresh(self, *args: str) -> None:
        args = args or self.core.last_args
        self.cleanup()
        self.core.handle_enter(args, force=True)

    # -- Hierarchy --

    def is_parent_of(self, other: Enterable | None) -> bool:
        """Whether this view state is a containment ancestor of *other*."""
        node = other.core.parent if other is not None else None
        while node is not None:
            if node is self:
                return True
            node = node.core.parent
        return False

    def is_sibling(self, other: Enterable | None) -> bool:
        if other is None or self.parent is None or other.core.parent is None:
            return False
        return self.parent is other.core.parent

    def is_active(self) -> bool:
        return self.runtime.routes.active_view_state is self

    def full_path(self) -> str | re.Pattern[str]:
        path = self.path
        if isinstance(path, re.Pattern):
            return path
        if path is None:
            path = ""
        if path.startswith("#"):
            return path[1:]

        parent = self.parent
        parent_path = getattr(parent, "path", None) if parent is not None else None
        if isinstance(parent_path, str) and parent_path:
            return "/".join([parent_path.lstrip("#"), path])
        return path

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} {self.id} {self.status.value}>"
