"""Component — a reusable lifecycle node.

Subclasses describe themselves with class attributes and override the
hooks they need::

    class StreamItem(Component):
        name = "stream-item"
        tag_name = "li"
        class_name = "stream-item"
        template = "<p>{{ text }}</p>{{ module('stream-picture', pic=pic) }}"

        def before_enter(self, *args):
            self.data_source.set(action_list={"repost": True})

A component renders into the container whose id is its own ``id``.
Something has to mount that container: the ``module()`` helper inside a
parent's template, ``Component.append()``, or the host.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from perch.lifecycle import Enterable, LifecycleAccess, LifecycleCore

if TYPE_CHECKING:
    from perch.data import DataSource
    from perch.runtime import Runtime


class Component(LifecycleAccess):
    """A lifecycle node that owns an ordered set of child components."""

    name: ClassVar[str] = "component"
    template: ClassVar[str | None] = None
    template_name: ClassVar[str | None] = None
    tag_name: ClassVar[str | None] = None
    class_name: ClassVar[str] = ""
    placeholder: ClassVar[str] = ""

    # Never render or enter; the host manages this node's output.
    skip_render: ClassVar[bool] = False
    # When False, a remote data source is not fetched before the first render.
    sync_on_start: ClassVar[bool] = True

    def __init__(
        self,
        runtime: Runtime,
        *,
        id: str | None = None,
        data_source: DataSource | None = None,
        child_config: dict[str, dict[str, Any]] | None = None,
        **options: Any,
    ) -> None:
        self.runtime = runtime
        self.data_source = data_source
        self.child_config = dict(child_config or {})
        self.options = options
        self.core = LifecycleCore(
            self,
            runtime,
            id=id or runtime.next_id(),
            template=self.template,
            template_name=self.template_name,
        )

    # -- Hooks --

    def before_enter(self, *args: str) -> None:
        """Called before rendering starts; inject data or config here."""

    def enter(self, *args: str) -> None:
        """Called once per entry. Output may not exist yet."""

    def fetch_params(self) -> dict[str, Any]:
        return dict(self.options.get("data") or {})

    def render(self) -> None:
        self.core.render_output()

    # -- Lifecycle --

    def handle_enter(self, *args: str) -> None:
        self.core.handle_enter(args)

    def append(self, child: Enterable, *args: str) -> Component:
        """Mount *child* inside this component's container and enter it."""
        self.runtime.document.mount(child.core.id, parent_id=self.id, content=child.placeholder)
        self.register_child(child)
        child.handle_enter(*args)
        return self

    def cleanup(self) -> None:
        self.core.cleanup()

    def destroy(self) -> None:
        self.cleanup()
        self.core.teardown()

    def refresh(self, *args: str) -> None:
        """Tear down, render from scratch and enter again."""
        args = args or self.core.last_args
        self.cleanup()
        self.core.handle_enter(args, force=True)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} {self.id} {self.status.value}>"
