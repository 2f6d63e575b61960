"""Component lifecycle — the state machine shared by components and view states.

Every lifecycle node embeds one ``LifecycleCore``. The core owns the
node's status, entry flag, children, containment parent and event
channels, and runs the render pipeline::

    unrendered ──handle_enter──> rendering ──gate opens──> ready ──children loaded──> loaded
        ^                                                                           │
        └──────────────────────────────── cleanup ──────────────────────────────────┘

The node itself (``Component`` or ``ViewState``) supplies the hooks the
core calls: ``before_enter``, ``enter``, ``render`` and ``cleanup``.
Those hooks are the whole ``Enterable`` capability; the core never
needs to know which kind of node it is driving, apart from whether the
node's container persists after destroy.

Render pipeline:

1. Status becomes ``rendering``.
2. If the node has a remote data source, its ``fetch()`` is spawned on
   the scheduler. A failure ends the pipeline: status drops back to
   ``unrendered`` and the node emits ``error``.
3. A ``ReadinessGate`` waits until the node's container is attached.
4. The node renders, status becomes ``ready``, ``ready`` is emitted and
   the loaded check runs.
5. Every registered child that is not active yet is entered.

``cleanup()`` starts a new render generation. Any pipeline still in
flight from an earlier generation finishes without touching the node.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Callable
from enum import Enum
from functools import partial
from typing import TYPE_CHECKING, Any, Protocol

from perch.data import DataSource, FetchOutcome, MappingSource, is_remote
from perch.errors import ConfigurationError, FetchError, ParentAlreadySet
from perch.events import Channel, Loaded, Ready, RenderFailed
from perch.readiness import NamedCheck, ReadinessGate
from perch.registry import OrderedRegistry
from perch.templating import RenderFn, safe

if TYPE_CHECKING:
    import asyncio

    from kida.template import Markup

    from perch.runtime import Runtime

logger = logging.getLogger("perch.lifecycle")


class Status(Enum):
    """How far a node's render has progressed."""

    UNRENDERED = "unrendered"
    RENDERING = "rendering"
    READY = "ready"
    LOADED = "loaded"


class Enterable(Protocol):
    """What a lifecycle node exposes to its core, its parent and the router."""

    name: str
    core: LifecycleCore
    data_source: DataSource | None
    child_config: dict[str, dict[str, Any]]
    skip_render: bool
    sync_on_start: bool
    tag_name: str | None
    class_name: str
    placeholder: str

    def handle_enter(self, *args: str) -> None: ...

    def before_enter(self, *args: str) -> None: ...

    def enter(self, *args: str) -> None: ...

    def fetch_params(self) -> dict[str, Any]: ...

    def render(self) -> None: ...

    def cleanup(self) -> None: ...

    def destroy(self) -> None: ...


class LifecycleCore:
    """Lifecycle state and behaviour for one node."""

    def __init__(
        self,
        owner: Enterable,
        runtime: Runtime,
        *,
        id: str,
        template: str | None = None,
        template_name: str | None = None,
        persistent: bool = False,
    ) -> None:
        self.owner = owner
        self.runtime = runtime
        self.id = id
        self.persistent = persistent
        self.status = Status.UNRENDERED
        self.active = False
        self.parent: Enterable | None = None
        self.children: OrderedRegistry[str, Enterable] = OrderedRegistry()
        self.last_args: tuple[str, ...] = ()

        self.ready: Channel[Ready] = Channel("ready")
        self.load: Channel[Loaded] = Channel("load")
        self.error: Channel[RenderFailed] = Channel("error")

        if template is not None and template_name is not None:
            msg = f"{owner.name} declares both template and template_name"
            raise ConfigurationError(msg)
        self._template = template
        self._template_name = template_name
        self._render_fn: RenderFn | None = None
        self._subscriptions: list[Callable[[], None]] = []
        self._embedded: list[Enterable] = []
        self._generation = 0
        self.gate: ReadinessGate | None = None

    # -- Entry --

    def handle_enter(self, args: tuple[str, ...], *, force: bool = False) -> None:
        """Enter the node once; render it first if it has not been rendered."""
        owner = self.owner
        if self.active or owner.skip_render:
            return

        owner.before_enter(*args)
        if force or self.status is Status.UNRENDERED:
            self.start_render(partial(self.enter_children, args))

        # May run before the output exists; hooks must not rely on it.
        owner.enter(*args)
        self.active = True
        self.last_args = args
        logger.debug("Entered %s %s", owner.name, self.id)

    def enter_children(self, args: tuple[str, ...]) -> None:
        for child in self.children.filter(lambda child: not child.core.active):
            child.handle_enter(*args)

    # -- Render pipeline --

    def start_render(self, on_rendered: Callable[[], None]) -> None:
        self._generation += 1
        generation = self._generation
        self.status = Status.RENDERING

        source = self.owner.data_source
        if source is not None and self.owner.sync_on_start and is_remote(source):
            self.runtime.scheduler.spawn(
                source.fetch(**self.owner.fetch_params()),
                partial(self._fetched, generation, on_rendered),
            )
        else:
            self._await_container(generation, on_rendered)

    def _fetched(
        self,
        generation: int,
        on_rendered: Callable[[], None],
        future: asyncio.Future[Any],
    ) -> None:
        if generation != self._generation:
            logger.debug("Dropping stale fetch for %s %s", self.owner.name, self.id)
            return
        outcome = FetchOutcome.from_future(future)
        if not outcome.ok:
            self._fail(outcome)
            return
        self._await_container(generation, on_rendered)

    def _await_container(self, generation: int, on_rendered: Callable[[], None]) -> None:
        self.gate = ReadinessGate(
            [NamedCheck("attached", self.id)],
            partial(self._rendered, generation, on_rendered),
            scheduler=self.runtime.scheduler,
            checks=self.runtime.checks,
            interval=self.runtime.config.poll_interval,
        )

    def _rendered(self, generation: int, on_rendered: Callable[[], None]) -> None:
        if generation != self._generation:
            logger.debug("Dropping stale render for %s %s", self.owner.name, self.id)
            return
        self.owner.render()
        self.status = Status.READY
        self.ready.emit(Ready(self.id, self.owner.name))
        self.check_loaded()
        on_rendered()

    def _fail(self, outcome: FetchOutcome) -> None:
        cause = outcome.error
        error = FetchError(self.id, str(cause) if cause is not None else "")
        error.__cause__ = cause
        self.status = Status.UNRENDERED
        logger.error(
            "Render pipeline for %s %s failed", self.owner.name, self.id,
            exc_info=cause,
        )
        self.error.emit(RenderFailed(self.id, self.owner.name, error))

    def render_output(self) -> None:
        """Render the current data snapshot into the node's container."""
        render = self._resolve_template()
        self._embedded = []
        markup = render(self.context()) if render is not None else ""

        document = self.runtime.document
        document.set_content(self.id, markup)
        for child in self._embedded:
            document.mount(child.core.id, parent_id=self.id, content=child.placeholder)
        self._embedded = []

    def context(self) -> dict[str, Any]:
        source = self.owner.data_source
        data = source.snapshot() if source is not None else {}
        data["module"] = self.embed
        return data

    def _resolve_template(self) -> RenderFn | None:
        if self._render_fn is None:
            renderer = self.runtime.renderer
            if self._template_name is not None:
                self._render_fn = renderer.load(self._template_name)
            elif self._template is not None:
                self._render_fn = renderer.compile(self._template)
        return self._render_fn

    # -- Loaded propagation --

    def check_loaded(self) -> None:
        """Mark the node loaded once it and every registered child are."""
        if self.status is not Status.READY:
            return
        if any(child.core.status is not Status.LOADED for child in self.children):
            return
        self.status = Status.LOADED
        logger.debug("Loaded %s %s", self.owner.name, self.id)
        self.load.emit(Loaded(self.id, self.owner.name))
        if self.parent is not None:
            self.parent.core.check_loaded()

    def _unload(self) -> None:
        if self.status is Status.LOADED:
            self.status = Status.READY
            if self.parent is not None:
                self.parent.core._unload()

    # -- Children --

    def set_parent(self, parent: Enterable) -> None:
        if self.parent is parent:
            return
        if self.parent is not None:
            msg = f"{self.owner.name} {self.id} already belongs to {self.parent.core.id}"
            raise ParentAlreadySet(msg)
        self.parent = parent

    def register_child(self, child: Enterable | str) -> Enterable:
        if isinstance(child, str):
            child = self.runtime.get_module(child, **self.owner.child_config.get(child, {}))
        child.core.set_parent(self.owner)
        self.children.add(child.core.id, child)
        if child.core.status is not Status.LOADED:
            self._unload()
        return child

    def embed(self, name: str, **context: Any) -> Markup:
        """Template helper: register a named module and return its placeholder."""
        child = self.runtime.get_module(name, **self.owner.child_config.get(name, {}))
        if child.data_source is None:
            child.data_source = MappingSource(context)
        self.register_child(child)
        self._embedded.append(child)
        return safe(child.core.prepare_el())

    def prepare_el(self) -> str:
        """Markup for an empty container this node can later render into."""
        owner = self.owner
        tag = owner.tag_name or self.runtime.config.default_tag
        classes = " ".join(filter(None, [owner.name, owner.class_name]))
        return (
            f'<{tag} class="{html.escape(classes)}" id="{html.escape(self.id)}">'
            f"{owner.placeholder}</{tag}>"
        )

    # -- Subscriptions --

    def listen(self, channel: Channel[Any], listener: Callable[[Any], None]) -> None:
        """Subscribe *listener* until the next cleanup."""
        self._subscriptions.append(channel.subscribe(listener))

    def when_ready(self, callback: Callable[[], None]) -> None:
        if self.status in (Status.READY, Status.LOADED):
            callback()
            return
        self.ready.once(lambda _event: callback())

    # -- Teardown --

    def cleanup(self) -> None:
        """Forget entry and render state and destroy every child.

        The node's own output stays where it is.
        """
        self.active = False
        self.status = Status.UNRENDERED
        self._generation += 1
        self.gate = None

        subscriptions, self._subscriptions = self._subscriptions, []
        for unsubscribe in subscriptions:
            unsubscribe()

        for child in self.children:
            child.destroy()
        self.children.clear()

    def teardown(self) -> None:
        """Finish a destroy after the owner's cleanup has run."""
        self.ready.clear()
        self.load.clear()
        self.error.clear()

        if self.persistent:
            self.runtime.document.empty(self.id)
        else:
            self.runtime.document.remove(self.id)

        if self.parent is not None:
            self.parent.core.children.remove(self.id)
            self.parent.core.check_loaded()
        logger.debug("Destroyed %s %s", self.owner.name, self.id)



class LifecycleAccess:
    """Read access and plumbing shared by every node that embeds a core.

    Holds no state of its own and defines no hooks; nodes still decide
    how they enter, clean up and destroy.
    """

    core: LifecycleCore

    @property
    def id(self) -> str:
        return self.core.id

    @property
    def status(self) -> Status:
        return self.core.status

    @property
    def active(self) -> bool:
        return self.core.active

    @property
    def parent(self) -> Enterable | None:
        return self.core.parent

    @property
    def children(self) -> OrderedRegistry[str, Enterable]:
        return self.core.children

    @property
    def on_ready(self) -> Channel[Ready]:
        return self.core.ready

    @property
    def on_load(self) -> Channel[Loaded]:
        return self.core.load

    @property
    def on_error(self) -> Channel[RenderFailed]:
        return self.core.error

    def register_child(self, child: Enterable | str) -> Enterable:
        """Adopt *child*, or build the module registered under that name."""
        return self.core.register_child(child)

    def get_child(self, id: str) -> Enterable | None:
        return self.core.children.get(id)

    def prepare_el(self) -> str:
        return self.core.prepare_el()

    def when_ready(self, callback: Callable[[], None]) -> None:
        self.core.when_ready(callback)

    def listen(self, channel: Channel[Any], listener: Callable[[Any], None]) -> None:
        self.core.listen(channel, listener)
