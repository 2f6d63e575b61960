"""Runtime — the explicit context every component and router works in.

One ``Runtime`` bundles what used to be process-wide state: the
configuration, the visible document, the template renderer, the
scheduler, the table of named modules, the route manager, and the id
counter. It is built once by the host and passed to every component::

    runtime = Runtime(RuntimeConfig(poll_interval=0.25))
    runtime.register_module(Factory(StreamItem))
    runtime.routes.register(Home).register_child(Profile, Home)
    runtime.routes.navigate("home")
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from perch.config import RuntimeConfig
from perch.document import Document, MemoryDocument
from perch.errors import NotRegistered
from perch.modules import ModuleDescriptor, options_for
from perch.readiness import builtin_checks
from perch.routing.manager import RouteManager
from perch.scheduler import AsyncioScheduler, Scheduler
from perch.templating import KidaRenderer, Renderer

if TYPE_CHECKING:
    from perch.component import Component

logger = logging.getLogger("perch.runtime")


class Runtime:
    """Shared context for one navigation context (one page)."""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        *,
        document: Document | None = None,
        renderer: Renderer | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.config = config or RuntimeConfig()
        self.document: Document = document if document is not None else MemoryDocument()
        self.renderer: Renderer = renderer if renderer is not None else KidaRenderer.from_config(self.config)
        self.scheduler: Scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self.checks: dict[str, Callable[..., bool]] = builtin_checks(self.document)
        self.modules: dict[str, ModuleDescriptor] = {}
        self.routes = RouteManager(self)
        self._ids = itertools.count(1)

    def next_id(self, prefix: str | None = None) -> str:
        return f"{prefix or self.config.id_prefix}{next(self._ids)}"

    def register_module(self, descriptor: ModuleDescriptor) -> None:
        """Make a described component class available by its ``name``."""
        self.modules[descriptor.name] = descriptor
        logger.debug("Registered module %r", descriptor.name)

    def get_module(self, name: str, **overrides: Any) -> Component:
        """Build a fresh instance of the module registered as *name*.

        Keyword *overrides* win over the options stored in the descriptor.
        """
        descriptor = self.modules.get(name)
        if descriptor is None:
            raise NotRegistered("module", name)
        options, child_config = options_for(descriptor)
        options.update(overrides)
        options.setdefault("child_config", child_config)
        return descriptor.main(self, **options)
