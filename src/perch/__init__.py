"""Perch — view lifecycle and navigation reconciliation for single-page clients.

Keeps a tree of stateful view components, decides on every navigation
how much of the visible branch to keep, soft-transition or tear down,
and holds back rendering until a component's data and container are
ready.

Basic usage::

    from perch import Component, Factory, Runtime, ViewState

    class Home(ViewState):
        name = "home"
        path = "home"
        template = "<h1>{{ title }}</h1>"

    runtime = Runtime()
    runtime.routes.register(Home)
    runtime.routes.navigate("home")
"""

__version__ = "0.1.0"
__all__ = [
    "Channel",
    "Component",
    "ConfigurationError",
    "DataSource",
    "Factory",
    "FactoryWithArgs",
    "FetchError",
    "MappingSource",
    "NamedCheck",
    "NotRegistered",
    "OrderedRegistry",
    "PerchError",
    "ReadinessGate",
    "RouteManager",
    "RouteNotFound",
    "Runtime",
    "RuntimeConfig",
    "Status",
    "Transition",
    "ViewState",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "Runtime":
        from perch.runtime import Runtime

        return Runtime

    if name == "RuntimeConfig":
        from perch.config import RuntimeConfig

        return RuntimeConfig

    if name == "Component":
        from perch.component import Component

        return Component

    if name == "ViewState":
        from perch.viewstate import ViewState

        return ViewState

    if name == "Status":
        from perch.lifecycle import Status

        return Status

    if name in ("RouteManager", "Transition"):
        from perch.routing import manager as _manager

        return getattr(_manager, name)

    if name in ("Factory", "FactoryWithArgs"):
        from perch import modules as _modules

        return getattr(_modules, name)

    if name in ("DataSource", "MappingSource"):
        from perch import data as _data

        return getattr(_data, name)

    if name in ("ReadinessGate", "NamedCheck"):
        from perch import readiness as _readiness

        return getattr(_readiness, name)

    if name == "OrderedRegistry":
        from perch.registry import OrderedRegistry

        return OrderedRegistry

    if name == "Channel":
        from perch.events import Channel

        return Channel

    if name in ("PerchError", "ConfigurationError", "FetchError", "NotRegistered", "RouteNotFound"):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
