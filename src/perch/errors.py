"""Perch exception hierarchy.

Shared across the registry, lifecycle, readiness gate and route manager
so every module raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when runtime configuration is invalid.

    Covers unknown readiness checks, malformed route patterns and
    components that declare no usable template.
    """


@dataclass(frozen=True, slots=True)
class NotRegistered(PerchError):
    """A module or view state was looked up by an identifier nobody registered."""

    kind: str
    identifier: str

    def __str__(self) -> str:
        return f"Can not find {self.kind} {self.identifier!r}"


class RouteNotFound(PerchError):
    """No registered route pattern matches a navigation fragment."""

    def __init__(self, fragment: str) -> None:
        super().__init__(f"No route matches {fragment!r}")
        self.fragment = fragment


class ParentAlreadySet(PerchError):  # noqa: N818
    """A component's containment parent may only be assigned once."""


class ReentrantNavigation(PerchError):  # noqa: N818
    """A navigation was started from inside another navigation's hooks."""


class FetchError(PerchError):
    """A data source failed to produce data for a render.

    Wraps the original exception as ``__cause__``.
    """

    def __init__(self, component_id: str, detail: str = "") -> None:
        message = f"Fetch failed for component {component_id!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.component_id = component_id
