"""Module descriptors — how reusable components are registered by name.

A descriptor is either a bare ``Factory`` or a ``FactoryWithArgs`` that
also carries constructor options and per-child configuration overrides.
The union is closed; code that consumes descriptors matches on the two
variants instead of probing what it was handed.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from perch.component import Component


@dataclass(frozen=True, slots=True)
class Factory:
    """Build a module with no extra options."""

    main: type[Component]

    @property
    def name(self) -> str:
        return self.main.name


@dataclass(frozen=True, slots=True)
class FactoryWithArgs:
    """Build a module with constructor options and child overrides."""

    main: type[Component]
    args: Mapping[str, Any] = field(default_factory=dict)
    child_config: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.main.name


ModuleDescriptor = Factory | FactoryWithArgs


def options_for(descriptor: ModuleDescriptor) -> tuple[dict[str, Any], dict[str, dict[str, Any]]]:
    """Return the ``(options, child_config)`` a descriptor builds with."""
    match descriptor:
        case FactoryWithArgs(args=args, child_config=child_config):
            return dict(args), {name: dict(cfg) for name, cfg in child_config.items()}
        case Factory():
            return {}, {}
