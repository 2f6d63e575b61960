"""Route and RouteMatch frozen dataclasses."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perch.viewstate import ViewState


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Static:  ``users``      (is_param=False)
    Param:   ``{id}``       (is_param=True, param_name="id")
    Typed:   ``{id:int}``   (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """A route pattern bound to the view state it enters."""

    pattern: str | re.Pattern[str]
    target: ViewState
    name: str | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful match: positional args in pattern order."""

    route: Route
    args: tuple[str, ...]
