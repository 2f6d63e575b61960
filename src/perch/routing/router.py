"""Fragment router with trie-based matching.

Segment patterns (``profile/{user}/photos``) live in a trie keyed by
segment, so matching costs one step per fragment segment. Raw regex
patterns are kept in registration order and tried only when the trie
finds nothing; their groups become the positional arguments.

At each trie level a static segment beats a parameter, and a parameter
beats a ``{name:path}`` catch-all.
"""

import re
from dataclasses import dataclass, field

from perch.errors import ConfigurationError, RouteNotFound
from perch.routing.params import CONVERTERS, converter_regex
from perch.routing.route import PathSegment, Route, RouteMatch


def parse_path(path: str) -> list[PathSegment]:
    """Split a route pattern into static and parameter segments.

    Examples::

        "inbox"                -> [PathSegment("inbox")]
        "profile/{user}"       -> [PathSegment("profile"), PathSegment("{user}", is_param=True, ...)]
        "thread/{id:int}"      -> [..., PathSegment("{id:int}", is_param=True, param_type="int")]
        "files/{rest:path}"    -> [..., PathSegment("{rest:path}", is_param=True, param_type="path")]
    """
    segments: list[PathSegment] = []
    for raw in filter(None, path.strip("/").split("/")):
        if raw[0] == ":" or (raw[0] == "<" and raw[-1] == ">"):
            msg = (
                f"Route pattern {path!r} uses an unsupported parameter syntax. "
                "Write parameters as {name} or {name:type}."
            )
            raise ConfigurationError(msg)

        if not (raw[0] == "{" and raw[-1] == "}"):
            segments.append(PathSegment(value=raw))
            continue

        param_name, _, param_type = raw[1:-1].partition(":")
        param_type = param_type or "str"
        if param_type not in CONVERTERS:
            msg = f"Unknown parameter type {param_type!r} in route pattern {path!r}"
            raise ConfigurationError(msg)
        segments.append(PathSegment(value=raw, is_param=True, param_name=param_name, param_type=param_type))
    return segments


@dataclass(slots=True)
class _Node:
    """One trie level: the routes that end here and the edges leaving it."""

    statics: dict[str, "_Node"] = field(default_factory=dict)
    param: "_Param | None" = None
    rest: Route | None = None
    route: Route | None = None


@dataclass(slots=True)
class _Param:
    regex: re.Pattern[str]
    node: _Node


class Router:
    """Route table for navigation fragments.

    Usage::

        router = Router()
        router.add(Route("profile/{user}", profile))
        router.add(Route(re.compile(r"^search/(.*)$"), search))
        router.match("profile/ana").args  # ("ana",)
    """

    __slots__ = ("_regex_routes", "_root")

    def __init__(self) -> None:
        self._root = _Node()
        self._regex_routes: list[Route] = []

    def add(self, route: Route) -> None:
        """Add a route. A later route for the same pattern replaces the earlier one."""
        if isinstance(route.pattern, re.Pattern):
            self._regex_routes = [r for r in self._regex_routes if r.pattern != route.pattern]
            self._regex_routes.append(route)
            return

        node = self._root
        for segment in parse_path(route.pattern):
            if segment.param_type == "path" and segment.is_param:
                node.rest = route
                return
            if segment.is_param:
                if node.param is None:
                    node.param = _Param(converter_regex(segment.param_type), _Node())
                node = node.param.node
            else:
                node = node.statics.setdefault(segment.value, _Node())
        node.route = route

    @property
    def routes(self) -> list[Route]:
        """Every registered route: trie routes depth-first, then regex routes."""
        found: list[Route] = []
        pending = [self._root]
        while pending:
            node = pending.pop()
            found.extend(r for r in (node.route, node.rest) if r is not None)
            if node.param is not None:
                pending.append(node.param.node)
            pending.extend(reversed(node.statics.values()))
        return found + self._regex_routes

    def match(self, fragment: str) -> RouteMatch:
        """Match a navigation fragment.

        Raises ``RouteNotFound`` if no pattern matches.
        """
        parts = [part for part in fragment.strip("/").split("/") if part]
        hit = self._walk(self._root, parts, ())
        if hit is not None:
            return hit

        for route in self._regex_routes:
            pattern = route.pattern
            found = pattern.search(fragment) if isinstance(pattern, re.Pattern) else None
            if found is not None:
                return RouteMatch(route, tuple(group or "" for group in found.groups()))

        raise RouteNotFound(fragment)

    def _walk(self, node: _Node, parts: list[str], args: tuple[str, ...]) -> RouteMatch | None:
        if not parts:
            return RouteMatch(node.route, args) if node.route is not None else None

        head, tail = parts[0], parts[1:]

        static = node.statics.get(head)
        if static is not None:
            hit = self._walk(static, tail, args)
            if hit is not None:
                return hit

        if node.param is not None and node.param.regex.match(head):
            hit = self._walk(node.param.node, tail, (*args, head))
            if hit is not None:
                return hit

        if node.rest is not None:
            return RouteMatch(node.rest, (*args, "/".join(parts)))
        return None
