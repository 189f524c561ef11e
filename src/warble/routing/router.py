"""Trie router over a flattened route tree.

The router matches page URLs to routes, builds URLs from a route name
and params, and tracks the location a render navigated to.  One router
is built per render so concurrent renders never share navigation state.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Protocol

import anyio

from warble.errors import ConfigurationError, NotFound, RouteParamError, UnreachableRouteError
from warble.routing.params import CONVERTERS, format_param
from warble.routing.route import FlatRoute, PathSegment, RouteLocation, RouteMatch

logger = logging.getLogger("warble.routing")

# Route paths written with :param instead of {param}
_COLON_PARAM_RE = re.compile(r"(^|/):\w+")


class RouteResolver(Protocol):
    """The capability ``resolve_route_object()`` delegates to."""

    def has_route(self, name: str) -> bool: ...

    def resolve(self, name: str, params: dict[str, Any]) -> str: ...


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/{id}"     -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/users/{id:int}" -> [PathSegment("{id:int}", is_param=True, param_type="int")]
        "/files/{path:path}" -> [PathSegment("{path:path}", is_param=True, param_type="path")]
    """
    if _COLON_PARAM_RE.search(path):
        msg = (
            f"Route path {path!r} uses :param segments. "
            "Write path parameters as {param}, e.g. '/blog/{slug}'."
        )
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            if ":" in inner:
                param_name, param_type = inner.split(":", 1)
            else:
                param_name = inner
                param_type = "str"
            if param_type not in CONVERTERS:
                msg = f"Unknown converter {param_type!r} in route path {path!r}"
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all", "children", "param_child", "route")

    def __init__(self) -> None:
        # Static segment children: "blog" -> node
        self.children: dict[str, _TrieNode] = {}
        # Single parameter child (only one param pattern per level)
        self.param_child: _ParamEdge | None = None
        # Catch-all route (path converter)
        self.catch_all: _CatchAllEdge | None = None
        # Route ending at this node
        self.route: FlatRoute | None = None


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_name: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """A catch-all (path) edge — consumes remaining path."""

    param_name: str
    route: FlatRoute


class Router:
    """Trie router for flattened route nodes.

    Usage::

        router = Router()
        for flat in tree.flatten():
            router.add(flat)
        router.compile()
        match = router.match("/blog/hello")
        url = router.resolve("post", {"slug": "hello"})
    """

    __slots__ = ("_compiled", "_current", "_names", "_ready", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._names: dict[str, FlatRoute] = {}
        self._compiled = False
        self._current: RouteLocation | None = None
        self._ready: anyio.Event | None = None

    def add(self, route: FlatRoute) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        if route.name is not None:
            self._names.setdefault(route.name, route)

        node = self._root
        for seg in parse_path(route.path):
            if seg.is_param and seg.param_type == "path":
                # Catch-all: consumes rest of path, must be last segment
                if node.catch_all is None:
                    node.catch_all = _CatchAllEdge(param_name=seg.param_name or "path", route=route)
                return

            if seg.is_param:
                if node.param_child is None:
                    pattern, _ = CONVERTERS[seg.param_type]
                    node.param_child = _ParamEdge(
                        param_name=seg.param_name or "",
                        regex=re.compile(f"^{pattern}$"),
                        node=_TrieNode(),
                    )
                node = node.param_child.node
            else:
                if seg.value not in node.children:
                    node.children[seg.value] = _TrieNode()
                node = node.children[seg.value]

        # First registration wins, like a route table read top-down
        if node.route is None:
            node.route = route

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    # -- Matching --

    def match(self, path: str) -> RouteMatch:
        """Match a URL path against the routes.

        Raises ``NotFound`` if no route matches.
        """
        parts = [p for p in _strip_query(path).strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})
        if result is None:
            raise NotFound(f"No route matches {path!r}")
        route, params = result
        return RouteMatch(route=route, path_params=params)

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[FlatRoute, dict[str, str]] | None:
        """Recursively match path parts against the trie."""
        if index == len(parts):
            if node.route is not None:
                return node.route, params
            return None

        part = parts[index]

        # 1. Try static child first (exact match)
        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        # 2. Try parameter child
        if node.param_child is not None:
            edge = node.param_child
            if edge.regex.match(part):
                new_params = {**params, edge.param_name: part}
                result = self._match_node(edge.node, parts, index + 1, new_params)
                if result is not None:
                    return result

        # 3. Try catch-all
        if node.catch_all is not None:
            remaining = "/".join(parts[index:])
            return node.catch_all.route, {**params, node.catch_all.param_name: remaining}

        return None

    # -- URL building --

    def has_route(self, name: str) -> bool:
        return name in self._names

    def resolve(self, name: str, params: dict[str, Any]) -> str:
        """Build the URL path of route *name* with *params* substituted.

        Raises ``UnreachableRouteError`` for an unknown name and
        ``RouteParamError`` for a missing or ill-typed param.
        """
        route = self._names.get(name)
        if route is None:
            raise UnreachableRouteError(
                f"No route is named {name!r}",
                route_object={"name": name, "params": params},
            )

        parts: list[str] = []
        for seg in parse_path(route.path):
            if not seg.is_param:
                parts.append(seg.value)
                continue
            if seg.param_name not in params:
                raise RouteParamError(
                    f"Route {name!r} needs param {seg.param_name!r}",
                    route_object={"name": name, "params": params},
                )
            text = format_param(params[seg.param_name], seg.param_type)
            if text is None:
                raise RouteParamError(
                    f"Param {seg.param_name!r} of route {name!r} is not a valid {seg.param_type}",
                    route_object={"name": name, "params": params},
                )
            parts.append(text)
        return "/" + "/".join(parts)

    # -- Navigation --

    async def push(self, url: str) -> RouteLocation:
        """Navigate to *url*.  A URL matching no route leaves params empty."""
        path = _strip_query(url)
        try:
            match = self.match(path)
        except NotFound:
            logger.debug("No route matches %s; rendering without route params", url)
            location = RouteLocation(path=path)
        else:
            location = RouteLocation(
                path=path,
                name=match.route.name,
                params=match.path_params,
                matched=match.route.chain,
            )
        self._current = location
        self._ready_event().set()
        return location

    async def is_ready(self) -> None:
        """Wait until the first navigation has settled."""
        await self._ready_event().wait()

    @property
    def current_route(self) -> RouteLocation | None:
        return self._current

    def _ready_event(self) -> anyio.Event:
        if self._ready is None:
            self._ready = anyio.Event()
        return self._ready


def _strip_query(url: str) -> str:
    return url.split("#", 1)[0].split("?", 1)[0]
