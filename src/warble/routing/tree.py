"""Nested route tree: search, data cascade, and URL resolution.

The tree is rebuilt wholesale on every routes build, so nodes are found
by component identity (the component's source path), never by object
identity.  Every walk returns fresh tuples; nothing accumulates across
branches.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from warble.component import Component
from warble.errors import ConfigurationError, UnnamedRouteError, UnreachableRouteError
from warble.routing.route import (
    CascadeData,
    Direct,
    FlatRoute,
    LazyLoader,
    RouteComponentRef,
    RouteNode,
    RouteObject,
)
from warble.routing.router import RouteResolver, Router

logger = logging.getLogger("warble.routing")

type Target = Component | str


def _identity(target: Target) -> str:
    if isinstance(target, Component):
        return target.source_path
    return target


def find_path_to(node: RouteNode, target: Target) -> tuple[RouteNode, ...]:
    """Return the chain from *node* down to the node rendering *target*.

    Depth-first over children.  Returns ``()`` when *target* is not in
    the subtree.
    """
    if node.identity == _identity(target):
        return (node,)
    for child in node.children:
        chain = find_path_to(child, target)
        if chain:
            return (node, *chain)
    return ()


def merge_ancestor_data(
    chain: Sequence[RouteNode],
    data: Mapping[str, Any] | None = None,
) -> CascadeData:
    """Fold permalink and pagination from the root of *chain* down.

    - ``pagination``: concatenated, ancestors first, no de-duplication.
    - ``permalink``: each node's value (callables are called with
      *data*) is merged over the inherited one.  Route objects merge
      their ``params`` key by key, so a descendant overrides only the
      params it sets.  Any other value replaces what was inherited.

    A chain of one node passes that node's data through unchanged.
    """
    if not chain:
        return CascadeData()
    if len(chain) == 1:
        return CascadeData(permalink=chain[0].permalink, pagination=chain[0].pagination)

    permalink: Any = None
    pagination: tuple[Any, ...] = ()
    for node in chain:
        pagination = (*pagination, *node.pagination)
        permalink = _merge_permalink(permalink, node.permalink, data)
    return CascadeData(permalink=permalink, pagination=pagination)


def _merge_permalink(inherited: Any, own: Any, data: Mapping[str, Any] | None) -> Any:
    if own is None:
        return inherited
    value = own(data) if callable(own) else own
    if _is_route_object(value) and _is_route_object(inherited):
        parent = RouteObject.coerce(inherited)
        child = RouteObject.coerce(value)
        return RouteObject(
            name=child.name if child.name is not None else parent.name,
            params={**parent.params, **child.params},
        )
    return value


def _is_route_object(value: Any) -> bool:
    return isinstance(value, (RouteObject, Mapping))


def resolve_route_object(
    chain: Sequence[RouteNode],
    route_object: RouteObject | Mapping[str, Any],
    resolver: RouteResolver,
) -> str:
    """Turn a permalink route object into an output path.

    The deepest node of *chain* must be named; its name is used unless
    the route object names another route.  Paths without a filename
    are rewritten to the directory's ``index.html``.
    """
    if not chain:
        raise UnreachableRouteError(
            "Permalink route object refers to a component outside the route tree",
            route_object=route_object,
        )

    target = chain[-1]
    if target.name is None:
        raise UnnamedRouteError(
            f"Route {target.path!r} needs a name to resolve a permalink route object",
            route_object=route_object,
        )

    obj = RouteObject.coerce(route_object)
    name = obj.name if obj.name is not None else target.name
    if not resolver.has_route(name):
        raise UnreachableRouteError(f"No route is named {name!r}", route_object=route_object)

    return to_output_url(resolver.resolve(name, dict(obj.params)))


def to_output_url(path: str) -> str:
    """``/blog`` → ``/blog/index.html``; ``/blog/post-1.html`` is kept."""
    last = path.rstrip("/").rsplit("/", 1)[-1]
    if "." in last and not path.endswith("/"):
        return path
    return path.rstrip("/") + "/index.html"


async def resolve_async_children(node: RouteNode) -> RouteNode:
    """Return *node* with every lazy component in its subtree loaded."""
    component = node.component
    if isinstance(component, LazyLoader):
        component = Direct(await component.resolve())

    children = tuple([await resolve_async_children(child) for child in node.children])
    return RouteNode(
        path=node.path,
        component=component,
        name=node.name,
        children=children,
        meta=node.meta,
    )


def nodes_from_descriptors(
    descriptors: Iterable[Mapping[str, Any] | RouteNode],
    to_ref: Callable[[Any], RouteComponentRef],
) -> list[RouteNode]:
    """Build route nodes from route-table descriptors.

    Each descriptor is a mapping with ``path``, ``component`` and the
    optional ``name``, ``children`` and ``meta`` keys.  *to_ref* turns
    the ``component`` value into a ``Direct`` or ``LazyLoader``.
    """
    nodes: list[RouteNode] = []
    for item in descriptors:
        if isinstance(item, RouteNode):
            nodes.append(item)
            continue
        if "path" not in item or "component" not in item:
            msg = f"Route descriptors need 'path' and 'component': {dict(item)!r}"
            raise ConfigurationError(msg)
        nodes.append(
            RouteNode(
                path=item["path"],
                component=to_ref(item["component"]),
                name=item.get("name"),
                children=tuple(nodes_from_descriptors(item.get("children") or (), to_ref)),
                meta=dict(item.get("meta") or {}),
            )
        )
    return nodes


class RouteTree:
    """The live route tree of the current build."""

    __slots__ = ("nodes",)

    def __init__(self, nodes: Iterable[RouteNode] = ()) -> None:
        self.nodes: tuple[RouteNode, ...] = tuple(nodes)

    def __bool__(self) -> bool:
        return bool(self.nodes)

    async def materialize(self, nodes: Iterable[RouteNode]) -> None:
        """Replace the tree with *nodes*, resolving lazy components."""
        self.nodes = tuple([await resolve_async_children(node) for node in nodes])
        logger.debug("Route tree holds %d routes", len(self.flatten()))

    def clear(self) -> None:
        self.nodes = ()

    def find(self, target: Target) -> tuple[RouteNode, ...]:
        """Chain to *target* from whichever root holds it, or ``()``."""
        for root in self.nodes:
            chain = find_path_to(root, target)
            if chain:
                return chain
        return ()

    def flatten(self) -> list[FlatRoute]:
        """Every node with its full path, parents before children."""
        flat: list[FlatRoute] = []
        for root in self.nodes:
            _flatten(root, "/", (), flat)
        return flat

    def router(self) -> Router:
        """A fresh, compiled router over this tree."""
        router = Router()
        for route in self.flatten():
            router.add(route)
        router.compile()
        return router

    def cascade(self, target: Target, data: Mapping[str, Any] | None = None) -> CascadeData:
        return merge_ancestor_data(self.find(target), data)

    def resolve(self, target: Target, route_object: RouteObject | Mapping[str, Any]) -> str:
        return resolve_route_object(self.find(target), route_object, self.router())


def _flatten(
    node: RouteNode,
    parent_path: str,
    ancestors: tuple[RouteNode, ...],
    out: list[FlatRoute],
) -> None:
    if node.path.startswith("/"):
        path = node.path
    else:
        path = posixpath.join(parent_path, node.path)
    path = "/" + path.strip("/") if path.strip("/") else "/"

    chain = (*ancestors, node)
    out.append(FlatRoute(path=path, node=node, chain=chain))
    for child in node.children:
        _flatten(child, path, chain, out)
