"""Routing — nested route tree, data cascade, and a trie router.

The route tree comes from a compiled route table (see
``warble.routes``); the router is built from it per render.
"""

from warble.routing.route import (
    CascadeData,
    Direct,
    FlatRoute,
    LazyLoader,
    RouteLocation,
    RouteMatch,
    RouteNode,
    RouteObject,
)
from warble.routing.router import RouteResolver, Router, parse_path
from warble.routing.tree import (
    RouteTree,
    find_path_to,
    merge_ancestor_data,
    nodes_from_descriptors,
    resolve_async_children,
    resolve_route_object,
    to_output_url,
)

__all__ = [
    "CascadeData",
    "Direct",
    "FlatRoute",
    "LazyLoader",
    "RouteLocation",
    "RouteMatch",
    "RouteNode",
    "RouteObject",
    "RouteResolver",
    "RouteTree",
    "Router",
    "find_path_to",
    "merge_ancestor_data",
    "nodes_from_descriptors",
    "parse_path",
    "resolve_async_children",
    "resolve_route_object",
    "to_output_url",
]
