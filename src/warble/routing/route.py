"""Route tree value types.

``RouteNode`` is one entry of the nested route table.  Its component is
a tagged union: ``Direct`` holds a loaded component, ``LazyLoader``
holds a loader that ``resolve_async_children()`` awaits once.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from warble.component import Component


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``  (is_param=False)
    Param:   ``/{id}``   (is_param=True, param_name="id")
    Typed:   ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Direct:
    """A component that is already loaded."""

    component: Component


@dataclass(frozen=True, slots=True)
class LazyLoader:
    """A component loaded on first resolution."""

    load: Callable[[], Component | Awaitable[Component]]

    async def resolve(self) -> Component:
        result = self.load()
        if inspect.isawaitable(result):
            result = await result
        return result


type RouteComponentRef = Direct | LazyLoader


@dataclass(frozen=True, slots=True)
class RouteNode:
    """One route of the nested route table.

    Attributes:
        path: Route path.  Child paths without a leading ``/`` are
            relative to the parent's path.
        component: The route's component reference.
        name: Route name; required for permalink route objects.
        children: Nested routes.
        meta: Route data.  ``permalink`` and ``pagination`` here take
            precedence over the component's own.
    """

    path: str
    component: RouteComponentRef
    name: str | None = None
    children: tuple[RouteNode, ...] = ()
    meta: Mapping[str, Any] = field(default_factory=dict)

    @property
    def resolved(self) -> Component | None:
        """The component, or ``None`` while it is still lazy."""
        if isinstance(self.component, Direct):
            return self.component.component
        return None

    @property
    def identity(self) -> str | None:
        component = self.resolved
        return component.source_path if component is not None else None

    @property
    def permalink(self) -> Any:
        if "permalink" in self.meta:
            return self.meta["permalink"]
        component = self.resolved
        return component.get_data().get("permalink") if component is not None else None

    @property
    def pagination(self) -> tuple[Any, ...]:
        if "pagination" in self.meta:
            value = self.meta["pagination"]
        else:
            component = self.resolved
            value = component.get_data().get("pagination") if component is not None else None
        if value is None:
            return ()
        if isinstance(value, (list, tuple)):
            return tuple(value)
        return (value,)


@dataclass(frozen=True, slots=True)
class FlatRoute:
    """A route node with its full path, as registered in a router.

    ``chain`` holds the ancestors of ``node``, root first, ending with it.
    """

    path: str
    node: RouteNode
    chain: tuple[RouteNode, ...] = ()

    @property
    def name(self) -> str | None:
        return self.node.name


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: FlatRoute
    path_params: dict[str, str]


@dataclass(frozen=True, slots=True)
class RouteObject:
    """A permalink expressed as a route name plus params."""

    name: str | None = None
    params: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, value: RouteObject | Mapping[str, Any]) -> RouteObject:
        if isinstance(value, RouteObject):
            return value
        return cls(name=value.get("name"), params=dict(value.get("params") or {}))


@dataclass(frozen=True, slots=True)
class CascadeData:
    """Permalink and pagination merged down an ancestor chain."""

    permalink: Any = None
    pagination: tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class RouteLocation:
    """Where a router currently points.  Exposed to templates as ``route``."""

    path: str
    name: str | None = None
    params: Mapping[str, str] = field(default_factory=dict)
    matched: tuple[RouteNode, ...] = ()
