"""Runtime support imported by compiled route tables.

A compiled route table ends with::

    routes = _ChunkTable(__file__, {"blog/post.kida": "post.py", ...}).link(routes)

which swaps every ``component()``/``lazy()`` marker for a reference to
the chunk compiled next to it.
"""

from pathlib import Path
from typing import Any

from warble.component import Component
from warble.errors import ConfigurationError, LoadError
from warble.registry import exec_module_file
from warble.routes import ComponentRef, LazyRef
from warble.routing.route import Direct, LazyLoader, RouteComponentRef, RouteNode
from warble.routing.tree import nodes_from_descriptors


class ChunkTable:
    """Template name → chunk file, relative to the route table module."""

    __slots__ = ("_chunks", "_dir")

    def __init__(self, module_file: str, chunks: dict[str, str]) -> None:
        self._dir = Path(module_file).parent
        self._chunks = chunks

    def load(self, template_name: str) -> Component:
        filename = self._chunks.get(template_name)
        if filename is None:
            msg = f"Route table refers to {template_name!r}, which has no compiled chunk"
            raise LoadError(msg)
        module = exec_module_file(self._dir / filename, f"_warble_{Path(filename).stem}")
        component = getattr(module, "script", None) or getattr(module, "component", None)
        if not isinstance(component, Component):
            msg = f"{filename} does not export a component"
            raise LoadError(msg)
        return component

    def link(self, descriptors: list[Any]) -> list[RouteNode]:
        return nodes_from_descriptors(descriptors, self._to_ref)

    def _to_ref(self, value: Any) -> RouteComponentRef:
        if isinstance(value, LazyRef):
            name = value.name

            async def load() -> Component:
                return self.load(name)

            return LazyLoader(load)
        if isinstance(value, ComponentRef):
            return Direct(self.load(value.name))
        if isinstance(value, Component):
            return Direct(value)
        msg = f"Route component must be component(...) or lazy(...), got {value!r}"
        raise ConfigurationError(msg)
