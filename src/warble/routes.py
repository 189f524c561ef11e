"""Route table authoring helpers.

A route table is a Python module in the input directory that defines
``routes``::

    from warble.routes import component, lazy

    routes = [
        {"path": "/", "name": "home", "component": component("index.kida")},
        {
            "path": "/blog",
            "component": component("blog/layout.kida"),
            "meta": {"pagination": ["posts"]},
            "children": [
                {"path": "{slug}", "name": "post", "component": lazy("blog/post.kida")},
            ],
        },
    ]

Component names are relative to the input directory.  The compiler
finds them by their ``component("…")``/``lazy("…")`` calls, compiles
each into its own chunk, and links the table to those chunks.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ComponentRef:
    """A component loaded together with the route table."""

    name: str


@dataclass(frozen=True, slots=True)
class LazyRef:
    """A component loaded when the route tree is materialized."""

    name: str


def component(name: str) -> ComponentRef:
    return ComponentRef(name)


def lazy(name: str) -> LazyRef:
    return LazyRef(name)
