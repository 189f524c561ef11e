"""Warble — single-file kida components for static-site builds.

Compiles ``.kida`` components (template, Python script, and styles in one
file) into importable modules, tracks per-page CSS, and renders each page
server-side against an optional route table.

Basic usage::

    from warble import ComponentPlugin, PluginConfig

    plugin = ComponentPlugin(PluginConfig(routes_file="routes.py"))
    await plugin.init("src", "src/_includes")
    html = await plugin.compile("src/index.kida")({"page": {"url": "/"}})
    plugin.after_build()

Route tables (``routes.py``)::

    from warble.routes import component, lazy

    routes = [
        {"path": "/", "name": "home", "component": component("index.kida")},
        {"path": "/blog/{slug}", "name": "post", "component": lazy("blog/post.kida")},
    ]
"""

# Declare free-threading support (PEP 703)
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "Component",
    "ComponentPlugin",
    "ConfigurationError",
    "CssRegistry",
    "InlineCssRegistry",
    "LoadError",
    "NotFound",
    "PluginConfig",
    "RouteError",
    "RouteObject",
    "WarbleError",
    "component",
    "get_page_data",
    "get_route",
    "lazy",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import warble`` fast and lets compiled component modules
    import ``warble.component`` without pulling in the compiler.
    """
    if name == "ComponentPlugin":
        from warble.plugin import ComponentPlugin

        return ComponentPlugin

    if name == "PluginConfig":
        from warble.config import PluginConfig

        return PluginConfig

    if name == "Component":
        from warble.component import Component

        return Component

    if name in ("CssRegistry", "InlineCssRegistry"):
        from warble import css as _css

        return getattr(_css, name)

    if name == "RouteObject":
        from warble.routing.route import RouteObject

        return RouteObject

    if name in ("component", "lazy"):
        from warble import routes as _routes

        return getattr(_routes, name)

    if name in ("get_page_data", "get_route"):
        from warble.rendering import context as _ctx

        return getattr(_ctx, name)

    if name in ("ConfigurationError", "LoadError", "NotFound", "RouteError", "WarbleError"):
        from warble import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
