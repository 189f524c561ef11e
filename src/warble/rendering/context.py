"""Render-scoped context via ContextVar.

Provides:
- ``page_data_var``: The data context of the page being rendered.
- ``route_var``: The route location the render navigated to.

Both are set by ``RenderEngine.render()`` for the duration of one render
and reset afterwards, so helper functions called from templates can
reach page data without it being passed through every include.
Accessing them outside a render raises ``LookupError``.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    free-threading. Concurrent renders never see each other's data.
"""

from contextvars import ContextVar
from typing import Any

from warble.routing.route import RouteLocation

page_data_var: ContextVar[dict[str, Any]] = ContextVar("warble_page_data")
"""The current page's data. Set by ``RenderEngine.render()``."""

route_var: ContextVar[RouteLocation] = ContextVar("warble_route")
"""The current route location. Set by ``RenderEngine.render()``."""


def get_page_data() -> dict[str, Any]:
    """Return the data of the page being rendered.

    Raises ``LookupError`` if called outside a render.
    """
    return page_data_var.get()


def get_route() -> RouteLocation:
    """Return the route location of the page being rendered.

    Raises ``LookupError`` if called outside a render.
    """
    return route_var.get()
