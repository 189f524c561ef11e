"""Rendering — server-side rendering with a per-render router."""

from warble.rendering.context import get_page_data, get_route, page_data_var, route_var
from warble.rendering.engine import RenderEngine

__all__ = ["RenderEngine", "get_page_data", "get_route", "page_data_var", "route_var"]
