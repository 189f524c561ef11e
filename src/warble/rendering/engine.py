"""Server-side rendering of compiled components.

Each ``render()`` call gets its own router, navigated to the page URL
before any template runs, so route-aware templates see resolved params.
Page data and helpers go into that render's kida context only; the
shared kida environment is never mutated per page.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from kida import Environment, FunctionLoader, Template

from warble.bundler.compiler import kida_environment
from warble.rendering.context import page_data_var, route_var

if TYPE_CHECKING:
    from warble.component import Component
    from warble.paths import PathResolver
    from warble.registry import ComponentRegistry
    from warble.routing.tree import RouteTree

logger = logging.getLogger("warble.render")

# Context keys set by the engine; mixin entries cannot shadow them
RESERVED_KEYS = frozenset({"page", "page_data", "route", "router"})


class RenderEngine:
    """Renders components against the current route tree.

    Templates referenced by ``{% include %}`` and friends are loaded
    through the component registry, so they always come from the
    latest build.  Call ``reset()`` after every build to drop kida's
    compiled template cache.
    """

    __slots__ = ("_env", "_extension", "_options", "_registry", "_resolver", "routes")

    def __init__(
        self,
        resolver: PathResolver,
        registry: ComponentRegistry,
        routes: RouteTree,
        *,
        options: Mapping[str, Any] | None = None,
        extension: str = ".kida",
    ) -> None:
        self._resolver = resolver
        self._registry = registry
        self._options = dict(options or {})
        self._extension = extension
        self._env: Environment | None = None
        self.routes = routes

    @property
    def env(self) -> Environment:
        if self._env is None:
            self._env = kida_environment(self._options, loader=FunctionLoader(self._load_source))
        return self._env

    def reset(self) -> None:
        self._env = None

    async def render(
        self,
        component: Component,
        data: Mapping[str, Any],
        mixin: Mapping[str, Any] | None = None,
        wrapper: Component | None = None,
    ) -> str:
        """Render *component* for one page.

        Args:
            component: The page component.
            data: The page's data context.  ``data["page"]["url"]`` is
                the URL the router navigates to.
            mixin: Helpers available to every template in this render.
            wrapper: Optional app shell.  The page is rendered first and
                injected as the wrapper's ``content`` block.

        Returns:
            The rendered HTML.
        """
        page = data.get("page") or {}
        url = page.get("url") if isinstance(page, Mapping) else getattr(page, "url", None)

        router = self.routes.router()
        await router.push(url or "/")
        await router.is_ready()
        location = router.current_route

        context: dict[str, Any] = {
            key: value for key, value in (mixin or {}).items() if key not in RESERVED_KEYS
        }
        context.update(page_data=data, page=page, route=location, router=router)

        data_token = page_data_var.set(dict(data))
        route_token = route_var.set(location)
        try:
            html = self._template(component).render(context)
            if wrapper is not None:
                html = self._template(wrapper).render_with_blocks({"content": html}, context)
        finally:
            route_var.reset(route_token)
            page_data_var.reset(data_token)

        logger.debug("Rendered %s for %s", component.template_name, url)
        return html

    def _template(self, component: Component) -> Template:
        logical = self._resolver.to_logical_path(component.source_path, self._extension)
        if self._registry.output_for(logical) is not None:
            return self.env.get_template(component.template_name)
        return self.env.from_string(component.template)

    def _load_source(self, name: str) -> tuple[str, str] | None:
        if not name.endswith(self._extension):
            return None
        source_path = self._resolver.source_for_template(name)
        logical = self._resolver.to_logical_path(source_path, self._extension)
        if self._registry.output_for(logical) is None:
            return None
        component = self._registry.load_component(logical)
        return component.template, component.source_path
