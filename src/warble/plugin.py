"""Host build integration.

``ComponentPlugin`` is what a static-site build drives.  The host calls,
per build pass::

    plugin.before_rebuild(changed_files)   # watch mode only
    await plugin.init("src", "src/_includes", template_functions)
    for page in pages:
        data = plugin.get_data(page.input_path)
        url = await plugin.compile(page.input_path, data.get("permalink"))(page_data)
        html = await plugin.compile(page.input_path)(page_data)
    plugin.after_build()

Layouts inline the page's component CSS with ``get_css_for_page(url)``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import Any

from warble import __version__
from warble.bundler.compiler import KidaCompiler
from warble.bundler.orchestrator import BundleOrchestrator
from warble.bundler.types import ComponentCompiler
from warble.component import Component
from warble.config import PluginConfig
from warble.css import CssLedger, CssRegistry, InlineCssRegistry
from warble.errors import ConfigurationError, LoadError
from warble.paths import PathResolver
from warble.registry import ComponentRegistry
from warble.rendering.engine import RenderEngine
from warble.routing.route import RouteObject
from warble.routing.tree import RouteTree, merge_ancestor_data

logger = logging.getLogger("warble.plugin")

type PageRenderer = Callable[[Mapping[str, Any]], Awaitable[Any]]


class ComponentPlugin:
    """Compiles, tracks and renders kida components for a host build.

    Args:
        config: Plugin configuration.
        compiler: Compiler to use instead of ``KidaCompiler``.
    """

    def __init__(
        self,
        config: PluginConfig | None = None,
        *,
        compiler: ComponentCompiler | None = None,
    ) -> None:
        self.config: PluginConfig = config or PluginConfig()
        extension = self.config.extension
        working_dir = self.config.resolved_working_dir()

        self.resolver = PathResolver(working_dir)
        self.css_registry: CssRegistry = self.config.css_registry or InlineCssRegistry()
        self.css = CssLedger(self.resolver, self.css_registry, extension=extension)
        self.registry = ComponentRegistry(
            self.resolver,
            self.css,
            working_dir / self.config.cache_directory,
            extension=extension,
        )
        self.routes = RouteTree()
        self.renderer = RenderEngine(
            self.resolver,
            self.registry,
            self.routes,
            options=self.config.merged_compiler_options(),
            extension=extension,
        )

        self._compiler = compiler
        self._orchestrator: BundleOrchestrator | None = None
        self._changed_files: list[str] = []
        self._template_functions: dict[str, Any] = {}

    @property
    def orchestrator(self) -> BundleOrchestrator:
        if self._orchestrator is None:
            msg = "ComponentPlugin.init() must run before building."
            raise ConfigurationError(msg)
        return self._orchestrator

    # -- Lifecycle hooks --

    def before_rebuild(self, changed_files: list[str] | None = None) -> None:
        """Prepare CSS state for a rebuild.

        With changed component files, only their CSS is reset and only
        they are recompiled by the next ``init()``.  Without, everything
        is.
        """
        extension = self.config.extension
        self._changed_files = [
            self.resolver.to_source_path(f) for f in (changed_files or []) if f.endswith(extension)
        ]

        if not self._changed_files:
            self.css_registry.reset_all()
            self.css.reset()
            return

        for source_path in self._changed_files:
            logical = self.resolver.to_logical_path(source_path, extension)
            output = self.registry.output_for(logical)
            if output is not None:
                self.css_registry.reset_one(output)
            self.css.reset_one(logical)

    async def init(
        self,
        input_dir: str | Path,
        includes_dir: str | Path,
        template_functions: Mapping[str, Any] | None = None,
    ) -> None:
        """Compile components for this build pass.

        Args:
            input_dir: Input directory, relative to the working directory.
            includes_dir: Includes directory, relative to the working
                directory.
            template_functions: Host helpers made available to every
                template render.
        """
        self.resolver.set_input_dir(input_dir)
        self.resolver.set_includes_dir(includes_dir)
        self._template_functions = dict(template_functions or {})

        if self._orchestrator is None:
            compiler = self._compiler or KidaCompiler(
                input_dir=self.resolver.input_dir,
                cache_dir=self.registry.cache_dir,
                extension=self.config.extension,
                options=self.config.merged_compiler_options(),
            )
            self._orchestrator = BundleOrchestrator(
                self.resolver, self.css, compiler, extension=self.config.extension
            )

        self.renderer.reset()
        routes_source = self._routes_source()
        if routes_source is not None:
            await self._build_routes(routes_source)
        else:
            await self._build_components()

    async def _build_components(self) -> None:
        changed = self._changed_files
        self.registry.invalidate([self._logical(f) for f in changed])

        files = changed or self.orchestrator.discover()
        outputs = await self.orchestrator.compile(files)
        self.registry.create_from_outputs(outputs)

    async def _build_routes(self, routes_source: str) -> None:
        # Chunk names depend on the whole graph, so route builds are always full
        if self._changed_files:
            self.css_registry.reset_all()
            self.css.reset()
        self.registry.invalidate()

        sources = [routes_source, *self.orchestrator.discover()]
        outputs, chunk_names, chunk_imports = await self.orchestrator.compile_routes_chunked(sources)
        self.registry.create_from_chunk_map(chunk_names, chunk_imports)
        await self.save_routes_mapping(routes_source, outputs)

    async def save_routes_mapping(self, routes_source: str, outputs: list[Any]) -> None:
        """Load the compiled route table and make it the live route tree."""
        entry = next((o for o in outputs if o.facade_source == routes_source), None)
        if entry is None:
            msg = f"The build produced no route table for {routes_source}"
            raise LoadError(msg)

        module = self.registry.load_module(entry.output_filename)
        nodes = getattr(module, "routes", None)
        if nodes is None:
            msg = f"{self.config.routes_file} does not define 'routes'"
            raise LoadError(msg)
        await self.routes.materialize(nodes)

    def after_build(self) -> int:
        """Report how many components the last build wrote."""
        count = self.registry.write_count
        if self.config.verbose:
            logger.info(
                "Built %d component%s (warble v%s)", count, "" if count == 1 else "s", __version__
            )
        return count

    # -- Per-page hooks --

    def get_instance_from_input_path(self, input_path: str | Path) -> Component:
        return self.registry.load_component(self._logical(self.resolver.to_source_path(input_path)))

    def get_data(self, input_path: str | Path) -> dict[str, Any]:
        """The component's data, with permalink/pagination cascaded from its routes."""
        component = self.get_instance_from_input_path(input_path)
        data = component.get_data()

        chain = self.routes.find(component)
        if chain:
            cascade = merge_ancestor_data(chain, data)
            if cascade.permalink is not None:
                data["permalink"] = cascade.permalink
            if cascade.pagination:
                data["pagination"] = list(cascade.pagination)
        return data

    def compile(self, input_path: str | Path, permalink: Any = None) -> PageRenderer:
        """Return the page callback for *input_path*.

        With a *permalink* the callback resolves it to a URL path;
        without one it renders the page to HTML.
        """
        if permalink is not None:

            async def render_permalink(data: Mapping[str, Any]) -> Any:
                return self.resolve_permalink(input_path, permalink, data)

            return render_permalink

        async def render_page(data: Mapping[str, Any]) -> str:
            component = self.get_instance_from_input_path(input_path)
            self._register_page_css(component, data)
            wrapper = self._wrapper_component()
            return await self.renderer.render(
                component, data, self._template_functions, wrapper=wrapper
            )

        return render_page

    def resolve_permalink(self, input_path: str | Path, permalink: Any, data: Mapping[str, Any]) -> Any:
        """Resolve a permalink value, callable, or route object to a URL path."""
        value = permalink(data) if callable(permalink) else permalink
        if value is None or value is False or isinstance(value, str):
            return value
        if isinstance(value, (RouteObject, Mapping)):
            component = self.get_instance_from_input_path(input_path)
            return self.routes.resolve(component, value)
        msg = f"Unsupported permalink value {value!r} for {input_path}"
        raise ConfigurationError(msg)

    def get_css_for_page(self, url: str) -> str:
        return self.css_registry.get_aggregated_css_for_url(url)

    # -- Internals --

    def _routes_source(self) -> str | None:
        if self.config.routes_file is None:
            return None
        path = self.resolver.source_for_template(self.config.routes_file)
        if not Path(path).is_file():
            logger.warning("Route table %s not found; building without routes", path)
            return None
        return path

    def _register_page_css(self, component: Component, data: Mapping[str, Any]) -> None:
        add_for_url = getattr(self.css_registry, "add_component_for_url", None)
        if add_for_url is None:
            return
        page = data.get("page") or {}
        url = page.get("url") if isinstance(page, Mapping) else getattr(page, "url", None)
        output = self.registry.output_for(self._logical(component.source_path))
        if url and output is not None:
            add_for_url(output, url)

    def _wrapper_component(self) -> Component | None:
        if self.config.wrapper_component is None:
            return None
        source_path = self.resolver.source_for_template(self.config.wrapper_component)
        return self.registry.load_component(self._logical(source_path))

    def _logical(self, source_path: str) -> str:
        return self.resolver.to_logical_path(source_path, self.config.extension)
