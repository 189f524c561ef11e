"""Logical component path ↔ compiled module mapping.

The registry records which output file in the cache directory holds
each component, loads those files as modules through its own keyed
cache, and feeds per-component CSS and relationships to the CSS
registry after every compile.

Modules are executed from source and never registered in
``sys.modules``.  A rebuild writes new files under the same names, so
the only way to see them is ``invalidate()`` followed by a fresh load.
"""

from __future__ import annotations

import importlib.util
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING

from warble.component import Component
from warble.errors import LoadError

if TYPE_CHECKING:
    from warble.bundler.types import CompiledOutput
    from warble.css import CssLedger
    from warble.paths import PathResolver

logger = logging.getLogger("warble.registry")


def exec_module_file(path: str | Path, module_name: str) -> ModuleType:
    """Execute a Python file as a fresh, unregistered module.

    The source is read and compiled on every call instead of going
    through ``spec.loader.exec_module``.  The loader would consult
    ``__pycache__``, whose entries are validated by mtime and size only:
    a module rewritten within the same mtime tick with the same length
    would load the previous build's bytecode.
    """
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        msg = f"Cannot load a module from {path}"
        raise LoadError(msg)

    module = importlib.util.module_from_spec(spec)
    source = Path(path).read_text(encoding="utf-8")
    exec(compile(source, str(path), "exec"), module.__dict__)  # noqa: S102
    return module


class ComponentRegistry:
    """Maps components to their compiled modules.

    Attributes:
        write_count: Components mapped by the last ``create_from_*``
            call.  Reporting only.
    """

    __slots__ = (
        "_css",
        "_extension",
        "_modules",
        "_outputs",
        "_resolver",
        "cache_dir",
        "write_count",
    )

    def __init__(
        self,
        resolver: PathResolver,
        css: CssLedger,
        cache_dir: str | Path,
        *,
        extension: str = ".kida",
    ) -> None:
        self._resolver = resolver
        self._css = css
        self._extension = extension
        self.cache_dir = str(cache_dir)
        self._outputs: dict[str, str] = {}
        self._modules: dict[str, ModuleType] = {}
        self.write_count = 0

    # -- Mapping --

    def map_source_to_output(self, logical_path: str, output_filename: str) -> None:
        self._outputs[logical_path] = output_filename

    def output_for(self, logical_path: str) -> str | None:
        return self._outputs.get(logical_path)

    # -- Loading --

    def load_module(self, output_filename: str) -> ModuleType:
        """Load an output file from the cache dir, memoised by filename."""
        module = self._modules.get(output_filename)
        if module is not None:
            return module

        path = self._resolver.to_output_path(self.cache_dir, output_filename)
        try:
            module = exec_module_file(path, f"_warble_{Path(output_filename).stem}")
        except LoadError:
            raise
        except Exception as exc:
            msg = f"Failed to load compiled module {path}: {exc}"
            raise LoadError(msg) from exc

        self._modules[output_filename] = module
        return module

    def load_component(self, logical_path: str) -> Component:
        """Return the component compiled from *logical_path*.

        Chunked builds export the component as ``script``; regular
        builds as ``component``.  ``script`` wins when both exist.
        """
        output = self._outputs.get(logical_path)
        if output is None:
            msg = f"No compiled output is mapped for {logical_path!r}"
            raise LoadError(msg, logical_path=logical_path)

        try:
            module = self.load_module(output)
        except LoadError as exc:
            exc.logical_path = logical_path
            raise

        component = getattr(module, "script", None) or getattr(module, "component", None)
        if not isinstance(component, Component):
            msg = f"{output} does not export a component"
            raise LoadError(msg, logical_path=logical_path)
        return component

    def invalidate(self, logical_paths: Iterable[str] | None = None) -> None:
        """Forget loaded modules for *logical_paths*, or all of them."""
        paths = list(logical_paths or ())
        if not paths:
            dropped = len(self._modules)
            self._modules.clear()
            logger.debug("Dropped %d cached component modules", dropped)
            return

        for logical_path in paths:
            output = self._outputs.get(logical_path)
            if output is not None and self._modules.pop(output, None) is not None:
                logger.debug("Dropped cached module %s for %s", output, logical_path)

    # -- Creation from build output --

    def create_from_outputs(self, outputs: Iterable[CompiledOutput]) -> None:
        """Record mappings, CSS, and relationships for a regular build."""
        self.write_count = 0
        for entry in outputs:
            if entry.facade_source is None:
                continue
            self._create_component(entry.facade_source, entry.output_filename)

            if not self._resolver.is_under_includes_dir(entry.facade_source):
                # Importing a component rolls its CSS up into the importer's pages
                for imported in entry.imported_output_filenames:
                    self._css.record_relationship(entry.output_filename, imported)

            self.write_count += 1

    def create_from_chunk_map(
        self,
        chunk_names: Mapping[str, str],
        chunk_imports: Mapping[str, Iterable[str]],
    ) -> None:
        """Record mappings and CSS for a routes-chunked build.

        Args:
            chunk_names: Chunk name → source path of its component.
            chunk_imports: Source path → source paths its script imports.
        """
        self.write_count = 0
        for chunk_name, source_path in chunk_names.items():
            self._create_component(source_path, f"{chunk_name}.py")
            self.write_count += 1

        if self._css.registry is None:
            return

        for source_path in chunk_names.values():
            if self._resolver.is_under_includes_dir(source_path):
                continue
            if source_path not in chunk_imports:
                continue
            parent = self.output_for(self._logical(source_path))
            for imported in chunk_imports[source_path]:
                child = self.output_for(self._logical(imported))
                if parent is not None and child is not None:
                    self._css.record_relationship(parent, child)

    def _create_component(self, source_path: str, output_filename: str) -> None:
        logical_path = self._logical(source_path)
        self.map_source_to_output(logical_path, output_filename)

        css = self._css.get_css(logical_path)
        if css and self._css.registry is not None:
            self._css.registry.add_code(output_filename, css)

    def _logical(self, source_path: str) -> str:
        return self._resolver.to_logical_path(source_path, self._extension)
