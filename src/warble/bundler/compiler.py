"""Default component compiler.

Turns ``.kida`` single-file components into Python modules in the
cache directory.  Works like a small bundler:

    1. Walk the module graph from the entry sources, following template
       references ({% include %} and friends) and route-table
       ``component()``/``lazy()`` calls
    2. Syntax-check every template with kida and every script with
       ``compile()``
    3. Assign each module to a chunk: ``manual_chunks`` names first,
       everything else by its path under the input dir
       (``blog/index.kida`` -> ``blog__index.py``)
    4. Report extracted ``<style>`` text through ``on_css`` for entries
       and named chunks
    5. Write one module per chunk and return the output table

Filenames never depend on which other sources share the compile call,
so a rebuild of one page rewrites exactly the file a full build gave it.
"""

from __future__ import annotations

import hashlib
import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import anyio
from kida import Environment, TemplateError

from warble.bundler.codegen import component_module, routes_module
from warble.bundler.parser import ParsedComponent, find_route_references, parse_component
from warble.bundler.types import (
    ChunkFileNames,
    CompiledOutput,
    CompileResult,
    CssHook,
    ManualChunks,
    ModuleInfo,
)
from warble.errors import CompileError

logger = logging.getLogger("warble.bundler")

SCRIPT_SUFFIX = "?type=script"

# kida Environment keywords the compiler and renderer accept from options
KIDA_OPTIONS = ("autoescape", "trim_blocks", "lstrip_blocks")


def kida_environment(options: Mapping[str, Any], **kwargs: Any) -> Environment:
    """Create a kida Environment from compiler options."""
    settings = {key: options[key] for key in KIDA_OPTIONS if key in options}
    return Environment(**settings, **kwargs)


@dataclass(slots=True)
class _Module:
    """A module of the compile graph."""

    id: str
    is_entry: bool
    imported_ids: tuple[str, ...]
    parsed: ParsedComponent | None = None
    routes_source: str | None = None


class KidaCompiler:
    """Compiles kida components and route tables into Python modules.

    Args:
        input_dir: Directory template names are relative to.
        cache_dir: Directory outputs are written to.
        extension: Component file extension.
        options: Compiler options (kida ``autoescape``, ``trim_blocks``,
            ``lstrip_blocks``).
    """

    __slots__ = ("_env", "_extension", "cache_dir", "input_dir")

    def __init__(
        self,
        *,
        input_dir: str | Path,
        cache_dir: str | Path,
        extension: str = ".kida",
        options: Mapping[str, Any] | None = None,
    ) -> None:
        self.input_dir = os.path.normpath(str(input_dir))
        self.cache_dir = str(cache_dir)
        self._extension = extension
        self._env = kida_environment(options or {})

    async def compile(
        self,
        sources: Sequence[str],
        *,
        on_css: CssHook | None = None,
        manual_chunks: ManualChunks | None = None,
        chunk_file_names: ChunkFileNames | None = None,
    ) -> CompileResult:
        graph = await self._build_graph(sources)

        infos: dict[str, ModuleInfo] = {}
        for module in graph.values():
            if module.parsed is not None:
                script_id = module.id + SCRIPT_SUFFIX
                infos[module.id] = ModuleInfo(module.id, (script_id, *module.imported_ids))
                infos[script_id] = ModuleInfo(script_id, module.imported_ids)
            else:
                infos[module.id] = ModuleInfo(module.id, module.imported_ids)

        chunk_of: dict[str, str] = {}
        if manual_chunks is not None:
            for module_id, info in infos.items():
                name = manual_chunks(module_id, info)
                if name:
                    chunk_of[module_id] = name

        # Shared modules are only walked through; their own build reports their CSS
        css_by_source: dict[str, list[str]] = {}
        for module in graph.values():
            if module.parsed is None or not module.parsed.styles:
                continue
            if not (module.is_entry or module.id in chunk_of):
                continue
            css_by_source[module.id] = list(module.parsed.styles)
            if on_css is not None:
                for css in module.parsed.styles:
                    on_css(module.id, css)

        files = self._render_files(graph, chunk_of, chunk_file_names)

        await anyio.Path(self.cache_dir).mkdir(parents=True, exist_ok=True)
        for filename, (_, text) in files.items():
            await anyio.Path(self.cache_dir, filename).write_text(text, encoding="utf-8")

        filename_of = {module_id: filename for filename, (module_id, _) in files.items()}
        outputs = []
        for filename, (module_id, _) in files.items():
            module = graph[module_id]
            imported = tuple(
                filename_of[i] for i in module.imported_ids if filename_of[i] != filename
            )
            is_facade = module.is_entry or module_id in chunk_of
            outputs.append(
                CompiledOutput(
                    output_filename=filename,
                    facade_source=module_id if is_facade else None,
                    imported_output_filenames=imported,
                    is_entry=module.is_entry,
                )
            )

        logger.debug("Compiled %d modules into %d files", len(graph), len(outputs))
        return CompileResult(outputs=tuple(outputs), css_by_source=css_by_source, modules=infos)

    # -- Graph --

    async def _build_graph(self, sources: Sequence[str]) -> dict[str, _Module]:
        graph: dict[str, _Module] = {}
        entries = [os.path.normpath(s) for s in sources]
        queue: list[tuple[str, str | None]] = [(s, None) for s in entries]

        while queue:
            module_id, importer = queue.pop(0)
            if module_id in graph:
                continue

            try:
                text = await anyio.Path(module_id).read_text(encoding="utf-8")
            except OSError as exc:
                where = f" (imported by {importer})" if importer else ""
                raise CompileError(f"Cannot read {module_id}{where}: {exc}", source=module_id) from exc

            if module_id.endswith(".py"):
                names = find_route_references(text, extension=self._extension)
                module = _Module(
                    id=module_id,
                    is_entry=module_id in entries,
                    imported_ids=tuple(self._source_for(n) for n in names),
                    routes_source=text,
                )
            else:
                parsed = parse_component(text, extension=self._extension)
                self._check(module_id, parsed)
                module = _Module(
                    id=module_id,
                    is_entry=module_id in entries,
                    imported_ids=tuple(self._source_for(n) for n in parsed.imports),
                    parsed=parsed,
                )

            graph[module_id] = module
            queue.extend((i, module_id) for i in module.imported_ids if i not in graph)

        return graph

    def _check(self, module_id: str, parsed: ParsedComponent) -> None:
        try:
            self._env.from_string(parsed.template)
        except TemplateError as exc:
            raise CompileError(f"{module_id}: {exc}", source=module_id) from exc

        if parsed.script:
            try:
                compile(parsed.script, module_id, "exec")
            except SyntaxError as exc:
                raise CompileError(f"{module_id}: invalid script: {exc}", source=module_id) from exc

    def _source_for(self, template_name: str) -> str:
        return os.path.normpath(os.path.join(self.input_dir, template_name))

    def _template_name(self, source_path: str) -> str:
        return Path(os.path.relpath(source_path, self.input_dir)).as_posix()

    # -- Output --

    def _render_files(
        self,
        graph: dict[str, _Module],
        chunk_of: dict[str, str],
        chunk_file_names: ChunkFileNames | None,
    ) -> dict[str, tuple[str, str]]:
        """Return ``{filename: (module id, module text)}``.

        Route tables are rendered last because they embed the filenames
        of the chunks they link to.
        """
        files: dict[str, tuple[str, str]] = {}
        ordered = sorted(graph.values(), key=lambda m: m.routes_source is not None)

        for module in ordered:
            chunk_name = chunk_of.get(module.id)
            if module.parsed is not None:
                text = component_module(
                    module.parsed,
                    source_path=module.id,
                    template_name=self._template_name(module.id),
                    export="script" if chunk_name else "component",
                )
            else:
                linked = {
                    self._template_name(i): name
                    for name, (i, _) in files.items()
                    if i in module.imported_ids
                }
                text = routes_module(
                    module.routes_source or "",
                    routes_name=self._template_name(module.id),
                    chunks=linked,
                )

            if chunk_name:
                pattern = chunk_file_names(chunk_name) if chunk_file_names else "[name].py"
                filename = _fill(pattern, chunk_name, text)
            else:
                filename = self._module_filename(module.id)

            if filename in files:
                msg = f"Two modules compile to {filename}: {files[filename][0]} and {module.id}"
                raise CompileError(msg, source=module.id)
            files[filename] = (module.id, text)

        return files

    def _module_filename(self, module_id: str) -> str:
        """Output filename for an unchunked module, from its place in the input dir."""
        relative = os.path.relpath(module_id, self.input_dir)
        if relative.startswith(os.pardir):
            # Outside the input dir: stem plus a digest of the full path
            return _fill("[name]-[hash].py", Path(module_id).stem, module_id)
        return "__".join(Path(relative).with_suffix("").parts) + ".py"


def _fill(pattern: str, name: str, text: str) -> str:
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:8]
    return pattern.replace("[name]", name).replace("[hash]", digest)
