"""Source discovery and compile passes.

The orchestrator decides *what* to compile and feeds the results on;
the compiler decides *how*.  A compile failure aborts the whole pass:
``CompileError`` propagates and no outputs are recorded.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from warble.bundler.compiler import SCRIPT_SUFFIX
from warble.bundler.types import CompiledOutput, ComponentCompiler, ModuleInfo

if TYPE_CHECKING:
    from warble.css import CssLedger
    from warble.paths import PathResolver

logger = logging.getLogger("warble.bundler")


class BundleOrchestrator:
    """Discovers component sources and runs them through a compiler."""

    __slots__ = ("_css", "_extension", "_resolver", "compiler")

    def __init__(
        self,
        resolver: PathResolver,
        css: CssLedger,
        compiler: ComponentCompiler,
        *,
        extension: str = ".kida",
    ) -> None:
        self._resolver = resolver
        self._css = css
        self._extension = extension
        self.compiler = compiler

    def discover(self, pattern: str | None = None) -> list[str]:
        """Absolute paths under the input dir matching *pattern*, case-insensitively."""
        pattern = pattern or f"**/*{self._extension}"
        root = Path(self._resolver.input_dir)
        return sorted(
            str(path) for path in root.glob(pattern, case_sensitive=False) if path.is_file()
        )

    async def compile(self, sources: Sequence[str]) -> list[CompiledOutput]:
        """Compile *sources*; return the outputs that stand for a source file."""
        if not sources:
            logger.debug("No component sources to compile")
            return []

        result = await self.compiler.compile(list(sources), on_css=self._css.record_css)
        return [entry for entry in result.outputs if entry.facade_source is not None]

    async def compile_routes_chunked(
        self,
        sources: Sequence[str],
        chunk_names: dict[str, str] | None = None,
        chunk_imports: dict[str, tuple[str, ...]] | None = None,
    ) -> tuple[list[CompiledOutput], dict[str, str], dict[str, tuple[str, ...]]]:
        """Compile a route table with one chunk per component.

        Returns the outputs plus two tables the registry needs:

        - ``chunk_names``: chunk name → component source path.  Names
          are the file stem, then ``stem-1``, ``stem-2``… on collision.
        - ``chunk_imports``: component source path → source paths its
          script sub-module imports.
        """
        chunk_names = {} if chunk_names is None else chunk_names
        chunk_imports = {} if chunk_imports is None else chunk_imports
        component_re = re.compile(rf"([^/\\]*){re.escape(self._extension)}$")

        def assign_chunk(module_id: str, info: ModuleInfo) -> str | None:
            match = component_re.search(module_id)
            if match is None:
                if module_id.endswith(SCRIPT_SUFFIX):
                    chunk_imports[module_id.removesuffix(SCRIPT_SUFFIX)] = info.imported_ids
                return None

            chunk_name = match.group(1)
            counter = 0
            while chunk_name in chunk_names:
                counter += 1
                chunk_name = f"{match.group(1)}-{counter}"
            chunk_names[chunk_name] = module_id
            return chunk_name

        def chunk_file_names(name: str) -> str:
            if name in chunk_names:
                return "[name].py"
            return "[name]-[hash].py"

        if not sources:
            return [], chunk_names, chunk_imports

        result = await self.compiler.compile(
            list(sources),
            on_css=self._css.record_css,
            manual_chunks=assign_chunk,
            chunk_file_names=chunk_file_names,
        )
        outputs = [entry for entry in result.outputs if entry.facade_source is not None]
        return outputs, chunk_names, chunk_imports
