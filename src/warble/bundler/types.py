"""Build data shared by the compiler and the orchestrator."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

# Called with (source path, css text) for every extracted <style> block
type CssHook = Callable[[str, str], None]

# Called for every module id in the compile graph; returns a chunk name or None
type ManualChunks = Callable[[str, "ModuleInfo"], str | None]

# Maps a chunk name to a filename pattern using [name] and [hash]
type ChunkFileNames = Callable[[str], str]


@dataclass(frozen=True, slots=True)
class ModuleInfo:
    """One module of the compile graph.

    Component ids are absolute source paths.  Each component also has a
    script sub-module, ``"<source>?type=script"``, whose imports are the
    components its template references.
    """

    id: str
    imported_ids: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CompiledOutput:
    """One file written to the cache directory.

    Attributes:
        output_filename: Filename inside the cache directory.
        facade_source: Source file this output stands for, or ``None``
            for shared chunks that belong to no single component.
        imported_output_filenames: Outputs this one statically imports.
        is_entry: Whether the facade was one of the compile inputs.
    """

    output_filename: str
    facade_source: str | None
    imported_output_filenames: tuple[str, ...] = ()
    is_entry: bool = False


@dataclass(frozen=True, slots=True)
class CompileResult:
    outputs: tuple[CompiledOutput, ...] = ()
    css_by_source: dict[str, list[str]] = field(default_factory=dict)
    modules: dict[str, ModuleInfo] = field(default_factory=dict)


class ComponentCompiler(Protocol):
    """What the orchestrator needs from a compiler.

    ``compile()`` writes its outputs before returning and raises
    ``CompileError`` on any failure; there are no partial results.
    """

    async def compile(
        self,
        sources: Sequence[str],
        *,
        on_css: CssHook | None = None,
        manual_chunks: ManualChunks | None = None,
        chunk_file_names: ChunkFileNames | None = None,
    ) -> CompileResult: ...
