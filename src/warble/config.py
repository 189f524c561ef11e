"""Plugin configuration.

PluginConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from warble.errors import ConfigurationError

if TYPE_CHECKING:
    from warble.css import CssRegistry

# Compiler defaults; user options are merged over these.
DEFAULT_COMPILER_OPTIONS: dict[str, Any] = {
    "autoescape": True,
}


@dataclass(frozen=True, slots=True)
class PluginConfig:
    """Plugin configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = PluginConfig(cache_directory=".cache/site/", routes_file="routes.py")
    """

    # Compiled component modules are written here (relative to working_dir)
    cache_directory: str = ".cache/warble/"

    # Component source extension
    extension: str = ".kida"

    # Passed to the compiler, merged over DEFAULT_COMPILER_OPTIONS
    compiler_options: Mapping[str, Any] = field(default_factory=dict)

    # Route table source, relative to the input dir. Enables the chunked build.
    routes_file: str | None = None

    # App shell component, relative to the input dir; pages render into its "content" block
    wrapper_component: str | None = None

    # Shared CSS registry (e.g. one the host already aggregates from)
    css_registry: CssRegistry | None = None

    # Defaults to the process working directory at plugin creation
    working_dir: str | Path | None = None

    # Log the component count after each build
    verbose: bool = True

    def __post_init__(self) -> None:
        if not self.extension.startswith("."):
            msg = f"extension must start with '.', got {self.extension!r}"
            raise ConfigurationError(msg)
        if not self.cache_directory:
            msg = "cache_directory must not be empty"
            raise ConfigurationError(msg)
        if self.routes_file is not None and not self.routes_file.endswith(".py"):
            msg = f"routes_file must be a Python module, got {self.routes_file!r}"
            raise ConfigurationError(msg)

    def merged_compiler_options(self) -> dict[str, Any]:
        """Return compiler options with user values over the defaults."""
        return {**DEFAULT_COMPILER_OPTIONS, **self.compiler_options}

    def resolved_working_dir(self) -> Path:
        """Return the absolute working directory."""
        if self.working_dir is None:
            return Path.cwd()
        return Path(self.working_dir).resolve()
