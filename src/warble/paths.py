"""Mapping between source files, logical component paths, and outputs.

Three spellings of one component:

- **source path**: absolute on-disk path, e.g. ``/site/src/blog/post.kida``
- **logical path**: working-directory relative, e.g. ``./src/blog/post.kida``
- **template name**: input-directory relative, e.g. ``blog/post.kida``
  (what ``{% include %}`` tags and route tables refer to)

Compiled outputs are bare filenames inside the cache directory.
"""

import os
from pathlib import Path

from warble.errors import ConfigurationError


class PathResolver:
    """Path conversions anchored at a working directory.

    ``set_input_dir()`` and ``set_includes_dir()`` take paths relative to
    the working directory, the way the host build reports them.
    """

    __slots__ = ("_includes_dir", "_input_dir", "working_dir")

    def __init__(self, working_dir: str | Path) -> None:
        self.working_dir = str(Path(working_dir).resolve())
        self._input_dir: str | None = None
        self._includes_dir: str | None = None

    def set_input_dir(self, input_dir: str | Path) -> None:
        self._input_dir = os.path.normpath(os.path.join(self.working_dir, input_dir))

    def set_includes_dir(self, includes_dir: str | Path) -> None:
        self._includes_dir = os.path.normpath(os.path.join(self.working_dir, includes_dir))

    @property
    def input_dir(self) -> str:
        if self._input_dir is None:
            msg = "Input directory is not set; call init() before building."
            raise ConfigurationError(msg)
        return self._input_dir

    @property
    def includes_dir(self) -> str | None:
        return self._includes_dir

    def to_logical_path(self, source_path: str, extension: str = ".kida") -> str:
        """Return the working-directory relative path of *source_path*.

        Paths outside the working directory are kept as given.  The
        result is cut right after the last occurrence of *extension*, so
        compiler ids carrying a query suffix (``post.kida?type=script``)
        map to the same component.
        """
        file_path = source_path
        if source_path.startswith(self.working_dir):
            file_path = "." + source_path[len(self.working_dir) :]
        file_path = file_path.replace(os.sep, "/")

        index = file_path.rfind(extension)
        if index == -1:
            return file_path
        return file_path[: index + len(extension)]

    def is_under_includes_dir(self, source_path: str) -> bool:
        """True for reusable includes, False for page-level components."""
        if self._includes_dir is None:
            return False
        return source_path.startswith(self._includes_dir)

    @staticmethod
    def to_output_path(cache_dir: str, compiled_filename: str) -> str:
        return os.path.join(cache_dir, compiled_filename)

    def to_source_path(self, path: str | Path) -> str:
        """Absolute, normalised form of a host-reported path."""
        return os.path.normpath(os.path.join(self.working_dir, path))

    def source_for_template(self, template_name: str) -> str:
        return os.path.normpath(os.path.join(self.input_dir, template_name))
