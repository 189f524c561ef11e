"""Per-component CSS tracking.

Two layers:

- ``CssLedger`` collects the ``<style>`` text the compiler extracts,
  keyed by logical component path, and forwards output-to-output
  relationships to a registry.  It never aggregates.
- A ``CssRegistry`` owns compiled CSS keyed by output file and answers
  "which CSS does this URL need".  ``InlineCssRegistry`` is the
  in-process default; hosts may pass their own.
"""

from typing import Protocol

from warble.paths import PathResolver


class CssRegistry(Protocol):
    """What warble needs from a CSS registry."""

    def add_code(self, output_filename: str, css_text: str) -> None: ...

    def add_relationship(self, output_filename: str, imported_output_filename: str) -> None: ...

    def get_aggregated_css_for_url(self, url: str) -> str: ...

    def reset_all(self) -> None: ...

    def reset_one(self, output_filename: str) -> None: ...


class InlineCssRegistry:
    """Aggregates component CSS per page URL for inlining into layouts.

    Pages declare the components they render with
    ``add_component_for_url()``; relationships pull in the CSS of every
    component those outputs import, transitively.
    """

    __slots__ = ("_code", "_relationships", "_url_components")

    def __init__(self) -> None:
        self._code: dict[str, list[str]] = {}
        self._relationships: dict[str, list[str]] = {}
        self._url_components: dict[str, list[str]] = {}

    def add_code(self, output_filename: str, css_text: str) -> None:
        self._code.setdefault(output_filename, []).append(css_text)

    def add_relationship(self, output_filename: str, imported_output_filename: str) -> None:
        children = self._relationships.setdefault(output_filename, [])
        if imported_output_filename not in children:
            children.append(imported_output_filename)

    def add_component_for_url(self, output_filename: str, url: str) -> None:
        components = self._url_components.setdefault(url, [])
        if output_filename not in components:
            components.append(output_filename)

    def get_components_for_url(self, url: str) -> list[str]:
        """Output files used by *url*, roots first, each listed once."""
        seen: list[str] = []
        stack = list(reversed(self._url_components.get(url, [])))
        while stack:
            name = stack.pop()
            if name in seen:
                continue
            seen.append(name)
            stack.extend(reversed(self._relationships.get(name, [])))
        return seen

    def get_aggregated_css_for_url(self, url: str) -> str:
        parts: list[str] = []
        for name in self.get_components_for_url(url):
            for css in self._code.get(name, []):
                if css not in parts:
                    parts.append(css)
        return "\n".join(parts)

    # Name used by layout filters
    get_code_for_url = get_aggregated_css_for_url

    def reset_all(self) -> None:
        self._code.clear()

    def reset_one(self, output_filename: str) -> None:
        self._code.pop(output_filename, None)


class CssLedger:
    """CSS fragments per logical component path.

    Fragments accumulate: recompiling a component without first calling
    ``reset()`` or ``reset_one()`` records its CSS twice.
    """

    __slots__ = ("_entries", "_extension", "_resolver", "registry")

    def __init__(
        self,
        resolver: PathResolver,
        registry: CssRegistry | None = None,
        *,
        extension: str = ".kida",
    ) -> None:
        self._resolver = resolver
        self._extension = extension
        self._entries: dict[str, list[str]] = {}
        self.registry = registry

    def record_css(self, source_path: str, css_text: str) -> None:
        logical = self._resolver.to_logical_path(source_path, self._extension)
        self._entries.setdefault(logical, []).append(css_text.strip())

    def get_css(self, logical_path: str) -> str:
        return "\n".join(self._entries.get(logical_path, []))

    def reset(self) -> None:
        self._entries.clear()

    def reset_one(self, logical_path: str) -> None:
        self._entries[logical_path] = []

    def record_relationship(self, output_file: str, imported_output_file: str) -> None:
        if self.registry is not None:
            self.registry.add_relationship(output_file, imported_output_file)
