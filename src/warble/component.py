"""The value every compiled component module exports.

A compiled module (see ``warble.bundler.codegen``) runs the component's
``<script>`` block, then builds one ``Component`` from the template
text and whatever ``data``, ``permalink`` and ``pagination`` names the
script defined.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Component:
    """A compiled single-file component.

    Attributes:
        source_path: Absolute path of the ``.kida`` source.  This is the
            component's identity across rebuilds.
        template_name: Name relative to the input dir, as used by
            ``{% include %}`` tags and route tables.
        template: kida source with ``<style>`` and ``<script>`` removed.
        imports: Template names referenced by the template.
        data: Mapping, or zero-argument callable returning one.
        permalink: Permalink value or callable declared by the script.
        pagination: Pagination entries declared by the script.
    """

    source_path: str
    template_name: str
    template: str
    imports: tuple[str, ...] = ()
    data: Mapping[str, Any] | Callable[[], Mapping[str, Any]] | None = None
    permalink: Any = None
    pagination: Any = None

    def get_data(self) -> dict[str, Any]:
        """Return the component's own data, including permalink/pagination."""
        value = self.data() if callable(self.data) else self.data
        result = dict(value or {})
        if self.permalink is not None:
            result["permalink"] = self.permalink
        if self.pagination is not None:
            result["pagination"] = self.pagination
        return result

    def __repr__(self) -> str:
        return f"<Component {self.template_name!r}>"
