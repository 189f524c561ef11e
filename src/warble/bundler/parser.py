"""Single-file component parsing.

A component file holds up to three parts::

    <script lang="py">
    def data():
        return {"title": "Posts"}
    </script>

    <h1>{{ page_data.title }}</h1>
    {% include "includes/card.kida" %}

    <style>
    h1 { color: rebeccapurple; }
    </style>

- ``<style>`` blocks are removed and returned as CSS.
- The ``<script lang="py">`` block is removed and returned as Python
  source.  Other ``<script>`` tags are client-side and stay in the
  template.
- Everything else is the kida template.
"""

import re
import textwrap
from dataclasses import dataclass

_STYLE_RE = re.compile(r"<style\b[^>]*>(.*?)</style\s*>", re.DOTALL | re.IGNORECASE)

_SCRIPT_RE = re.compile(
    r"<script\b[^>]*\blang\s*=\s*[\"']?py(?:thon)?[\"']?[^>]*>(.*?)</script\s*>",
    re.DOTALL | re.IGNORECASE,
)

# {% include "x" %}, {% extends "x" %}, {% import "x" as m %}, {% from "x" import y %}
_TEMPLATE_REF_RE = re.compile(
    r"\{%-?\s*(?:include|extends|import|from|embed)\s+[\"']([^\"']+)[\"']"
)

# component("x") and lazy("x") calls in a route table
_ROUTE_REF_RE = re.compile(r"\b(?:component|lazy)\(\s*[\"']([^\"']+)[\"']")


@dataclass(frozen=True, slots=True)
class ParsedComponent:
    template: str
    script: str = ""
    styles: tuple[str, ...] = ()
    imports: tuple[str, ...] = ()


def parse_component(text: str, *, extension: str = ".kida") -> ParsedComponent:
    """Split component source into template, script, styles and imports.

    Only references ending in *extension* count as component imports.
    """
    styles = tuple(m.group(1) for m in _STYLE_RE.finditer(text))
    text = _STYLE_RE.sub("", text)

    scripts = [textwrap.dedent(m.group(1)).strip("\n") for m in _SCRIPT_RE.finditer(text)]
    text = _SCRIPT_RE.sub("", text)

    return ParsedComponent(
        template=text.strip("\n"),
        script="\n\n".join(scripts),
        styles=styles,
        imports=_unique(_TEMPLATE_REF_RE.findall(text), extension),
    )


def find_route_references(text: str, *, extension: str = ".kida") -> tuple[str, ...]:
    """Template names referenced by ``component()``/``lazy()`` in a route table."""
    return _unique(_ROUTE_REF_RE.findall(text), extension)


def _unique(names: list[str], extension: str) -> tuple[str, ...]:
    seen: list[str] = []
    for name in names:
        if name.endswith(extension) and name not in seen:
            seen.append(name)
    return tuple(seen)
