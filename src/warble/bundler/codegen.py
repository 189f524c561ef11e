"""Python source emitted for compiled components and route tables."""

from collections.abc import Mapping

from warble.bundler.parser import ParsedComponent

_COMPONENT_TEMPLATE = '''\
"""Compiled from {template_name} by warble. Do not edit."""

from warble.component import Component

{script}

{export} = Component(
    source_path={source_path!r},
    template_name={template_name!r},
    template={template!r},
    imports={imports!r},
    data=globals().get("data"),
    permalink=globals().get("permalink"),
    pagination=globals().get("pagination"),
)
'''

_ROUTES_TEMPLATE = '''\
"""Route table compiled from {routes_name} by warble. Do not edit."""

{source}

from warble.bundler.runtime import ChunkTable as _ChunkTable  # noqa: E402

routes = _ChunkTable(__file__, {chunks!r}).link(routes)
'''


def component_module(
    parsed: ParsedComponent,
    *,
    source_path: str,
    template_name: str,
    export: str = "component",
) -> str:
    """Module source exporting one ``Component`` under *export*."""
    return _COMPONENT_TEMPLATE.format(
        template_name=template_name,
        source_path=source_path,
        script=parsed.script or "# (no script)",
        export=export,
        template=parsed.template,
        imports=parsed.imports,
    )


def routes_module(source: str, *, routes_name: str, chunks: Mapping[str, str]) -> str:
    """Module source that links a route table to its compiled chunks.

    *chunks* maps template names to output filenames next to the
    emitted module.
    """
    return _ROUTES_TEMPLATE.format(
        routes_name=routes_name,
        source=source.strip("\n"),
        chunks=dict(chunks),
    )
