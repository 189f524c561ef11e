"""Tests for warble.bundler.runtime — linking route tables to chunks."""

from pathlib import Path

import pytest

from warble.bundler.runtime import ChunkTable
from warble.component import Component
from warble.errors import ConfigurationError, LoadError
from warble.routes import component, lazy
from warble.routing.route import Direct, LazyLoader

CHUNK = """\
from warble.component import Component

script = Component(source_path="/site/src/post.kida", template_name="post.kida", template="<p></p>")
"""


@pytest.fixture
def table(tmp_path: Path) -> ChunkTable:
    (tmp_path / "post.py").write_text(CHUNK)
    return ChunkTable(str(tmp_path / "routes.py"), {"post.kida": "post.py"})


class TestChunkTable:
    def test_load(self, table: ChunkTable) -> None:
        assert table.load("post.kida").template_name == "post.kida"

    def test_load_unknown(self, table: ChunkTable) -> None:
        with pytest.raises(LoadError, match="no compiled chunk"):
            table.load("nope.kida")

    def test_component_marker_loads_eagerly(self, table: ChunkTable) -> None:
        (node,) = table.link([{"path": "/", "component": component("post.kida")}])

        assert isinstance(node.component, Direct)
        assert node.resolved.source_path == "/site/src/post.kida"

    @pytest.mark.asyncio
    async def test_lazy_marker_defers(self, table: ChunkTable) -> None:
        (node,) = table.link([{"path": "/", "component": lazy("post.kida")}])

        assert isinstance(node.component, LazyLoader)
        loaded = await node.component.resolve()
        assert isinstance(loaded, Component)

    def test_plain_component_accepted(self, table: ChunkTable) -> None:
        comp = Component(source_path="/x.kida", template_name="x.kida", template="")
        (node,) = table.link([{"path": "/", "component": comp}])
        assert node.resolved is comp

    def test_other_values_rejected(self, table: ChunkTable) -> None:
        with pytest.raises(ConfigurationError, match="component"):
            table.link([{"path": "/", "component": "post.kida"}])
