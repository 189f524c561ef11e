"""Tests for warble.bundler.compiler — kida component compilation."""

import os
from pathlib import Path

import pytest

from warble.bundler.compiler import KidaCompiler
from warble.component import Component
from warble.errors import CompileError
from warble.registry import exec_module_file


@pytest.fixture
def compiler(site: Path) -> KidaCompiler:
    return KidaCompiler(input_dir=site / "src", cache_dir=site / ".cache")


def _by_filename(result):
    return {o.output_filename: o for o in result.outputs}


class TestCompile:
    @pytest.mark.asyncio
    async def test_entry_and_shared_include(self, site, write, compiler) -> None:
        index = write(
            "src/index.kida",
            """
            <h1>Home</h1>
            {% include "_includes/card.kida" %}
            <style>h1 { color: red; }</style>
            """,
        )
        card = write("src/_includes/card.kida", "<div class=card></div>\n")

        result = await compiler.compile([str(index)])
        outputs = _by_filename(result)

        assert outputs["index.py"].facade_source == str(index)
        assert outputs["index.py"].is_entry is True

        shared = outputs["_includes__card.py"]
        assert shared.facade_source is None
        assert outputs["index.py"].imported_output_filenames == ("_includes__card.py",)

        assert result.css_by_source == {str(index): ["h1 { color: red; }"]}
        assert str(card) in result.modules
        assert (site / ".cache" / "index.py").is_file()

    @pytest.mark.asyncio
    async def test_on_css_hook(self, write, compiler) -> None:
        index = write("src/index.kida", "<p></p><style>p {}</style><style>a {}</style>")
        seen: list[tuple[str, str]] = []

        await compiler.compile([str(index)], on_css=lambda src, css: seen.append((src, css)))

        assert seen == [(str(index), "p {}"), (str(index), "a {}")]

    @pytest.mark.asyncio
    async def test_script_submodule_reported(self, write, compiler) -> None:
        index = write("src/index.kida", '{% include "_includes/card.kida" %}')
        card = write("src/_includes/card.kida", "<div></div>")

        result = await compiler.compile([str(index)])
        script = result.modules[str(index) + "?type=script"]

        assert script.imported_ids == (str(card),)

    @pytest.mark.asyncio
    async def test_compiled_module_exports_component(self, site, write, compiler) -> None:
        index = write(
            "src/blog/index.kida",
            """
            <script lang="py">
            permalink = "/blog/"
            pagination = ["posts"]

            def data():
                return {"title": "Blog"}
            </script>
            <h1>{{ page_data.title }}</h1>
            """,
        )

        await compiler.compile([str(index)])
        module = exec_module_file(site / ".cache" / "blog__index.py", "_test_blog_index")
        component = module.component

        assert isinstance(component, Component)
        assert component.source_path == str(index)
        assert component.template_name == "blog/index.kida"
        assert component.template == "<h1>{{ page_data.title }}</h1>"
        assert component.get_data() == {
            "title": "Blog",
            "permalink": "/blog/",
            "pagination": ["posts"],
        }

    @pytest.mark.asyncio
    async def test_entries_with_same_stem(self, write, compiler) -> None:
        a = write("src/a/index.kida", "<p>a</p>")
        b = write("src/b/index.kida", "<p>b</p>")

        result = await compiler.compile([str(a), str(b)])
        names = {o.facade_source: o.output_filename for o in result.outputs}

        assert names == {str(a): "a__index.py", str(b): "b__index.py"}

    @pytest.mark.asyncio
    async def test_filename_independent_of_batch(self, write, compiler) -> None:
        a = write("src/a/index.kida", "<p>a</p>")
        b = write("src/b/index.kida", "<p>b</p>")
        await compiler.compile([str(a), str(b)])

        result = await compiler.compile([str(b)])

        assert [o.output_filename for o in result.outputs] == ["b__index.py"]

    @pytest.mark.asyncio
    async def test_shared_module_css_not_reported(self, write, compiler) -> None:
        index = write("src/index.kida", '{% include "_includes/card.kida" %}<style>p {}</style>')
        write("src/_includes/card.kida", "<div></div><style>.card {}</style>")
        seen: list[tuple[str, str]] = []

        result = await compiler.compile(
            [str(index)], on_css=lambda src, css: seen.append((src, css))
        )

        assert seen == [(str(index), "p {}")]
        assert list(result.css_by_source) == [str(index)]

    @pytest.mark.asyncio
    async def test_manual_chunks(self, write, compiler) -> None:
        index = write("src/index.kida", '{% include "_includes/card.kida" %}')
        card = write("src/_includes/card.kida", "<div></div>")

        def manual_chunks(module_id, info):
            return Path(module_id).stem if module_id.endswith(".kida") else None

        result = await compiler.compile(
            [str(index)],
            manual_chunks=manual_chunks,
            chunk_file_names=lambda name: "[name].py",
        )
        outputs = _by_filename(result)

        assert outputs["card.py"].facade_source == str(card)
        assert outputs["index.py"].imported_output_filenames == ("card.py",)


class TestCompileErrors:
    @pytest.mark.asyncio
    async def test_missing_include(self, write, compiler) -> None:
        index = write("src/index.kida", '{% include "_includes/nope.kida" %}')

        with pytest.raises(CompileError, match="imported by") as info:
            await compiler.compile([str(index)])
        assert info.value.source.endswith(os.path.join("_includes", "nope.kida"))

    @pytest.mark.asyncio
    async def test_bad_script(self, write, compiler) -> None:
        index = write("src/index.kida", '<script lang="py">def (:</script><p></p>')

        with pytest.raises(CompileError, match="invalid script"):
            await compiler.compile([str(index)])

    @pytest.mark.asyncio
    async def test_bad_template(self, write, compiler) -> None:
        index = write("src/index.kida", "{% if %}")

        with pytest.raises(CompileError) as info:
            await compiler.compile([str(index)])
        assert info.value.source == str(index)

    @pytest.mark.asyncio
    async def test_nothing_written_on_failure(self, site, write, compiler) -> None:
        write("src/good.kida", "<p></p>")
        bad = write("src/bad.kida", '<script lang="py">def (:</script>')

        with pytest.raises(CompileError):
            await compiler.compile([str(site / "src" / "good.kida"), str(bad)])
        assert not (site / ".cache" / "good.py").exists()
