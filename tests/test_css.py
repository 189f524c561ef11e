"""Tests for warble.css — CSS ledger and the inline CSS registry."""

import os

from warble.css import CssLedger, InlineCssRegistry
from warble.paths import PathResolver


class TestInlineCssRegistry:
    def test_aggregates_page_component(self) -> None:
        reg = InlineCssRegistry()
        reg.add_code("index.py", "h1 { color: red; }")
        reg.add_component_for_url("index.py", "/")

        assert reg.get_aggregated_css_for_url("/") == "h1 { color: red; }"

    def test_follows_relationships_transitively(self) -> None:
        reg = InlineCssRegistry()
        reg.add_code("page.py", ".page {}")
        reg.add_code("card.py", ".card {}")
        reg.add_code("icon.py", ".icon {}")
        reg.add_relationship("page.py", "card.py")
        reg.add_relationship("card.py", "icon.py")
        reg.add_component_for_url("page.py", "/page/")

        assert reg.get_components_for_url("/page/") == ["page.py", "card.py", "icon.py"]
        assert reg.get_aggregated_css_for_url("/page/") == ".page {}\n.card {}\n.icon {}"

    def test_shared_component_listed_once(self) -> None:
        reg = InlineCssRegistry()
        reg.add_code("card.py", ".card {}")
        reg.add_relationship("a.py", "card.py")
        reg.add_relationship("b.py", "card.py")
        reg.add_component_for_url("a.py", "/")
        reg.add_component_for_url("b.py", "/")

        assert reg.get_aggregated_css_for_url("/") == ".card {}"

    def test_cycle_terminates(self) -> None:
        reg = InlineCssRegistry()
        reg.add_relationship("a.py", "b.py")
        reg.add_relationship("b.py", "a.py")
        reg.add_component_for_url("a.py", "/")

        assert reg.get_components_for_url("/") == ["a.py", "b.py"]

    def test_unknown_url_is_empty(self) -> None:
        assert InlineCssRegistry().get_aggregated_css_for_url("/nope/") == ""

    def test_reset_one_keeps_others(self) -> None:
        reg = InlineCssRegistry()
        reg.add_code("a.py", ".a {}")
        reg.add_code("b.py", ".b {}")
        reg.add_component_for_url("a.py", "/")
        reg.add_component_for_url("b.py", "/")

        reg.reset_one("a.py")
        assert reg.get_code_for_url("/") == ".b {}"

    def test_reset_all_drops_code(self) -> None:
        reg = InlineCssRegistry()
        reg.add_code("a.py", ".a {}")
        reg.add_component_for_url("a.py", "/")

        reg.reset_all()
        assert reg.get_aggregated_css_for_url("/") == ""


class TestCssLedger:
    def _source(self, resolver: PathResolver, name: str) -> str:
        return os.path.join(resolver.input_dir, name)

    def test_records_stripped_css_by_logical_path(self, resolver: PathResolver) -> None:
        ledger = CssLedger(resolver)
        ledger.record_css(self._source(resolver, "index.kida"), "\n  h1 {}\n")

        assert ledger.get_css("./src/index.kida") == "h1 {}"

    def test_script_id_maps_to_component(self, resolver: PathResolver) -> None:
        ledger = CssLedger(resolver)
        ledger.record_css(self._source(resolver, "index.kida") + "?type=script", "p {}")

        assert ledger.get_css("./src/index.kida") == "p {}"

    def test_fragments_accumulate(self, resolver: PathResolver) -> None:
        ledger = CssLedger(resolver)
        source = self._source(resolver, "index.kida")
        ledger.record_css(source, "a {}")
        ledger.record_css(source, "b {}")

        assert ledger.get_css("./src/index.kida") == "a {}\nb {}"

    def test_reset_one(self, resolver: PathResolver) -> None:
        ledger = CssLedger(resolver)
        ledger.record_css(self._source(resolver, "a.kida"), "a {}")
        ledger.record_css(self._source(resolver, "b.kida"), "b {}")

        ledger.reset_one("./src/a.kida")
        assert ledger.get_css("./src/a.kida") == ""
        assert ledger.get_css("./src/b.kida") == "b {}"

    def test_reset(self, resolver: PathResolver) -> None:
        ledger = CssLedger(resolver)
        ledger.record_css(self._source(resolver, "a.kida"), "a {}")
        ledger.reset()
        assert ledger.get_css("./src/a.kida") == ""

    def test_relationship_forwarded(self, resolver: PathResolver) -> None:
        reg = InlineCssRegistry()
        ledger = CssLedger(resolver, reg)
        ledger.record_relationship("page.py", "card.py")
        reg.add_component_for_url("page.py", "/")

        assert reg.get_components_for_url("/") == ["page.py", "card.py"]

    def test_relationship_without_registry_is_noop(self, resolver: PathResolver) -> None:
        CssLedger(resolver).record_relationship("page.py", "card.py")

    def test_reset_then_record_leaves_no_residue(self, resolver: PathResolver) -> None:
        ledger = CssLedger(resolver)
        source = self._source(resolver, "x.kida")
        ledger.record_css(source, ".a{color:red}")

        ledger.reset_one("./src/x.kida")
        ledger.record_css(source, ".a{color:blue}")

        assert ledger.get_css("./src/x.kida") == ".a{color:blue}"
