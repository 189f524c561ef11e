"""Tests for warble.routing.router — trie router over route nodes."""

import pytest

from warble.component import Component
from warble.errors import ConfigurationError, NotFound, RouteParamError, UnreachableRouteError
from warble.routing.route import Direct, FlatRoute, RouteNode
from warble.routing.router import Router, parse_path


def _node(path: str, name: str | None = None) -> RouteNode:
    component = Component(source_path=f"/src{path}.kida", template_name="x.kida", template="")
    return RouteNode(path=path, component=Direct(component), name=name)


def _router(*routes: tuple[str, str | None]) -> Router:
    router = Router()
    for path, name in routes:
        node = _node(path, name)
        router.add(FlatRoute(path=path, node=node, chain=(node,)))
    router.compile()
    return router


class TestParsePath:
    def test_static(self) -> None:
        segments = parse_path("/blog/posts")
        assert [s.value for s in segments] == ["blog", "posts"]
        assert not any(s.is_param for s in segments)

    def test_param(self) -> None:
        segments = parse_path("/blog/{slug}")
        assert segments[1].is_param is True
        assert segments[1].param_name == "slug"
        assert segments[1].param_type == "str"

    def test_typed_param(self) -> None:
        assert parse_path("/page/{n:int}")[1].param_type == "int"

    def test_root(self) -> None:
        assert parse_path("/") == []

    def test_rejects_colon_params(self) -> None:
        with pytest.raises(ConfigurationError, match="/blog/\\{slug\\}"):
            parse_path("/blog/:slug")

    def test_rejects_unknown_converter(self) -> None:
        with pytest.raises(ConfigurationError, match="converter"):
            parse_path("/x/{id:uuid}")


class TestMatch:
    def test_static_and_root(self) -> None:
        router = _router(("/", "home"), ("/about", "about"))

        assert router.match("/").route.name == "home"
        assert router.match("/about/").route.name == "about"

    def test_params(self) -> None:
        router = _router(("/blog/{slug}", "post"))
        match = router.match("/blog/hello")

        assert match.route.name == "post"
        assert match.path_params == {"slug": "hello"}

    def test_query_and_hash_ignored(self) -> None:
        router = _router(("/blog/{slug}", "post"))
        assert router.match("/blog/hello?draft=1#top").path_params == {"slug": "hello"}

    def test_static_preferred_over_param(self) -> None:
        router = _router(("/blog/{slug}", "post"), ("/blog/archive", "archive"))
        assert router.match("/blog/archive").route.name == "archive"

    def test_typed_param_rejects(self) -> None:
        router = _router(("/page/{n:int}", "page"))
        with pytest.raises(NotFound):
            router.match("/page/two")

    def test_catch_all(self) -> None:
        router = _router(("/docs/{rest:path}", "docs"))
        assert router.match("/docs/a/b/c").path_params == {"rest": "a/b/c"}

    def test_first_registration_wins(self) -> None:
        router = _router(("/dup", "first"), ("/dup", "second"))
        assert router.match("/dup").route.name == "first"

    def test_not_found(self) -> None:
        with pytest.raises(NotFound):
            _router(("/", "home")).match("/missing")

    def test_add_after_compile(self) -> None:
        router = _router(("/", "home"))
        node = _node("/late")
        with pytest.raises(RuntimeError):
            router.add(FlatRoute(path="/late", node=node))


class TestResolve:
    def test_static(self) -> None:
        router = _router(("/about", "about"))
        assert router.has_route("about") is True
        assert router.resolve("about", {}) == "/about"

    def test_params_substituted(self) -> None:
        router = _router(("/blog/{slug}/{page:int}", "post"))
        assert router.resolve("post", {"slug": "hello", "page": 2}) == "/blog/hello/2"

    def test_root(self) -> None:
        assert _router(("/", "home")).resolve("home", {}) == "/"

    def test_unknown_name(self) -> None:
        router = _router(("/", "home"))
        assert router.has_route("nope") is False
        with pytest.raises(UnreachableRouteError):
            router.resolve("nope", {})

    def test_missing_param(self) -> None:
        router = _router(("/blog/{slug}", "post"))
        with pytest.raises(RouteParamError, match="slug"):
            router.resolve("post", {})

    def test_invalid_param(self) -> None:
        router = _router(("/page/{n:int}", "page"))
        with pytest.raises(RouteParamError, match="int"):
            router.resolve("page", {"n": "two"})


class TestNavigation:
    @pytest.mark.asyncio
    async def test_push_sets_current_route(self) -> None:
        router = _router(("/blog/{slug}", "post"))

        location = await router.push("/blog/hello?x=1")
        await router.is_ready()

        assert router.current_route is location
        assert location.path == "/blog/hello"
        assert location.name == "post"
        assert location.params == {"slug": "hello"}
        assert len(location.matched) == 1

    @pytest.mark.asyncio
    async def test_push_unmatched_url(self) -> None:
        router = _router(("/", "home"))

        location = await router.push("/feed.xml")
        await router.is_ready()

        assert location.name is None
        assert location.params == {}

    def test_no_current_route_before_push(self) -> None:
        assert Router().current_route is None
