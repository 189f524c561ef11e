"""Shared fixtures: a throwaway site under tmp_path."""

import textwrap
from pathlib import Path

import pytest

from warble.paths import PathResolver


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """Working directory of a site with ``src/`` as input dir."""
    (tmp_path / "src" / "_includes").mkdir(parents=True)
    return tmp_path.resolve()


@pytest.fixture
def write(site: Path):
    """Write a dedented file relative to the site root."""

    def _write(relative: str, text: str) -> Path:
        path = site / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def resolver(site: Path) -> PathResolver:
    r = PathResolver(site)
    r.set_input_dir("src")
    r.set_includes_dir("src/_includes")
    return r
