"""Unit tests for loading ``pages.yaml`` into the site configuration model."""

from __future__ import annotations

import typing as typ
from pathlib import Path
from textwrap import dedent

import pytest

from lcms_pages.config import SiteConfigError, load_site_config

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@pytest.fixture
def write_config(tmp_path: Path) -> cabc.Callable[[str], Path]:
    """Return a helper that writes YAML text to ``pages.yaml`` in ``tmp_path``."""

    def _write(text: str) -> Path:
        path = tmp_path / "pages.yaml"
        path.write_text(dedent(text).strip() + "\n", encoding="utf-8")
        return path

    return _write


def test_pages_and_designs_are_parsed(write_config: cabc.Callable[[str], Path]) -> None:
    path = write_config(
        """
        defaults:
          output_dir: site
          store: fixtures/content.json
        pages:
          home:
            content_id: 1
            title: Welcome
            output: index.html
            blocks: true
            layout_template_id: 4
          about_us:
            content_id: "2"
        designs:
          landing:
            source: designs/landing.pen
            variables:
              primary: "#2563eb"
              spacing: 8
              unset: null
        """
    )
    site = load_site_config(path)
    assert site.output_dir == Path("site")
    assert site.store == Path("fixtures/content.json")

    home = site.get_page("home")
    assert home.content_id == 1
    assert home.title == "Welcome"
    assert home.output == Path("site/index.html")
    assert home.blocks is True
    assert home.layout_template_id == 4

    about = site.get_page("about_us")
    assert about.content_id == 2
    assert about.title == "About Us"
    assert about.output == Path("site/about_us.html")
    assert about.blocks is False

    landing = site.get_design("landing")
    assert landing.source == Path("designs/landing.pen")
    assert landing.output == Path("site/landing.html")
    assert landing.title == "Landing"
    assert landing.variables == {"primary": "#2563eb", "spacing": "8"}


def test_defaults_apply_without_defaults_section(
    write_config: cabc.Callable[[str], Path],
) -> None:
    site = load_site_config(write_config("designs:\n  hero-test:\n    source: a.pen\n"))
    assert site.output_dir == Path("public")
    assert site.store is None
    assert site.pages == {}
    assert site.get_design("hero-test").title == "Hero Test"


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_site_config(tmp_path / "absent.yaml")


def test_top_level_must_be_a_mapping(write_config: cabc.Callable[[str], Path]) -> None:
    with pytest.raises(TypeError):
        load_site_config(write_config("- just\n- a list\n"))


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("defaults:\n  output_dir: x\n", "No pages or designs"),
        ("pages:\n  home: 3\n", "must be a mapping"),
        ("pages:\n  home:\n    title: Home\n", "content_id"),
        ("designs:\n  d:\n    title: D\n", "source"),
    ],
)
def test_invalid_entries(
    write_config: cabc.Callable[[str], Path], text: str, message: str
) -> None:
    with pytest.raises(SiteConfigError, match=message):
        load_site_config(write_config(text))


def test_unknown_keys_list_known_entries(write_config: cabc.Callable[[str], Path]) -> None:
    site = load_site_config(write_config("pages:\n  home:\n    content_id: 1\n"))
    with pytest.raises(KeyError, match="Known pages: home"):
        site.get_page("missing")
    with pytest.raises(KeyError, match="Known designs"):
        site.get_design("missing")
