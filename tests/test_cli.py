"""Tests for the ``pages`` CLI commands.

The command functions are called directly, the same way Cyclopts dispatches
them, inside a temporary working directory that holds a content-store
fixture, a pen design and a ``config/pages.yaml``.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import msgspec.json as msgspec_json
import pytest
from bs4 import BeautifulSoup

from lcms_pages import cli

CONTENT: dict[str, typ.Any] = {
    "elements": {"1": {"slug": "hero", "name": "Hero", "html_template": "<h1>{{title}}</h1>"}},
    "page_elements": [
        {"id": 7, "content_id": 1, "element_id": 1, "slot_data_json": '{"title": "Hello"}'}
    ],
}
DESIGN: dict[str, typ.Any] = {
    "variables": {
        "primary": {"type": "color", "value": "#2563eb"},
        "bg": {
            "type": "color",
            "value": [
                {"value": "#fff", "theme": {}},
                {"value": "#000", "theme": {"mode": "dark"}},
            ],
        },
    },
    "children": [{"type": "text", "id": "title", "content": "Landing", "fontSize": 40}],
}


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Populate ``tmp_path`` with site inputs and make it the working directory."""
    (tmp_path / "content.json").write_bytes(msgspec_json.encode(CONTENT))
    (tmp_path / "designs").mkdir()
    (tmp_path / "designs" / "landing.pen").write_bytes(msgspec_json.encode(DESIGN))
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "pages.yaml").write_text(
        "pages:\n"
        "  home:\n"
        "    content_id: 1\n"
        "    output: index.html\n"
        "designs:\n"
        "  landing:\n"
        "    source: designs/landing.pen\n"
        "    variables:\n"
        "      primary: '#111111'\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_build_writes_every_target(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.build(config=Path("config/pages.yaml"))
    assert capsys.readouterr().out == "wrote public/index.html\nwrote public/landing.html\n"
    home = (workspace / "public" / "index.html").read_text(encoding="utf-8")
    assert "<h1>Hello</h1>" in home
    landing = (workspace / "public" / "landing.html").read_text(encoding="utf-8")
    assert '<h1 class="pen-title">Landing</h1>' in landing
    assert "--primary: #111111;" in landing


def test_build_single_design(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.build(config=Path("config/pages.yaml"), design="landing")
    assert capsys.readouterr().out == "wrote public/landing.html\n"
    assert not (workspace / "public" / "index.html").exists()


def test_build_unknown_page(workspace: Path) -> None:
    with pytest.raises(KeyError, match="Unknown page"):
        cli.build(config=Path("config/pages.yaml"), page="missing")


@pytest.mark.usefixtures("workspace")
def test_render_prints_document(capsys: pytest.CaptureFixture[str]) -> None:
    cli.render(1, store=Path("content.json"), title="Home")
    soup = BeautifulSoup(capsys.readouterr().out, "html.parser")
    assert soup.title is not None
    assert soup.title.string == "Home"
    wrapper = soup.find("div", class_="lcms-el-hero")
    assert wrapper is not None
    assert wrapper["data-instance-id"] == "7"


@pytest.mark.usefixtures("workspace")
def test_convert_writes_html_and_css(capsys: pytest.CaptureFixture[str]) -> None:
    cli.convert(
        Path("designs/landing.pen"),
        output=Path("out/landing.html"),
        css_output=Path("out/landing.css"),
        set_=("primary=#000000",),
    )
    assert capsys.readouterr().out == "wrote out/landing.css\nwrote out/landing.html\n"
    css = Path("out/landing.css").read_text(encoding="utf-8")
    assert css.endswith(
        ".pen-title { box-sizing: border-box; margin: 0; font-size: 40px; position: absolute; }\n"
    )
    assert "/* Settings overrides */\n:root {\n  --primary: #000000;\n}\n" in css
    html = Path("out/landing.html").read_text(encoding="utf-8")
    assert "<title>landing</title>" in html


@pytest.mark.usefixtures("workspace")
def test_variables_lists_each_variable(capsys: pytest.CaptureFixture[str]) -> None:
    cli.variables(Path("designs/landing.pen"))
    assert capsys.readouterr().out == (
        "primary (color): default=#2563eb\n"
        "bg (color, themed): default=#fff, mode:dark=#000\n"
    )


def test_parse_overrides() -> None:
    assert cli.parse_overrides(["a=1", " b = two=2 "]) == {"a": "1", "b": "two=2"}
    with pytest.raises(ValueError, match="NAME=VALUE"):
        cli.parse_overrides(["novalue"])
    with pytest.raises(ValueError, match="NAME=VALUE"):
        cli.parse_overrides(["=x"])
