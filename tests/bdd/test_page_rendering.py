"""Behaviour tests for rendering element pages using pytest-bdd.

These scenarios build a small in-memory content store, render a complete
page document through :class:`~lcms_pages.page.PageRenderer`, and inspect the
result with BeautifulSoup: block grouping, escaping of slot data, scoping of
per-instance custom CSS, and the recent-posts enrichment.

Usage
-----
Run ``pytest tests/bdd/test_page_rendering.py -v``.
"""

from __future__ import annotations

import datetime as dt
import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, scenarios, then, when

from lcms_pages.page import EnrichmentRegistry, MemoryContentStore, PageRenderer

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "page_rendering.feature"
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]
HERO_SCOPE = '.lcms-el[data-instance-id="21"]'


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Share mutable scenario data across pytest-bdd steps."""
    return {}


@given("a content store with a hero instance assigned to a grid block")
def given_hero_in_grid_block(scenario_state: ScenarioState) -> None:
    scenario_state["store"] = MemoryContentStore(
        elements={
            4: {
                "slug": "hero",
                "name": "Hero",
                "html_template": '<section class="hero"><h1>{{title}}</h1></section>',
                "css": ".hero h1 { margin: 0; }",
            }
        },
        page_elements=[
            {
                "id": 21,
                "content_id": 3,
                "element_id": 4,
                "block_id": 8,
                "slot_data_json": '{"title": "Fish & <Chips>"}',
                "style_data_json": '{"custom_css": "h1 { color: #222; }", "bg_color": "#eee"}',
            }
        ],
        page_blocks=[{"id": 8, "content_id": 3, "columns": 2, "display_mode": "grid"}],
    )


@given("a content store with a recent posts instance and three posts")
def given_recent_posts(scenario_state: ScenarioState) -> None:
    scenario_state["store"] = MemoryContentStore(
        elements={
            5: {
                "slug": "recent-posts",
                "name": "Recent Posts",
                "html_template": '{{#posts}}<article data-slug="{{slug}}">{{title}}</article>{{/posts}}',
            }
        },
        page_elements=[
            {"id": 30, "content_id": 3, "element_id": 5, "slot_data_json": '{"count": 3}'}
        ],
        posts=[
            {"title": "First", "slug": "first", "status": "published",
             "published_at": "2024-01-01T00:00:00Z"},
            {"title": "Second", "slug": "second", "status": "published",
             "published_at": "2024-06-01T00:00:00Z"},
            {"title": "Hidden", "slug": "hidden", "status": "draft",
             "published_at": "2024-07-01T00:00:00Z"},
        ],
    )


def _render(scenario_state: ScenarioState, *, blocks: bool) -> None:
    store = scenario_state["store"]
    registry = EnrichmentRegistry(store, clock=lambda: dt.datetime(2025, 1, 1, tzinfo=dt.UTC))
    html = PageRenderer(store, registry).render_document(3, "Test page", blocks=blocks)
    scenario_state["html"] = html
    scenario_state["soup"] = BeautifulSoup(html, "html.parser")


@when("I render the page document with blocks")
def when_render_with_blocks(scenario_state: ScenarioState) -> None:
    _render(scenario_state, blocks=True)


@when("I render the page document without blocks")
def when_render_without_blocks(scenario_state: ScenarioState) -> None:
    _render(scenario_state, blocks=False)


@then("the grid block wraps the hero instance")
def then_block_wraps_hero(scenario_state: ScenarioState) -> None:
    soup: BeautifulSoup = scenario_state["soup"]
    block = soup.select_one(".page-body > div.lcms-block.lcms-block-grid")
    assert block is not None, "Expected a grid block inside the page body"
    assert "grid-template-columns: repeat(2, 1fr)" in block["style"]
    hero = block.select_one("div.lcms-el.lcms-el-hero")
    assert hero is not None, "Expected the hero wrapper inside the block"
    assert hero["data-instance-id"] == "21"
    assert hero["data-element-id"] == "4"


@then("the hero title is HTML-escaped")
def then_title_escaped(scenario_state: ScenarioState) -> None:
    assert "<h1>Fish &amp; &lt;Chips&gt;</h1>" in scenario_state["html"]
    heading = scenario_state["soup"].select_one("section.hero h1")
    assert heading is not None
    assert heading.get_text() == "Fish & <Chips>"


@then("the stylesheet scopes the hero custom CSS to its instance")
def then_css_scoped(scenario_state: ScenarioState) -> None:
    html = scenario_state["html"]
    assert "/* Element: Hero */\n.hero h1 { margin: 0; }" in html
    assert f"{HERO_SCOPE}, {HERO_SCOPE} > * {{ background-color: #eee; }}" in html
    assert f"{HERO_SCOPE} h1 {{ color: #222; }}" in html


@then("only the published posts are listed newest first")
def then_posts_listed(scenario_state: ScenarioState) -> None:
    articles = scenario_state["soup"].find_all("article")
    assert [article["data-slug"] for article in articles] == ["second", "first"]
