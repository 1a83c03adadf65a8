"""Unit tests for dynamic slot-data providers and the post query they use."""

from __future__ import annotations

import datetime as dt
import typing as typ

import pytest

from lcms_pages.page import (
    ElementInstance,
    EnrichmentRegistry,
    MemoryContentStore,
    PageRenderer,
    enrich_recent_posts,
)
from lcms_pages.page.enrichment import format_post_date, post_excerpt

NOW = dt.datetime(2025, 1, 1, tzinfo=dt.UTC)

POSTS = [
    {
        "title": "Old",
        "slug": "old",
        "status": "published",
        "published_at": "2024-01-05T10:00:00Z",
        "author_name": "Ada",
        "body": "<p>Hello <b>world</b></p>",
    },
    {"title": "New", "status": "published", "published_at": "2024-05-01T09:00:00Z", "excerpt": "Short"},
    {"title": "Draft", "status": "draft", "published_at": "2024-02-01T00:00:00Z"},
    {"title": "Future", "status": "published", "published_at": "2999-01-01T00:00:00Z"},
    {"title": "About", "status": "published", "type": "page", "published_at": "2024-03-01T00:00:00Z"},
    {"title": "Undated", "status": "published"},
]


@pytest.fixture
def store() -> MemoryContentStore:
    return MemoryContentStore(posts=[dict(post) for post in POSTS])


@pytest.fixture
def registry(store: MemoryContentStore) -> EnrichmentRegistry:
    return EnrichmentRegistry(store, clock=lambda: NOW)


def test_published_posts_are_filtered_and_sorted(store: MemoryContentStore) -> None:
    titles = [post["title"] for post in store.load_published_posts(10, NOW)]
    assert titles == ["New", "Old", "Undated"]


def test_published_posts_respect_limit(store: MemoryContentStore) -> None:
    assert len(store.load_published_posts(1, NOW)) == 1
    assert store.load_published_posts(0, NOW) == []


def test_recent_posts_provider_shapes_posts(registry: EnrichmentRegistry) -> None:
    data = registry.enrich("recent-posts", {"count": 3, "heading": "Latest"})
    assert data["heading"] == "Latest"
    assert data["posts"] == [
        {
            "title": "New",
            "slug": "",
            "featured_image": "",
            "excerpt": "Short",
            "formatted_date": "May 1, 2024",
            "author_name": "Unknown",
        },
        {
            "title": "Old",
            "slug": "old",
            "featured_image": "",
            "excerpt": "Hello world",
            "formatted_date": "Jan 5, 2024",
            "author_name": "Ada",
        },
        {
            "title": "Undated",
            "slug": "",
            "featured_image": "",
            "excerpt": "",
            "formatted_date": "",
            "author_name": "Unknown",
        },
    ]


@pytest.mark.parametrize(("count", "limit"), [(3, 3), ("12", 12), (5, 6), (None, 6), ("x", 6)])
def test_recent_post_count_whitelist(count: object, limit: int) -> None:
    seen: list[int] = []

    class _Store(MemoryContentStore):
        def load_published_posts(self, limit: int, now: dt.datetime) -> list[dict[str, typ.Any]]:
            seen.append(limit)
            return super().load_published_posts(limit, now)

    enrich_recent_posts(_Store(), {"count": count}, NOW)
    assert seen == [limit]


def test_enrich_never_mutates_input(registry: EnrichmentRegistry) -> None:
    slot_data = {"count": 3, "nested": {"a": 1}}
    registry.enrich("recent-posts", slot_data)
    assert slot_data == {"count": 3, "nested": {"a": 1}}


def test_static_slugs_pass_through_as_copies(registry: EnrichmentRegistry) -> None:
    slot_data = {"title": "x"}
    enriched = registry.enrich("hero", slot_data)
    assert enriched == slot_data
    assert enriched is not slot_data
    assert not registry.is_dynamic("hero")
    assert registry.is_dynamic("recent-posts")


def test_registries_do_not_share_providers(store: MemoryContentStore) -> None:
    first = EnrichmentRegistry(store)
    second = EnrichmentRegistry(store)
    first.register("clock", lambda _store, data, now: {**data, "now": now.isoformat()})
    assert first.is_dynamic("clock")
    assert not second.is_dynamic("clock")


def test_custom_provider_receives_store_and_clock(store: MemoryContentStore) -> None:
    calls: list[tuple[object, dict[str, typ.Any], dt.datetime]] = []

    def provider(
        received: object, data: dict[str, typ.Any], now: dt.datetime
    ) -> dict[str, typ.Any]:
        calls.append((received, data, now))
        return {**data, "greeting": "hi"}

    registry = EnrichmentRegistry(store, {"greeter": provider}, clock=lambda: NOW)
    assert registry.enrich("greeter", {"name": "x"}) == {"name": "x", "greeting": "hi"}
    assert calls == [(store, {"name": "x"}, NOW)]
    assert not registry.is_dynamic("recent-posts")


def test_renderer_renders_enriched_posts(store: MemoryContentStore, registry: EnrichmentRegistry) -> None:
    instance = ElementInstance(
        id=1,
        element_id=3,
        slug="recent-posts",
        html_template=(
            "{{#posts}}<article>{{title}}|{{formatted_date}}|{{author_name}}</article>{{/posts}}"
            "{{^posts}}none{{/posts}}"
        ),
        slot_data={"count": 3},
    )
    html = PageRenderer(store, registry).render_instance(instance)
    assert (
        "<article>New|May 1, 2024|Unknown</article>"
        "<article>Old|Jan 5, 2024|Ada</article>"
        "<article>Undated||Unknown</article>"
    ) in html
    assert instance.slot_data == {"count": 3}


def test_renderer_shows_empty_state_without_posts() -> None:
    instance = ElementInstance(
        id=1,
        element_id=3,
        slug="recent-posts",
        html_template="{{#posts}}<article/>{{/posts}}{{^posts}}none{{/posts}}",
    )
    assert "\nnone\n" in PageRenderer(MemoryContentStore()).render_instance(instance)


def test_provider_errors_propagate(store: MemoryContentStore) -> None:
    def broken(_store: object, _data: dict[str, typ.Any], _now: dt.datetime) -> dict[str, typ.Any]:
        msg = "provider failed"
        raise RuntimeError(msg)

    registry = EnrichmentRegistry(store, {"broken": broken})
    instance = ElementInstance(id=1, element_id=1, slug="broken", html_template="x")
    with pytest.raises(RuntimeError, match="provider failed"):
        PageRenderer(store, registry).render_instance(instance)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("2024-05-01T09:00:00Z", "May 1, 2024"), ("2023-12-31", "Dec 31, 2023"), ("soon", ""), (None, "")],
)
def test_format_post_date(value: object, expected: str) -> None:
    assert format_post_date(value) == expected


def test_post_excerpt_is_capped() -> None:
    assert post_excerpt({"body": "<p>" + "a" * 400 + "</p>"}) == "a" * 160
