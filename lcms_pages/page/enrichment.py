"""Dynamic slot-data providers for elements that need live content.

Most elements render purely from the slot data an editor entered. Dynamic
elements are registered here by slug; before their template renders, the
provider receives the content store and a copy of the slot data and returns
the data to render with. Providers only read from the store.

Example
-------
>>> from lcms_pages.page.store import MemoryContentStore
>>> registry = EnrichmentRegistry(MemoryContentStore())
>>> registry.is_dynamic("recent-posts")
True
>>> registry.enrich("recent-posts", {"count": 3})["posts"]
[]
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import datetime as dt
import logging
import typing as typ

from markupsafe import Markup

from .._format import optional_int, parse_timestamp

if typ.TYPE_CHECKING:
    from .store import ContentStore

logger = logging.getLogger(__name__)

SlotData: typ.TypeAlias = dict[str, typ.Any]
Clock: typ.TypeAlias = cabc.Callable[[], dt.datetime]


class Provider(typ.Protocol):
    """Callable returning enriched slot data for one element slug."""

    def __call__(self, store: ContentStore, slot_data: SlotData, now: dt.datetime) -> SlotData:
        """Return the slot data to render with."""
        ...


RECENT_POST_COUNTS = (3, 6, 9, 12)
DEFAULT_RECENT_POST_COUNT = 6
EXCERPT_LENGTH = 160


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


def format_post_date(value: object) -> str:
    """Format a timestamp as ``May 1, 2024``; unparsable values give ``""``.

    Examples
    --------
    >>> format_post_date("2024-05-01T09:00:00Z")
    'May 1, 2024'
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return ""
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def post_excerpt(post: cabc.Mapping[str, typ.Any]) -> str:
    """Return the post's excerpt, or the first 160 characters of its plain-text body."""
    excerpt = post.get("excerpt") or ""
    if excerpt:
        return str(excerpt)
    return Markup(str(post.get("body") or "")).striptags()[:EXCERPT_LENGTH]


def enrich_recent_posts(store: ContentStore, slot_data: SlotData, now: dt.datetime) -> SlotData:
    """Inject the newest published posts as ``posts``.

    ``count`` must be one of 3, 6, 9 or 12; anything else falls back to 6.
    """
    count = optional_int(slot_data.get("count"))
    if count not in RECENT_POST_COUNTS:
        count = DEFAULT_RECENT_POST_COUNT
    posts = store.load_published_posts(count, now)
    slot_data["posts"] = [
        {
            "title": post.get("title") or "",
            "slug": post.get("slug") or "",
            "featured_image": post.get("featured_image") or "",
            "excerpt": post_excerpt(post),
            "formatted_date": format_post_date(
                post.get("published_at") or post.get("created_at")
            ),
            "author_name": post.get("author_name") or "Unknown",
        }
        for post in posts
    ]
    return slot_data


class EnrichmentRegistry:
    """Registry of dynamic providers keyed by element slug.

    Each registry owns its provider table; registering on one instance never
    affects another.
    """

    def __init__(
        self,
        store: ContentStore,
        providers: cabc.Mapping[str, Provider] | None = None,
        *,
        clock: Clock = _utc_now,
    ) -> None:
        self.store = store
        self.clock = clock
        self._providers: dict[str, Provider] = (
            dict(providers) if providers is not None else {"recent-posts": enrich_recent_posts}
        )

    def register(self, slug: str, provider: Provider) -> None:
        """Register ``provider`` for ``slug``, replacing any existing one."""
        self._providers[slug] = provider

    def is_dynamic(self, slug: str) -> bool:
        """Return ``True`` when ``slug`` has a registered provider."""
        return slug in self._providers

    def enrich(self, slug: str, slot_data: cabc.Mapping[str, typ.Any]) -> SlotData:
        """Return provider-enriched slot data, or a copy of ``slot_data`` unchanged.

        The provider works on a deep copy, so the caller's data is never
        modified. Provider exceptions propagate to the caller.
        """
        data = copy.deepcopy(dict(slot_data))
        provider = self._providers.get(slug)
        if provider is None:
            return data
        logger.debug("enriching slot data for %s", slug)
        return provider(self.store, data, self.clock())


__all__ = [
    "DEFAULT_RECENT_POST_COUNT",
    "RECENT_POST_COUNTS",
    "EnrichmentRegistry",
    "Provider",
    "enrich_recent_posts",
    "format_post_date",
    "post_excerpt",
]
