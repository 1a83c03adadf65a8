"""Render element-based pages: instances, blocks, page CSS and enrichment."""

from __future__ import annotations

from .enrichment import EnrichmentRegistry, enrich_recent_posts
from .models import Block, ElementInstance
from .renderer import PageRenderer, instance_scope
from .store import ContentStore, FileContentStore, MemoryContentStore

__all__ = [
    "Block",
    "ContentStore",
    "ElementInstance",
    "EnrichmentRegistry",
    "FileContentStore",
    "MemoryContentStore",
    "PageRenderer",
    "enrich_recent_posts",
    "instance_scope",
]
