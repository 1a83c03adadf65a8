"""Assemble element instances and blocks into page markup and CSS.

:class:`PageRenderer` reads instance, block and page-style records from a
:class:`~lcms_pages.page.store.ContentStore` and renders them with the slot
interpreter and the style helpers. It keeps no state between calls, so one
renderer can serve any number of pages.

Example
-------
>>> from lcms_pages.page.store import MemoryContentStore
>>> store = MemoryContentStore(page_elements=[{
...     "id": 1, "content_id": 5, "element_id": 2, "slug": "text",
...     "html_template": "<p>{{title}}</p>", "slot_data_json": '{"title": "Hi"}',
... }])
>>> print(PageRenderer(store).render_page(5), end="")
<div class="lcms-el lcms-el-text" data-element-id="2" data-instance-id="1">
<p>Hi</p>
</div>
"""

from __future__ import annotations

import logging
import typing as typ
from html import escape
from pathlib import Path

from markupsafe import Markup

from .. import slots, styles
from .._constants import BLOCK_TEMPLATE, INSTANCE_SCOPE_TEMPLATE
from ..document import DocumentBuilder, build_environment
from .enrichment import EnrichmentRegistry
from .models import Block, ElementInstance

if typ.TYPE_CHECKING:
    from .store import ContentStore

logger = logging.getLogger(__name__)


def instance_scope(instance_id: int) -> str:
    """Return the selector matching one instance wrapper."""
    return INSTANCE_SCOPE_TEMPLATE.format(instance_id=instance_id)


def _comment(text: str) -> str:
    return "/* " + text.replace("*/", "* /") + " */"


class PageRenderer:
    """Render a page's element instances, blocks and stylesheet."""

    def __init__(
        self,
        store: ContentStore,
        enrichment: EnrichmentRegistry | None = None,
        *,
        templates_dir: Path | None = None,
    ) -> None:
        """Bind the renderer to a content store.

        Parameters
        ----------
        store : ContentStore
            Read-only source of instance, block, page-style and post records.
        enrichment : EnrichmentRegistry, optional
            Dynamic slot-data providers. Defaults to a registry over ``store``
            with the built-in providers.
        templates_dir : Path, optional
            Directory holding ``block.jinja`` and ``page.jinja``. Defaults to
            the package templates.
        """
        self.store = store
        self.enrichment = enrichment or EnrichmentRegistry(store)
        self.env = build_environment(templates_dir)
        self.block_template = self.env.get_template(BLOCK_TEMPLATE)
        self.documents = DocumentBuilder(self.env)

    def load_instances(self, content_id: int) -> list[ElementInstance]:
        """Return the page's instances in sort order."""
        return [
            ElementInstance.from_record(record)
            for record in self.store.load_instances(content_id)
        ]

    def render_instance(self, instance: ElementInstance) -> str:
        """Render one instance inside its ``lcms-el`` wrapper."""
        slot_data = instance.slot_data
        if self.enrichment.is_dynamic(instance.slug):
            slot_data = self.enrichment.enrich(instance.slug, slot_data)
        rendered = slots.render(instance.html_template, slot_data)

        classes = f"lcms-el lcms-el-{instance.slug}"
        custom = styles.get_custom_classes(instance.style_data)
        if custom:
            classes = f"{classes} {custom}"
        inline = styles.build_inline_style(instance.style_data)
        style_attr = f' style="{escape(inline, quote=True)}"' if inline else ""
        return (
            f'<div class="{escape(classes, quote=True)}"'
            f' data-element-id="{instance.element_id}"'
            f' data-instance-id="{instance.id}"{style_attr}>'
            f"\n{rendered}\n</div>\n"
        )

    def render_page(self, content_id: int) -> str:
        """Render every instance on the page, in sort order."""
        return "".join(
            self.render_instance(instance) for instance in self.load_instances(content_id)
        )

    def get_page_css(self, content_id: int) -> str:
        """Return catalogue CSS (once per element) plus per-instance rules.

        Each instance contributes a cascade rule for its non-inheriting
        properties and its sanitised custom CSS, both scoped to the
        instance's ``data-instance-id`` selector.
        """
        instances = self.load_instances(content_id)
        parts: list[str] = []
        seen: set[int] = set()
        for instance in instances:
            if instance.element_id in seen:
                continue
            seen.add(instance.element_id)
            element_css = instance.css.strip()
            if element_css:
                parts.append(f"{_comment(f'Element: {instance.name}')}\n{element_css}\n\n")

        for instance in instances:
            scope = instance_scope(instance.id)
            parts.append(styles.build_cascade_styles(instance.style_data, scope))
            custom_css = instance.style_data.get("custom_css")
            if not isinstance(custom_css, str):
                continue
            sanitized = styles.sanitize_custom_css(custom_css)
            if sanitized:
                parts.append(
                    f"/* Custom CSS: instance #{instance.id} */\n"
                    f"{styles.scope_custom_css(sanitized, scope)}\n\n"
                )
        return "".join(parts)

    def render_block(self, block: Block, members: list[ElementInstance]) -> str:
        """Render a block wrapper around its member instances."""
        content = "".join(self.render_instance(member) for member in members)
        return self.block_template.render(
            block=block,
            style="; ".join(block.style_declarations()),
            content=Markup(content.rstrip("\n")),  # noqa: S704 - rendered instances
        )

    def render_page_with_blocks(
        self, content_id: int, layout_template_id: int | None = None
    ) -> str:
        """Render unassigned instances first, then each block with its members.

        Instances without a ``block_id``, or whose block is not part of the
        page's layout, render flat before any block.
        """
        instances = self.load_instances(content_id)
        blocks = [
            Block.from_record(record)
            for record in self.store.load_blocks(content_id, layout_template_id)
        ]
        block_ids = {block.id for block in blocks}
        unassigned = [
            instance for instance in instances if instance.block_id not in block_ids
        ]
        parts = [self.render_instance(instance) for instance in unassigned]
        for block in blocks:
            members = [instance for instance in instances if instance.block_id == block.id]
            parts.append(self.render_block(block, members))
        return "".join(parts)

    def get_page_layout_css(self, content_id: int) -> str:
        """Return CSS for the page body, container and main wrappers."""
        data = self.store.load_page_styles(content_id)
        if not data:
            return ""
        parts: list[str] = []
        layout_css = styles.build_page_layout_css(data)
        if layout_css:
            parts.append(f"/* Page Layout Styles */\n{layout_css}\n")
        for key, selector in styles.PAGE_TARGETS.items():
            target = data.get(key)
            if not isinstance(target, dict) or not isinstance(target.get("custom_css"), str):
                continue
            sanitized = styles.sanitize_custom_css(target["custom_css"])
            if sanitized:
                parts.append(
                    f"/* Page Layout Custom CSS: {key} */\n"
                    f"{styles.scope_custom_css(sanitized, selector)}\n\n"
                )
        return "".join(parts)

    def render_document(
        self,
        content_id: int,
        title: str,
        *,
        blocks: bool = False,
        layout_template_id: int | None = None,
    ) -> str:
        """Render a complete HTML document for one page."""
        if blocks:
            body = self.render_page_with_blocks(content_id, layout_template_id)
        else:
            body = self.render_page(content_id)
        css = self.get_page_layout_css(content_id) + self.get_page_css(content_id)
        logger.debug("rendered page %d (%d bytes of CSS)", content_id, len(css))
        return self.documents.render(title=title, body=body, css=css)


__all__ = ["PageRenderer", "instance_scope"]
