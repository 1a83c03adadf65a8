"""Common literal values used across lcms_pages.

These constants keep selectors, filenames and defaults centralized so the
renderers, the CLI, and tests can import the same values without drifting.
Intended for internal use within the lcms_pages package.

Examples
--------
>>> from lcms_pages import _constants
>>> _constants.INSTANCE_SCOPE_TEMPLATE.format(instance_id=7)
'.lcms-el[data-instance-id="7"]'
"""

from pathlib import Path

INSTANCE_SCOPE_TEMPLATE = '.lcms-el[data-instance-id="{instance_id}"]'
DEFAULT_CONFIG = Path("config/pages.yaml")
DEFAULT_STORE = Path("content.json")
TEMPLATES_DIR = Path(__file__).parent / "templates"
DOCUMENT_TEMPLATE = "page.jinja"
BLOCK_TEMPLATE = "block.jinja"

__all__ = [
    "BLOCK_TEMPLATE",
    "DEFAULT_CONFIG",
    "DEFAULT_STORE",
    "DOCUMENT_TEMPLATE",
    "INSTANCE_SCOPE_TEMPLATE",
    "TEMPLATES_DIR",
]
