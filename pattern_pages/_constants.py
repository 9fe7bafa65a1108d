"""Common literal values used across pattern_pages.

These constants keep filenames, fence markers, and sentinel values centralized
so the loader, splitter, builder, and tests can import the same values without
drifting. Intended for internal use within the pattern_pages package.

Examples
--------
>>> from pattern_pages import _constants
>>> _constants.ARTIFACT_TEMPLATE.format(identifier="throttling")
'throttling.json'
>>> _constants.PLACEHOLDER_SLUG
'#TODO'
"""

ARTIFACT_TEMPLATE = "{identifier}.json"
CONTENT_SUFFIX = ".mdx"
FRONT_MATTER_FENCE = "---"
FRONT_MATTER_CLOSERS = ("---", "...")
# Catalog entries still waiting for content carry this slug.
PLACEHOLDER_SLUG = "#TODO"
DEFAULT_PYGMENTS_STYLE = "github-dark"
DEFAULT_OUTLINE_LEVELS = (2, 3)
FALLBACK_SLUG = "section"
# Python-Markdown extensions enabled for every body, besides our own.
MARKDOWN_EXTENSIONS = ("tables", "sane_lists")
