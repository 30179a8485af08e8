"""Common literal values used across pagefold.

These constants keep filenames, suffixes, and parser markers centralized so the
builder, renderers, and tests import the same values without drifting.
Intended for internal use within the pagefold package.

Examples
--------
>>> from pagefold import _constants
>>> _constants.INDEX_FILENAME
'index.html'
>>> _constants.STAGING_TEMPLATE.format(name="public", token="ab12")
'.public-staging-ab12'
"""

INDEX_FILENAME = "index.html"
HTML_SUFFIX = ".html"
STAGING_TEMPLATE = ".{name}-staging-{token}"
FRONTMATTER_DELIMITER = "---"
BACK_REFERENCE_PREFIX = "back-to-"
