"""Common literal values used across content_graph.

These constants keep route shapes and enrichment defaults centralized so the
ordering index, the query engine, the configuration loader, and tests import
the same values without drifting. Intended for internal use within the
content_graph package.

Examples
--------
>>> from content_graph import _constants
>>> _constants.DOCS_ROUTE_PREFIX
'/documentation'
>>> _constants.WORDS_PER_MINUTE
200
"""

DOCS_ROUTE_PREFIX = "/documentation"
DEFAULT_GROUP = "default"
DEFAULT_COLLECTION = "default"
WORDS_PER_MINUTE = 200
INDEX_DOC_SLUG = "index"
