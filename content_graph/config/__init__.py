"""Load and validate the content_graph configuration file.

This subpackage parses an optional ``content.yaml`` that sets the default
collection, the documentation route prefix, the reading speed used by the
``readTime`` enricher, the default sort direction, and enrichers applied to
every query. The primary entry point is :func:`load_content_config`, which
applies defaults for missing keys and returns a :class:`ContentConfig`.

Examples
--------
>>> from content_graph.config import ContentConfig
>>> ContentConfig().route_prefix
'/documentation'
>>> sorted(ContentConfig(words_per_minute=100).registry())
['readTime', 'wordCount']
"""

from .loader import load_content_config
from .models import ContentConfig, ContentConfigError

__all__ = ["ContentConfig", "ContentConfigError", "load_content_config"]
