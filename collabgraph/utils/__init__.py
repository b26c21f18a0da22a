"""Utility modules for collabGraph.

- **errors** -- Domain exception hierarchy rooted at CollabGraphError.
- **concurrency** -- Semaphore-bounded gather used by the enrichment fan-out.
- **logging** -- structlog setup with console/JSON dual rendering.
- **text_normalizer** -- Name keys and rapidfuzz-based fuzzy matching.
"""

from collabgraph.utils.concurrency import throttled_gather
from collabgraph.utils.errors import (
    CollabGraphError,
    ConfigurationError,
    EnrichmentError,
    GraphInvariantError,
    LLMError,
    MalformedResponseError,
    PersistenceError,
    SourceUnavailableError,
    SubjectNotFoundError,
)
from collabgraph.utils.logging import configure_logging, get_logger
from collabgraph.utils.text_normalizer import (
    clean_display_name,
    fuzzy_match,
    name_key,
    same_person,
)

__all__ = [
    "CollabGraphError",
    "ConfigurationError",
    "EnrichmentError",
    "GraphInvariantError",
    "LLMError",
    "MalformedResponseError",
    "PersistenceError",
    "SourceUnavailableError",
    "SubjectNotFoundError",
    "clean_display_name",
    "configure_logging",
    "fuzzy_match",
    "get_logger",
    "name_key",
    "same_person",
    "throttled_gather",
]
