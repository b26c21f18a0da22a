"""Custom exception hierarchy for collabGraph.

All application exceptions inherit from :class:`CollabGraphError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "musicbrainz", "spotify") caused the failure.

The hierarchy mirrors the synthesis failure policy:

    CollabGraphError  (base -- catch-all for any collabGraph error)
    +-- SubjectNotFoundError     (registry has no such subject; terminal)
    +-- SourceUnavailableError   (adapter dependency unreachable; fall through)
    |   +-- MalformedResponseError  (payload failed to parse)
    |   +-- LLMError                (any LLM API call failure)
    +-- EnrichmentError          (per-node auxiliary lookup failed)
    +-- PersistenceError         (cache write / registry I/O failed)
    +-- GraphInvariantError      (assembled graph is internally inconsistent)
    +-- ConfigurationError       (startup / missing config)

Only ``SubjectNotFoundError`` and ``GraphInvariantError`` ever reach the
caller of a synthesis run.  Everything else is absorbed into a degraded but
valid graph.
"""


class CollabGraphError(Exception):
    """Base exception for all collabGraph errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[musicbrainz] Artist lookup failed``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

class SubjectNotFoundError(CollabGraphError):
    """Raised when the subject registry holds no record matching a query."""

    def __init__(
        self,
        message: str = "Subject not found in registry",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Source adapter errors
# ---------------------------------------------------------------------------

class SourceUnavailableError(CollabGraphError):
    """Raised when a collaborator source is unreachable or misconfigured.

    The orchestrator catches this and moves on to the next source in the
    configured priority order.
    """

    def __init__(
        self,
        message: str = "Collaborator source is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MalformedResponseError(SourceUnavailableError):
    """Raised when a source answered but its payload could not be decoded."""

    def __init__(
        self,
        message: str = "Source returned a malformed response",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(SourceUnavailableError):
    """Raised when an LLM API call fails or returns an empty response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Degradation errors (logged, never surfaced)
# ---------------------------------------------------------------------------

class EnrichmentError(CollabGraphError):
    """Raised when a streaming-catalog or registry lookup for one node fails."""

    def __init__(
        self,
        message: str = "Node enrichment failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PersistenceError(CollabGraphError):
    """Raised when the durable store cannot be read or written."""

    def __init__(
        self,
        message: str = "Persistence operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Internal / configuration errors
# ---------------------------------------------------------------------------

class GraphInvariantError(CollabGraphError):
    """Raised when an assembled graph violates a structural invariant."""

    def __init__(
        self,
        message: str = "Graph invariant violated",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(CollabGraphError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
