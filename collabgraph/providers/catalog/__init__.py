"""Streaming-catalog adapters used by node enrichment."""
