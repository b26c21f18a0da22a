"""Collaborator sources, listed in fallback priority order."""

from collabgraph.providers.sources.generative_source import GenerativeCollaboratorSource
from collabgraph.providers.sources.musicbrainz_source import MusicBrainzCollaboratorSource
from collabgraph.providers.sources.static_source import StaticCollaboratorSource
from collabgraph.providers.sources.wikipedia_source import WikipediaCollaboratorSource

__all__ = [
    "GenerativeCollaboratorSource",
    "MusicBrainzCollaboratorSource",
    "StaticCollaboratorSource",
    "WikipediaCollaboratorSource",
]
