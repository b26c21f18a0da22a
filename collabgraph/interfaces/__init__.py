"""Abstract provider interfaces (ports) for collabGraph."""

from collabgraph.interfaces.collaborator_source import ICollaboratorSource
from collabgraph.interfaces.llm_provider import ILLMProvider
from collabgraph.interfaces.streaming_catalog_provider import (
    CatalogArtist,
    CatalogImage,
    IStreamingCatalogProvider,
    pick_image_url,
)
from collabgraph.interfaces.subject_registry import ISubjectRegistry

__all__ = [
    "CatalogArtist",
    "CatalogImage",
    "ICollaboratorSource",
    "ILLMProvider",
    "ISubjectRegistry",
    "IStreamingCatalogProvider",
    "pick_image_url",
]
