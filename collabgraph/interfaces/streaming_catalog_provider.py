"""Abstract base class for streaming-catalog lookups used during enrichment."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field


class CatalogImage(BaseModel):
    """One artwork rendition returned by the catalog."""

    model_config = ConfigDict(frozen=True)

    url: str
    width: int | None = None
    height: int | None = None


class CatalogArtist(BaseModel):
    """Best catalog match for a searched name."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    images: list[CatalogImage] = Field(default_factory=list)


# Concrete implementation: SpotifyCatalogProvider
# Located in: collabgraph/providers/catalog/
class IStreamingCatalogProvider(ABC):
    """Contract for streaming-catalog artist search."""

    @abstractmethod
    async def search_artist(self, name: str) -> CatalogArtist | None:
        """Return the top catalog artist for *name*, or ``None`` if no hit.

        Raises
        ------
        collabgraph.utils.errors.EnrichmentError
            If the catalog cannot be reached or rejects the request.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"spotify"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured."""


def pick_image_url(images: list[CatalogImage], size: str = "medium") -> str | None:
    """Choose an image by size class from a catalog image set.

    Images are ordered widest first; ``large`` is the first, ``small`` the
    last and ``medium`` the middle entry.
    """
    if not images:
        return None
    ordered = sorted(images, key=lambda img: img.width or 0, reverse=True)
    if size == "large":
        return ordered[0].url
    if size == "small":
        return ordered[-1].url
    return ordered[len(ordered) // 2].url
