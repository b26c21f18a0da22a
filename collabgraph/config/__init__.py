"""Configuration: environment settings, YAML loader and curated data tables."""

from collabgraph.config.loader import load_config
from collabgraph.config.settings import Settings

__all__ = ["Settings", "load_config"]
