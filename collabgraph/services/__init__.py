"""Synthesis services: resolution, filtering, classification, assembly, enrichment, caching."""
