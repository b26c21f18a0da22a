"""Concrete provider adapters grouped by kind."""
