"""Synthesis pipeline orchestration."""
