"""Sequence diagram validation, caching and render orchestration."""
