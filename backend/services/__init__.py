"""Async orchestration: data-source fetches, report assembly, insight generation."""
