"""Wiring of the reconciliation engine to Graph collaborators."""
