"""Reconcile a OneDrive delta feed into local mirror sync actions."""

__version__ = "0.1.0"
