"""Linkboard: vote reconciliation engine for a link-sharing community."""

__version__ = "0.1.0"
