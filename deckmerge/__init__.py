"""Merge several PowerPoint decks into one, over a small FastAPI service."""

__version__ = "0.1.0"
