"""Archivist: HTTP upload front end for Backblaze B2."""

__version__ = "0.1.0"
