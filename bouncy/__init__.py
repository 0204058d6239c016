"""Bouncy: keep application records mirrored in an Elasticsearch index."""

__version__ = "0.1.0"
