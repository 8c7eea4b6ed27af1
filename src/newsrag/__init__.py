"""News-feed retrieval-augmented generation — ingest, retrieve, answer."""

__version__ = "0.1.0"
