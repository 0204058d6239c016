"""Index client module."""

from bouncy.index.client import ElasticsearchIndexClient, IndexClient
from bouncy.index.models import Document, DocumentRef, IndexResult, IndexStatus, SearchHit

__all__ = [
    "Document",
    "DocumentRef",
    "ElasticsearchIndexClient",
    "IndexClient",
    "IndexResult",
    "IndexStatus",
    "SearchHit",
]
