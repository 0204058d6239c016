"""Index client interface and Elasticsearch implementation."""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from elasticsearch import ConflictError, Elasticsearch, NotFoundError

from bouncy.config import ElasticsearchSettings, get_settings
from bouncy.exceptions import ConfigurationError, ErrorCode, IndexClientError
from bouncy.index.models import Document, DocumentRef, IndexResult, IndexStatus
from bouncy.logging_config import get_logger
from bouncy.observability.metrics import track_index_operation

logger = get_logger(__name__)


def _body(response: Any) -> Any:
    """Unwrap an ObjectApiResponse into its plain body."""
    return getattr(response, "body", response)


class IndexClient(ABC):
    """Abstract search index client.

    Recoverable failures (missing document, version conflict) come back as
    IndexResult values. Anything else raises IndexClientError.
    """

    @abstractmethod
    def bulk(self, operations: list[dict[str, Any]], refresh: bool = False) -> IndexResult:
        """Send a bulk request.

        Args:
            operations: Action descriptors, each index descriptor immediately
                followed by its document body.
            refresh: Wait for the change to become searchable.

        Returns:
            SUCCESS with the raw response, or SKIPPED for an empty body.
        """
        ...

    @abstractmethod
    def index_document(
        self,
        document: Document,
        version: int | None = None,
        refresh: bool = False,
    ) -> IndexResult:
        """Create or replace a document.

        Args:
            document: Document to write.
            version: Optional external version; an older or equal version
                yields VERSION_CONFLICT.
            refresh: Wait for the change to become searchable.
        """
        ...

    @abstractmethod
    def update_document(
        self,
        ref: DocumentRef,
        fields: dict[str, Any],
        refresh: bool = False,
    ) -> IndexResult:
        """Partially update a document. NOT_FOUND if it does not exist."""
        ...

    @abstractmethod
    def delete_document(self, ref: DocumentRef, refresh: bool = False) -> IndexResult:
        """Delete a document. NOT_FOUND if it does not exist."""
        ...

    @abstractmethod
    def search(self, body: dict[str, Any], index: str | None = None) -> dict[str, Any]:
        """Run a query DSL body and return the raw response."""
        ...

    @abstractmethod
    def get_mapping(self, index: str, type_name: str) -> IndexResult:
        """Fetch the mapping for a document type."""
        ...

    @abstractmethod
    def put_mapping(
        self,
        index: str,
        type_name: str,
        mapping: dict[str, Any],
    ) -> IndexResult:
        """Create or extend the mapping for a document type."""
        ...

    @abstractmethod
    def delete_mapping(self, index: str, type_name: str) -> IndexResult:
        """Drop the mapping for a document type."""
        ...

    @abstractmethod
    def ping(self) -> bool:
        """Check that the cluster is reachable."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release network resources."""
        ...


class ElasticsearchIndexClient(IndexClient):
    """IndexClient backed by the official elasticsearch client.

    Single-document calls address documents by index and id only; the type
    name is carried in bulk descriptors when include_type_name is enabled
    (legacy clusters) and is otherwise informational.
    """

    def __init__(
        self,
        settings: ElasticsearchSettings | None = None,
        client: Elasticsearch | None = None,
    ) -> None:
        """Initialize the index client.

        Args:
            settings: Elasticsearch configuration.
            client: Existing client (for testing).
        """
        self._settings = settings or get_settings().elasticsearch
        self._client = client
        self._owns_client = client is None

    @property
    def include_type_name(self) -> bool:
        return self._settings.include_type_name

    def _check_settings(self) -> None:
        """Reject settings the client could only half apply.

        Raises:
            ConfigurationError: On an empty URL or incomplete basic auth.
        """
        if not self._settings.url.strip():
            raise ConfigurationError("ES_URL must not be empty")

        if (self._settings.username is None) != (self._settings.password is None):
            raise ConfigurationError(
                "ES_USERNAME and ES_PASSWORD must be set together",
                details={"username": self._settings.username},
            )

    def _get_client(self) -> Elasticsearch:
        """Get or create the Elasticsearch client.

        Raises:
            ConfigurationError: If the connection settings are incomplete.
        """
        if self._client is None:
            self._check_settings()
            options: dict[str, Any] = {
                "hosts": [self._settings.url],
                "verify_certs": self._settings.verify_certs,
                "request_timeout": self._settings.request_timeout_s,
                "max_retries": self._settings.max_retries,
            }
            if self._settings.api_key:
                options["api_key"] = self._settings.api_key.get_secret_value()
            elif self._settings.username and self._settings.password:
                options["basic_auth"] = (
                    self._settings.username,
                    self._settings.password.get_secret_value(),
                )

            self._client = Elasticsearch(**options)
        return self._client

    def close(self) -> None:
        """Close the Elasticsearch client."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def _execute(
        self,
        operation: str,
        call: Callable[[Elasticsearch], Any],
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.INDEX_CLIENT_ERROR,
    ) -> IndexResult:
        """Run a call, mapping recoverable API errors to typed results."""
        client = self._get_client()
        start = time.perf_counter()

        try:
            response = call(client)
            status = IndexStatus.SUCCESS
        except NotFoundError as e:
            response = e.body
            status = IndexStatus.NOT_FOUND
        except ConflictError as e:
            response = e.body
            status = IndexStatus.VERSION_CONFLICT
        except Exception as e:
            track_index_operation(operation, time.perf_counter() - start, "error")
            raise IndexClientError(
                f"Elasticsearch {operation} failed: {e}",
                code=code,
                details={**(details or {}), "id": document_id, "error": str(e)},
            ) from e

        track_index_operation(operation, time.perf_counter() - start, status.value)
        logger.debug(
            f"Elasticsearch {operation}: {status.value}",
            extra={**(details or {}), "id": document_id},
        )

        return IndexResult(
            operation=operation,
            status=status,
            document_id=document_id,
            response=_body(response),
        )

    def bulk(self, operations: list[dict[str, Any]], refresh: bool = False) -> IndexResult:
        """Send a bulk request; per-item errors are left in the response."""
        if not operations:
            return IndexResult.skipped("bulk")

        return self._execute(
            "bulk",
            lambda es: es.bulk(
                operations=operations,
                refresh="wait_for" if refresh else False,
            ),
            details={"entries": len(operations)},
            code=ErrorCode.BULK_REQUEST_ERROR,
        )

    def index_document(
        self,
        document: Document,
        version: int | None = None,
        refresh: bool = False,
    ) -> IndexResult:
        """Index a full document, optionally with an external version."""
        params: dict[str, Any] = {
            "index": document.index,
            "id": document.id,
            "document": document.source,
            "refresh": "wait_for" if refresh else False,
        }
        if version is not None:
            params["version"] = version
            params["version_type"] = "external"

        return self._execute(
            "index",
            lambda es: es.index(**params),
            document_id=document.id,
            details={"index": document.index, "type": document.type},
        )

    def update_document(
        self,
        ref: DocumentRef,
        fields: dict[str, Any],
        refresh: bool = False,
    ) -> IndexResult:
        """Apply a partial document update."""
        return self._execute(
            "update",
            lambda es: es.update(
                index=ref.index,
                id=ref.id,
                doc=fields,
                refresh="wait_for" if refresh else False,
            ),
            document_id=ref.id,
            details={"index": ref.index, "type": ref.type, "fields": sorted(fields)},
        )

    def delete_document(self, ref: DocumentRef, refresh: bool = False) -> IndexResult:
        """Delete a document by id."""
        return self._execute(
            "delete",
            lambda es: es.delete(
                index=ref.index,
                id=ref.id,
                refresh="wait_for" if refresh else False,
            ),
            document_id=ref.id,
            details={"index": ref.index, "type": ref.type},
        )

    def search(self, body: dict[str, Any], index: str | None = None) -> dict[str, Any]:
        """Run a search and return the raw response body.

        Raises:
            IndexClientError: On any failure, including a missing index.
        """
        client = self._get_client()
        start = time.perf_counter()

        try:
            response = client.search(index=index, body=body)
        except Exception as e:
            track_index_operation("search", time.perf_counter() - start, "error")
            raise IndexClientError(
                f"Elasticsearch search failed: {e}",
                code=ErrorCode.SEARCH_ERROR,
                details={"index": index, "error": str(e)},
            ) from e

        track_index_operation("search", time.perf_counter() - start, "success")
        return _body(response)

    def get_mapping(self, index: str, type_name: str) -> IndexResult:
        """Fetch the index mapping; NOT_FOUND when the index is missing."""
        return self._execute(
            "get_mapping",
            lambda es: es.indices.get_mapping(index=index),
            details={"index": index, "type": type_name},
        )

    def put_mapping(
        self,
        index: str,
        type_name: str,
        mapping: dict[str, Any],
    ) -> IndexResult:
        """Put a mapping, creating the index with it when missing."""

        def call(es: Elasticsearch) -> Any:
            if es.indices.exists(index=index):
                return es.indices.put_mapping(index=index, body=mapping)
            logger.info(f"Creating index {index} with mapping for {type_name}")
            return es.indices.create(index=index, mappings=mapping)

        return self._execute(
            "put_mapping",
            call,
            details={"index": index, "type": type_name},
        )

    def delete_mapping(self, index: str, type_name: str) -> IndexResult:
        """Drop a mapping.

        Mappings cannot be removed from a live index, so this deletes the
        whole index together with its documents.
        """
        logger.warning(
            f"Deleting index {index} to drop the mapping for {type_name}",
            extra={"index": index, "type": type_name},
        )
        return self._execute(
            "delete_mapping",
            lambda es: es.indices.delete(index=index),
            details={"index": index, "type": type_name},
        )

    def ping(self) -> bool:
        """Check connectivity.

        Connection failures return False; only ConfigurationError is raised.
        """
        try:
            return bool(self._get_client().ping())
        except ConfigurationError:
            raise
        except Exception as e:
            logger.warning(f"Elasticsearch ping failed: {e}")
            return False
