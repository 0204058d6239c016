"""Index data models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DocumentRef(BaseModel):
    """Address of a single document in the index.

    Attributes:
        index: Index name.
        type: Document type name (the record's table unless overridden).
        id: Document id, always the source record's key.
    """

    model_config = ConfigDict(frozen=True)

    index: str = Field(description="Index name")
    type: str = Field(description="Document type name")
    id: str = Field(description="Document id")


class Document(DocumentRef):
    """Search-index projection of a record."""

    source: dict[str, Any] = Field(
        default_factory=dict,
        description="Projected field values",
    )

    def ref(self) -> DocumentRef:
        return DocumentRef(index=self.index, type=self.type, id=self.id)


class SearchHit(BaseModel):
    """A single hit from a search response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id", description="Document id")
    index: str | None = Field(default=None, alias="_index")
    source: dict[str, Any] = Field(default_factory=dict, alias="_source")
    score: float | None = Field(default=None, alias="_score")
    version: int | None = Field(default=None, alias="_version")
    highlight: dict[str, list[str]] | None = Field(default=None)


class IndexStatus(str, Enum):
    """Outcome of an index operation."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    VERSION_CONFLICT = "version_conflict"
    SKIPPED = "skipped"


class IndexResult(BaseModel):
    """Typed result of an index operation.

    Truthy only on success, so callers can write ``if not result:``.

    Attributes:
        operation: Operation name (index, update, delete, bulk...).
        status: Outcome.
        document_id: Target document id, when there is a single target.
        response: Raw response body, or the error body on a recoverable failure.
    """

    operation: str = Field(description="Operation name")
    status: IndexStatus = Field(description="Operation outcome")
    document_id: str | None = Field(default=None, description="Target document id")
    response: Any = Field(default=None, description="Raw response body")

    def __bool__(self) -> bool:
        return self.status == IndexStatus.SUCCESS

    @property
    def ok(self) -> bool:
        return self.status == IndexStatus.SUCCESS

    @property
    def not_found(self) -> bool:
        return self.status == IndexStatus.NOT_FOUND

    @property
    def conflict(self) -> bool:
        return self.status == IndexStatus.VERSION_CONFLICT

    @classmethod
    def skipped(cls, operation: str, document_id: str | None = None) -> "IndexResult":
        return cls(operation=operation, status=IndexStatus.SKIPPED, document_id=document_id)
