"""Conversion between records and index documents."""

from typing import Any, TypeVar

from bouncy.config import BouncySettings, get_settings
from bouncy.exceptions import MappingError
from bouncy.index.models import Document, DocumentRef, SearchHit
from bouncy.records.models import Record

R = TypeVar("R", bound=Record)

HIGHLIGHT_PREFIX = "highlighted_"


def highlight_key(field: str) -> str:
    """Attribute key under which a field's highlight is exposed."""
    return HIGHLIGHT_PREFIX + field.replace(".", "_")


class DocumentMapper:
    """Projects records into documents and rebuilds records from hits.

    No schema is enforced: unknown fields pass through and validation is
    left to Elasticsearch.
    """

    def __init__(self, settings: BouncySettings | None = None) -> None:
        self._settings = settings or get_settings().bouncy

    def index_name(self, record_class: type[Record]) -> str:
        return record_class.get_index_name(self._settings.index)

    def reference(self, record: Record) -> DocumentRef:
        """Address of a record's document.

        Raises:
            MappingError: If the record has no key yet.
        """
        if record.key is None:
            raise MappingError(
                f"{type(record).__name__} has no key and cannot be addressed in the index",
                details={"table": record.get_table()},
            )

        return DocumentRef(
            index=self.index_name(type(record)),
            type=record.get_type_name(),
            id=str(record.key),
        )

    def fields(self, record: Record) -> dict[str, Any]:
        """Field values to index: every field, or only the declared ones."""
        attributes = record.get_attributes()
        properties = record.get_mapping_properties()
        if not properties:
            return attributes

        return {field: attributes[field] for field in properties if field in attributes}

    def to_document(self, record: Record) -> Document:
        ref = self.reference(record)
        return Document(index=ref.index, type=ref.type, id=ref.id, source=self.fields(record))

    def from_hit(self, hit: dict[str, Any] | SearchHit, record_class: type[R]) -> R:
        """Rebuild a document-backed record from a search hit.

        A key already present in the source is kept; otherwise the key is
        recovered from _id through the record type's cast_key().

        Score and version are attached only when the hit carries them; each
        highlighted field contributes its first fragment.
        """
        if not isinstance(hit, SearchHit):
            hit = SearchHit.model_validate(hit)

        attributes = dict(hit.source)
        if attributes.get(record_class.key_name) is None:
            attributes[record_class.key_name] = record_class.cast_key(hit.id)

        record = record_class()
        record.set_raw_attributes(attributes, sync=True)
        record.exists = True
        record.is_document = True

        if hit.score is not None:
            record.document_score = hit.score
        if hit.version is not None:
            record.document_version = hit.version

        if hit.highlight:
            record.highlighted = {
                highlight_key(field): fragments[0]
                for field, fragments in hit.highlight.items()
                if fragments
            }

        return record

    def mapping_for(self, record_class: type[Record]) -> dict[str, Any]:
        """Mapping body built from the declared mapping properties.

        Raises:
            MappingError: If the record type declares no properties.
        """
        properties = record_class.get_mapping_properties()
        if not properties:
            raise MappingError(
                f"{record_class.__name__} declares no mapping properties",
                details={"table": record_class.get_table()},
            )
        return {"properties": properties}
