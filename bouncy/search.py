"""Fixed-shape query builders and search result sets."""

from collections.abc import Iterator
from typing import Any, Generic, TypeVar

from bouncy.config import BouncySettings, get_settings
from bouncy.index.client import IndexClient
from bouncy.logging_config import get_logger
from bouncy.mapper import DocumentMapper
from bouncy.observability.metrics import track_search
from bouncy.records.models import Record

logger = get_logger(__name__)

R = TypeVar("R", bound=Record)


class ResultSet(Generic[R]):
    """Records rebuilt from a search response.

    Hits are converted to records on first access. limit() slices the hits
    already fetched; it never changes the query.
    """

    def __init__(
        self,
        response: dict[str, Any],
        record_class: type[R],
        mapper: DocumentMapper,
        hits: list[dict[str, Any]] | None = None,
    ) -> None:
        self._response = response
        self._record_class = record_class
        self._mapper = mapper
        self._hits = hits if hits is not None else list(response["hits"]["hits"])
        self._records: list[R] | None = None

    @property
    def records(self) -> list[R]:
        if self._records is None:
            self._records = [
                self._mapper.from_hit(hit, self._record_class) for hit in self._hits
            ]
        return self._records

    def __iter__(self) -> Iterator[R]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self._hits)

    def __getitem__(self, position: int) -> R:
        return self.records[position]

    def __bool__(self) -> bool:
        return bool(self._hits)

    def limit(self, count: int | None = None) -> "ResultSet[R]":
        """Keep the first ``count`` hits, or the last ``-count`` when negative.

        None or 0 keeps everything.
        """
        if not count:
            return self

        hits = self._hits[count:] if count < 0 else self._hits[:count]
        return ResultSet(self._response, self._record_class, self._mapper, hits=hits)

    @property
    def total(self) -> int:
        """Total matching documents reported by the cluster."""
        total = self._response["hits"]["total"]
        # 7.x+ reports {"value": n, "relation": "eq"}
        if isinstance(total, dict):
            return int(total["value"])
        return int(total)

    @property
    def max_score(self) -> float | None:
        return self._response["hits"].get("max_score")

    @property
    def took(self) -> int:
        """Milliseconds the query took."""
        return self._response["took"]

    @property
    def timed_out(self) -> bool:
        return bool(self._response["timed_out"])

    def shards(self, key: str | None = None) -> Any:
        """Shard statistics, or one entry of them."""
        shards = self._response["_shards"]
        if key and key in shards:
            return shards[key]
        return shards


class QueryBuilder(Generic[R]):
    """Query builders targeting one record type's index.

    Every builder sends a fixed body capped at ``default_size`` results.
    """

    def __init__(
        self,
        record_class: type[R],
        client: IndexClient,
        mapper: DocumentMapper | None = None,
        settings: BouncySettings | None = None,
    ) -> None:
        self._settings = settings or get_settings().bouncy
        self._record_class = record_class
        self._client = client
        self._mapper = mapper or DocumentMapper(self._settings)

    @property
    def size(self) -> int:
        return self._settings.default_size

    def search(self, body: dict[str, Any]) -> ResultSet[R]:
        """Run an arbitrary query DSL body."""
        index = self._mapper.index_name(self._record_class)
        response = self._client.search(body, index=index)

        hits = response["hits"]["hits"]
        track_search(len(hits))
        logger.debug(
            f"Search on {index} returned {len(hits)} hits",
            extra={"index": index, "took": response.get("took")},
        )

        return ResultSet(response, self._record_class, self._mapper)

    def _query(self, query: dict[str, Any]) -> ResultSet[R]:
        return self.search({"query": query, "size": self.size})

    def match(self, field: str, query: Any) -> ResultSet[R]:
        return self._query({"match": {field: query}})

    def multi_match(self, fields: list[str], query: Any) -> ResultSet[R]:
        return self._query({"multi_match": {"query": query, "fields": fields}})

    def fuzzy(self, field: str, value: Any, fuzziness: str | int = "AUTO") -> ResultSet[R]:
        return self._query({"fuzzy": {field: {"value": value, "fuzziness": fuzziness}}})

    def geoshape(
        self,
        field: str,
        coordinates: list[Any],
        shape_type: str = "envelope",
    ) -> ResultSet[R]:
        return self._query(
            {
                "geo_shape": {
                    field: {"shape": {"type": shape_type, "coordinates": coordinates}}
                }
            }
        )

    def ids(self, values: list[Any]) -> ResultSet[R]:
        return self._query({"ids": {"values": [str(value) for value in values]}})

    def more_like_this(
        self,
        fields: list[str],
        ids: list[Any],
        min_term_freq: int = 1,
        percent_terms_to_match: float = 0.5,
        min_word_length: int = 3,
    ) -> ResultSet[R]:
        """Documents similar to the given ones.

        ``percent_terms_to_match`` is sent as ``minimum_should_match``, the
        name current clusters accept.
        """
        index = self._mapper.index_name(self._record_class)
        return self._query(
            {
                "more_like_this": {
                    "fields": fields,
                    "like": [{"_index": index, "_id": str(doc_id)} for doc_id in ids],
                    "min_term_freq": min_term_freq,
                    "minimum_should_match": f"{round(percent_terms_to_match * 100)}%",
                    "min_word_length": min_word_length,
                }
            }
        )
