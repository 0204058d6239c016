"""Tests for the document mapper."""

import pytest

from bouncy.config import BouncySettings
from bouncy.exceptions import MappingError
from bouncy.index.models import SearchHit
from bouncy.mapper import DocumentMapper, highlight_key
from tests.fakes import Article, Product


@pytest.fixture
def mapper() -> DocumentMapper:
    return DocumentMapper(BouncySettings(index="bouncy"))


class TestToDocument:
    """Tests for record → document projection."""

    def test_all_fields_without_mapping(self, mapper: DocumentMapper) -> None:
        """Every field is indexed when no mapping properties are declared."""
        article = Article(id=4, title="Hello", extra={"nested": True})

        document = mapper.to_document(article)

        assert document.index == "bouncy"
        assert document.type == "articles"
        assert document.id == "4"
        assert document.source == {"id": 4, "title": "Hello", "extra": {"nested": True}}

    def test_only_declared_mapping_fields(self, mapper: DocumentMapper) -> None:
        """Declared mapping properties restrict the projection."""
        product = Product(id=2, name="Lamp", price=9.5, internal_note="do not index")

        document = mapper.to_document(product)

        assert document.index == "catalog"
        assert document.source == {"name": "Lamp", "price": 9.5}

    def test_missing_declared_fields_are_omitted(self, mapper: DocumentMapper) -> None:
        """Declared fields the record lacks are left out."""
        document = mapper.to_document(Product(id=2, name="Lamp"))
        assert document.source == {"name": "Lamp"}

    def test_document_id_matches_key(self, mapper: DocumentMapper) -> None:
        """The document id is the record key."""
        assert mapper.reference(Article(id=42)).id == "42"

    def test_record_without_key_cannot_be_mapped(self, mapper: DocumentMapper) -> None:
        """Unsaved records have no document address."""
        with pytest.raises(MappingError):
            mapper.to_document(Article(title="unsaved"))


class TestFromHit:
    """Tests for hit → record reconstruction."""

    def test_copies_source_and_id(self, mapper: DocumentMapper) -> None:
        """Source fields are copied and the key is recovered from _id."""
        article = mapper.from_hit(
            {"_id": "9", "_source": {"title": "Found", "views": 3}}, Article
        )

        assert isinstance(article, Article)
        assert article.key == 9
        assert article["title"] == "Found"
        assert article["views"] == 3
        assert article.is_document is True
        assert article.exists is True
        assert not article.is_dirty()

    def test_score_and_version_only_when_present(self, mapper: DocumentMapper) -> None:
        """Score and version are attached only if the hit has them."""
        bare = mapper.from_hit({"_id": "1", "_source": {}}, Article)
        full = mapper.from_hit(
            {"_id": "1", "_source": {}, "_score": 2.5, "_version": 3}, Article
        )

        assert bare.document_score is None
        assert bare.document_version is None
        assert full.document_score == 2.5
        assert full.document_version == 3

    def test_first_highlight_fragment_per_field(self, mapper: DocumentMapper) -> None:
        """Each highlighted field contributes its first fragment only."""
        article = mapper.from_hit(
            {
                "_id": "1",
                "_source": {"title": "Elastic search"},
                "highlight": {
                    "title": ["<em>Elastic</em> search", "second"],
                    "body.english": ["<em>fast</em>"],
                },
            },
            Article,
        )

        assert article.highlighted == {
            "highlighted_title": "<em>Elastic</em> search",
            "highlighted_body_english": "<em>fast</em>",
        }
        assert "highlighted_title" not in article

    def test_accepts_search_hit_model(self, mapper: DocumentMapper) -> None:
        """A parsed SearchHit can be passed directly."""
        hit = SearchHit(id="5", source={"title": "x"})
        assert mapper.from_hit(hit, Article).key == 5

    def test_key_in_source_is_kept(self, mapper: DocumentMapper) -> None:
        """A key stored in the document wins over the string _id."""
        article = mapper.from_hit({"_id": "1", "_source": {"id": 1, "title": "a"}}, Article)

        assert article.key == 1
        assert not article.is_dirty()

    def test_non_numeric_id_stays_string(self, mapper: DocumentMapper) -> None:
        """Ids that are not integers are used as-is."""
        article = mapper.from_hit({"_id": "a1b2", "_source": {}}, Article)
        assert article.key == "a1b2"

    def test_cast_key_override(self, mapper: DocumentMapper) -> None:
        """Record types can choose their own key type."""

        class Slug(Article):
            @classmethod
            def cast_key(cls, value: str) -> str:
                return value

        assert mapper.from_hit({"_id": "42", "_source": {}}, Slug).key == "42"

    def test_highlight_key(self) -> None:
        """Highlight keys are prefixed and dot-free."""
        assert highlight_key("title") == "highlighted_title"
        assert highlight_key("a.b") == "highlighted_a_b"


class TestMappingFor:
    """Tests for mapping bodies."""

    def test_mapping_from_properties(self, mapper: DocumentMapper) -> None:
        """Declared properties become a mapping body."""
        assert mapper.mapping_for(Product) == {
            "properties": {"name": {"type": "text"}, "price": {"type": "float"}}
        }

    def test_no_properties_raises(self, mapper: DocumentMapper) -> None:
        """Record types without properties have no mapping."""
        with pytest.raises(MappingError):
            mapper.mapping_for(Article)
