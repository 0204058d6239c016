"""Pytest configuration and shared fixtures."""

from unittest.mock import MagicMock

import pytest

from bouncy.config import BouncySettings, ElasticsearchSettings, Settings
from bouncy.index.client import IndexClient
from tests.fakes import result, search_response


@pytest.fixture
def settings() -> Settings:
    """Settings with auto-indexing enabled and a fixed default index."""
    return Settings(
        elasticsearch=ElasticsearchSettings(url="http://localhost:9200"),
        bouncy=BouncySettings(index="bouncy", auto_index=True, default_size=1000),
    )


@pytest.fixture
def index_client() -> MagicMock:
    """IndexClient double whose calls all succeed."""
    client = MagicMock(spec=IndexClient)
    client.index_document.return_value = result("index")
    client.update_document.return_value = result("update")
    client.delete_document.return_value = result("delete")
    client.bulk.return_value = result("bulk", response={"errors": False, "items": []})
    client.search.return_value = search_response()
    return client


@pytest.fixture
def es() -> MagicMock:
    """Low-level Elasticsearch client double."""
    client = MagicMock()
    client.index.return_value = {"result": "created", "_id": "1"}
    client.update.return_value = {"result": "updated", "_id": "1"}
    client.delete.return_value = {"result": "deleted", "_id": "1"}
    client.bulk.return_value = {"errors": False, "items": []}
    client.search.return_value = search_response()
    client.ping.return_value = True
    return client
