import dataclasses

import pytest

from askbudi_client.types import ApiKey, DocSnippet, LibraryResult, LibrarySearchResponse


def test_library_result_defaults():
    result = LibraryResult.from_dict({"library_id": "/pallets/flask", "name": "Flask"})
    assert result.aliases == {}
    assert result.available_versions == []
    assert result.relevance_score is None


def test_search_response_parses_results():
    response = LibrarySearchResponse.from_dict({
        "results": [{"library_id": "/pallets/flask", "name": "Flask"}],
        "total_count": 1,
        "search_term": "flask",
    })
    assert response.results[0].name == "Flask"


def test_types_frozen():
    snippet = DocSnippet(content="x", relevance_score=0.5, version="latest")
    with pytest.raises(dataclasses.FrozenInstanceError):
        snippet.content = "y"


def test_api_key_optional_timestamps():
    key = ApiKey.from_dict({
        "id": "key_1",
        "key_prefix": "vibe_0123456...",
        "name": None,
        "is_active": True,
        "quota_limit": 100,
        "created_at": "2024-03-01T00:00:00",
    })
    assert key.quota_used == 0
    assert key.last_used_at is None
    assert key.quota_reset_at is None
