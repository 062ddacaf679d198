"""
test_metadata.py - Unit tests for metadata URL validation and updates
"""

import pytest

from token_ledger import (
    MemoryStore, TokenInfo,
    InvalidMetadataUrl, Unauthorized, NotFound,
    validate_metadata_url, get_metadata, update_metadata,
)
from token_ledger.state import save_token_info, save_metadata_url


class TestValidateMetadataUrl:

    @pytest.mark.parametrize("url", [
        "https://example.com/token.json",
        "http://example.com",
        "https://example.com:8443/a?b=c#d",
        "ipfs://bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi",
        "ar://abc123",
        "data:application/json;base64,e30=",
    ])
    def test_valid(self, url):
        assert validate_metadata_url(url) == url

    @pytest.mark.parametrize("url", [
        "",
        "not a url",
        "example.com/token.json",
        "https://",
        "https:///path",
        "http://example.com:notaport/",
        "https://exa mple.com",
        "1http://example.com",
        "https:",
        "https://example.com/\n",
    ])
    def test_invalid(self, url):
        with pytest.raises(InvalidMetadataUrl):
            validate_metadata_url(url)

    def test_non_string_rejected(self):
        with pytest.raises(InvalidMetadataUrl):
            validate_metadata_url(None)


class TestUpdateMetadata:

    @pytest.fixture
    def store(self):
        store = MemoryStore()
        save_token_info(store, TokenInfo("Seint", "SEINT", 6, 1_000, "owner"))
        save_metadata_url(store, "https://example.com/v1.json")
        return store

    def test_owner_updates(self, store):
        update_metadata(store, "owner", "https://example.com/v2.json")
        assert get_metadata(store) == "https://example.com/v2.json"

    def test_non_owner_rejected(self, store):
        with pytest.raises(Unauthorized):
            update_metadata(store, "mallory", "https://example.com/v2.json")
        assert get_metadata(store) == "https://example.com/v1.json"

    def test_authorization_checked_before_url(self, store):
        with pytest.raises(Unauthorized):
            update_metadata(store, "mallory", "garbage")

    def test_owner_invalid_url(self, store):
        with pytest.raises(InvalidMetadataUrl):
            update_metadata(store, "owner", "garbage")
        assert get_metadata(store) == "https://example.com/v1.json"

    def test_not_instantiated(self):
        with pytest.raises(NotFound):
            update_metadata(MemoryStore(), "owner", "https://example.com/v2.json")
