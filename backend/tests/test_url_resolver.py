from unittest.mock import AsyncMock, patch

import pytest

from brand_scout.exceptions import InvalidClientInput
from brand_scout.services.url_resolver import (
    extract_url,
    looks_like_domain,
    normalize_url,
    resolve_client_input,
    search_url,
)


class TestHelpers:
    def test_domain_detection(self):
        assert looks_like_domain("gsap.com")
        assert looks_like_domain("https://stripe.com/pricing")
        assert not looks_like_domain("Nike")
        assert not looks_like_domain("Coca Cola Co.")

    def test_normalize_adds_scheme(self):
        assert normalize_url("gsap.com") == "https://gsap.com"
        assert normalize_url("http://example.org") == "http://example.org"

    def test_search_url_encodes_name(self):
        assert search_url("Coca Cola") == "https://www.google.com/search?q=Coca+Cola"

    def test_extract_url(self):
        assert extract_url("The homepage is https://www.nike.com.") == "https://www.nike.com"
        assert extract_url("UNKNOWN") is None
        assert extract_url("https://localhost") is None


class TestResolveClientInput:
    @pytest.mark.asyncio
    async def test_empty_input_raises(self):
        with pytest.raises(InvalidClientInput):
            await resolve_client_input("   ")

    @pytest.mark.asyncio
    async def test_domain_skips_lookup(self):
        generate = AsyncMock()
        assert await resolve_client_input("gsap.com", generate) == "https://gsap.com"
        generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_name_resolved_through_text_generation(self):
        generate = AsyncMock(return_value="https://www.nike.com")
        with patch("brand_scout.services.url_resolver.url_responds", AsyncMock(return_value=True)):
            assert await resolve_client_input("Nike", generate) == "https://www.nike.com"

    @pytest.mark.asyncio
    async def test_unverified_suggestion_falls_back_to_search(self):
        generate = AsyncMock(return_value="https://nike-official-store.example")
        with patch("brand_scout.services.url_resolver.url_responds", AsyncMock(return_value=False)):
            assert await resolve_client_input("Nike", generate) == search_url("Nike")

    @pytest.mark.asyncio
    async def test_lookup_error_falls_back_to_search(self):
        generate = AsyncMock(side_effect=RuntimeError("quota exceeded"))
        assert await resolve_client_input("Nike", generate) == search_url("Nike")

    @pytest.mark.asyncio
    async def test_no_generator_falls_back_to_search(self):
        assert await resolve_client_input("Nike") == search_url("Nike")
