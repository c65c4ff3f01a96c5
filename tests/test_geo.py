"""
Tests for location and language resolution
"""

import pytest

from keywordtrends.exceptions import LookupNotFoundError
from keywordtrends.geo import GeoResolver


def suggestion(term, criterion_id, target_type="Country"):
    return {
        "searchTerm": term,
        "geoTargetConstant": {"id": criterion_id, "targetType": target_type, "name": term},
    }


def language_rows():
    return [
        {"languageConstant": {"id": "1000", "name": "English"}},
        {"languageConstant": {"id": "1001", "name": "German"}},
    ]


class TestCriterionIds:
    """Tests for GeoResolver.get_criterion_ids"""

    def test_case_insensitive(self, ads_client):
        ads_client.post.return_value = {
            "geoTargetConstantSuggestions": [
                suggestion("Germany", "2276"),
                suggestion("germany", "9999", target_type="City"),
                suggestion("France", "2250"),
            ]
        }
        resolver = GeoResolver(ads_client)

        ids = resolver.get_criterion_ids(["GERMANY", "france"])

        assert ids == {"germany": "2276", "france": "2250"}
        service, payload = ads_client.post.call_args.args
        assert service == "geoTargetConstants:suggest"
        assert payload == {"locale": "en", "locationNames": {"names": ["GERMANY", "france"]}}

    def test_not_found(self, ads_client):
        ads_client.post.return_value = {"geoTargetConstantSuggestions": [suggestion("Germany", "2276")]}
        resolver = GeoResolver(ads_client)

        with pytest.raises(LookupNotFoundError, match="No Country criterion found for 'Atlantis'"):
            resolver.get_criterion_ids(["Germany", "Atlantis"])

    def test_names_batched_by_25(self, ads_client):
        ads_client.post.return_value = {"geoTargetConstantSuggestions": []}
        resolver = GeoResolver(ads_client)

        with pytest.raises(LookupNotFoundError):
            resolver.get_criterion_ids([f"place {i}" for i in range(30)])
        assert ads_client.post.call_count == 2

    def test_resolve_location_passes_ids_through(self, ads_client):
        resolver = GeoResolver(ads_client)
        assert resolver.resolve_location("2276") == "2276"
        ads_client.post.assert_not_called()


class TestLanguageIds:
    """Tests for language resolution"""

    def test_language_lookup(self, ads_client):
        ads_client.search.return_value = language_rows()
        resolver = GeoResolver(ads_client)

        assert resolver.get_language_ids(["german", "English"]) == {"german": "1001", "english": "1000"}
        assert "FROM language_constant" in ads_client.search.call_args.args[0]

    def test_resolve_language(self, ads_client):
        ads_client.search.return_value = language_rows()
        resolver = GeoResolver(ads_client)
        assert resolver.resolve_language("German") == "1001"
        assert resolver.resolve_language("1000") == "1000"
        assert ads_client.search.call_count == 1

    def test_unknown_language(self, ads_client):
        ads_client.search.return_value = language_rows()
        resolver = GeoResolver(ads_client)

        with pytest.raises(LookupNotFoundError) as exc_info:
            resolver.resolve_language("Klingon")
        assert isinstance(exc_info.value, LookupError)
        assert exc_info.value.target_type == "Language"
