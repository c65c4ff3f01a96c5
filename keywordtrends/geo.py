"""
Resolve location and language names to Google Ads criterion IDs.
"""

import logging
from typing import Sequence

from .ads_client import GoogleAdsClient
from .exceptions import LookupNotFoundError
from .ideas import chunk

logger = logging.getLogger(__name__)

# Maximum number of names per geoTargetConstants:suggest request
MAX_NAMES_PER_REQUEST = 25


class GeoResolver:
    """
    Maps human-readable names to the numeric criterion IDs the Ads API expects.

    Every queried name must resolve to exactly one ID; unresolvable names raise
    LookupNotFoundError.
    """

    def __init__(self, ads_client: GoogleAdsClient):
        self.ads = ads_client

    def get_geo_target_constant_suggestions(self, names: Sequence[str]) -> list[dict]:
        response = self.ads.post(
            "geoTargetConstants:suggest",
            {"locale": "en", "locationNames": {"names": list(names)}},
        )
        return response.get("geoTargetConstantSuggestions", [])

    def get_criterion_ids(
        self, names: Sequence[str], target_type: str = "Country"
    ) -> dict[str, str]:
        """
        Resolve location names to criterion IDs.

        Args:
            names: Location names, e.g. ["Germany", "france"]
            target_type: Only suggestions of this target type are considered

        Returns:
            Mapping of lowercased name -> criterion ID

        Raises:
            LookupNotFoundError: if a name has no matching suggestion
        """
        suggestions = []
        for batch in chunk(list(names), MAX_NAMES_PER_REQUEST):
            suggestions.extend(self.get_geo_target_constant_suggestions(batch))

        by_term = {}
        for suggestion in suggestions:
            constant = suggestion.get("geoTargetConstant", {})
            if constant.get("targetType") != target_type:
                continue
            term = str(suggestion.get("searchTerm", "")).lower()
            by_term.setdefault(term, str(constant.get("id")))

        ids = {}
        for name in names:
            key = name.lower()
            if key not in by_term:
                raise LookupNotFoundError(name, target_type)
            ids[key] = by_term[key]

        logger.info(f"Resolved {len(ids)} {target_type.lower()} name(s) to criterion IDs")
        return ids

    def get_language_ids(self, names: Sequence[str]) -> dict[str, str]:
        """
        Resolve language names (e.g. "English") to language criterion IDs.

        Raises:
            LookupNotFoundError: if a language is not found
        """
        rows = self.ads.search(
            "SELECT language_constant.id, language_constant.name "
            "FROM language_constant WHERE language_constant.targetable = TRUE"
        )
        by_name = {
            str(row["languageConstant"]["name"]).lower(): str(row["languageConstant"]["id"])
            for row in rows
        }

        ids = {}
        for name in names:
            key = name.lower()
            if key not in by_name:
                raise LookupNotFoundError(name, "Language")
            ids[key] = by_name[key]
        return ids

    def resolve_language(self, language: str) -> str:
        """Pass numeric IDs through, resolve names."""
        language = str(language).strip()
        if language.isdigit():
            return language
        return self.get_language_ids([language])[language.lower()]

    def resolve_location(self, location: str) -> str:
        """Pass numeric IDs through, resolve country names."""
        location = str(location).strip()
        if location.isdigit():
            return location
        return self.get_criterion_ids([location])[location.lower()]
