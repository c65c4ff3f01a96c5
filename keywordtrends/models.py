"""
Data models for KeywordTrends
"""

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

MONTHS_OF_YEAR = [
    "JANUARY",
    "FEBRUARY",
    "MARCH",
    "APRIL",
    "MAY",
    "JUNE",
    "JULY",
    "AUGUST",
    "SEPTEMBER",
    "OCTOBER",
    "NOVEMBER",
    "DECEMBER",
]


class ResponseType(str, Enum):
    """Response MIME type requested from the model."""

    TEXT = "text/plain"
    JSON = "application/json"


class MonthlySearchVolume(BaseModel):
    """Search count of a keyword for one calendar month."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(..., description="Calendar year")
    month: int = Field(..., ge=1, le=12, description="Calendar month (1-12)")
    monthly_searches: int = Field(default=0, ge=0, description="Searches in that month")


class KeywordIdea(BaseModel):
    """A keyword idea with its monthly search volume history (oldest first)."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="The keyword text")
    monthly_search_volumes: list[MonthlySearchVolume] = Field(
        default_factory=list, description="Monthly search volumes, oldest first"
    )
    avg_monthly_searches: int = Field(default=0, description="Average monthly searches")

    @property
    def search_volumes(self) -> list[int]:
        return [m.monthly_searches for m in self.monthly_search_volumes]

    @property
    def latest_search_volume(self) -> int:
        volumes = self.search_volumes
        return volumes[-1] if volumes else 0

    @classmethod
    def from_api(cls, result: dict) -> "KeywordIdea":
        """
        Build an idea from a generateKeywordIdeas / historical metrics result.

        The API sends int64 values as strings and months as enum names.
        """
        metrics = result.get("keywordIdeaMetrics") or result.get("keywordMetrics") or {}
        volumes = []
        for item in metrics.get("monthlySearchVolumes", []):
            month = item.get("month")
            if isinstance(month, str):
                month = MONTHS_OF_YEAR.index(month.upper()) + 1
            volumes.append(
                MonthlySearchVolume(
                    year=int(item.get("year", 0)),
                    month=int(month),
                    monthly_searches=int(item.get("monthlySearches") or 0),
                )
            )
        return cls(
            text=result.get("text") or result.get("searchQuery", ""),
            monthly_search_volumes=volumes,
            avg_monthly_searches=int(metrics.get("avgMonthlySearches") or 0),
        )


class GrowthMetrics(BaseModel):
    """Relative growth signals derived from a search volume history."""

    model_config = ConfigDict(frozen=True)

    yoy: float = Field(default=0.0, description="Latest month vs same month a year ago")
    mom: float = Field(default=0.0, description="Latest month vs previous month")
    latest_vs_avg: float = Field(default=0.0, description="Latest month vs mean of the series")
    latest_vs_max: float = Field(
        default=0.0, description="Latest month vs max of the series excluding the latest month"
    )
    three_months_vs_avg: float = Field(
        default=0.0, description="Mean of last 3 months vs mean of the 21 months before"
    )


class IdeaRow(BaseModel):
    """Flat representation of a keyword idea for tabular export."""

    keyword: str
    avg_monthly_searches: int = 0
    mom: float = 0.0
    yoy: float = 0.0
    search_volumes: list[int] = Field(default_factory=list)


class IdeasResult(BaseModel):
    """Keyword ideas fetched for a set of seed keywords."""

    seed_keywords: list[str] = Field(default_factory=list)
    rows: list[IdeaRow] = Field(default_factory=list)

    def to_search_volumes(self) -> dict[str, list[int]]:
        """Keyword -> search volume history mapping used by insights and clustering."""
        return {row.keyword: row.search_volumes for row in self.rows}

    def to_csv(self, filepath: str) -> None:
        """Export idea rows to CSV file"""
        import csv

        months = max((len(row.search_volumes) for row in self.rows), default=0)
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(
                ["keyword", "avg_monthly_searches", "mom", "yoy"]
                + [f"month_{i + 1}" for i in range(months)]
            )
            for row in self.rows:
                writer.writerow(
                    [row.keyword, row.avg_monthly_searches, row.mom, row.yoy, *row.search_volumes]
                )

    def to_json(self, filepath: str) -> None:
        """Export to JSON file"""
        import json

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(), f, indent=2, ensure_ascii=False)

    @classmethod
    def from_json(cls, filepath: str) -> "IdeasResult":
        with open(filepath, encoding="utf-8") as f:
            return cls.model_validate_json(f.read())


class ClusterProposal(BaseModel):
    """A topic cluster as proposed by the model, before reconciliation."""

    topic: str = Field(..., description="A descriptive name of the topic")
    keywords: list[str] = Field(default_factory=list, description="Keywords of the topic")


class Cluster(BaseModel):
    """A reconciled cluster of keywords with aggregated search volume."""

    topic: str = Field(..., description="Cluster topic")
    keywords: list[str] = Field(default_factory=list, description="Keywords found in the ideas")
    search_volume_history: list[int] = Field(
        default_factory=list, description="Element-wise sum of member histories"
    )
    search_volume: int = Field(default=0, description="Latest month aggregate")
    growth: GrowthMetrics = Field(default_factory=GrowthMetrics)

    @property
    def count(self) -> int:
        return len(self.keywords)


class ClusteringResult(BaseModel):
    """Reconciled clusters plus the keywords discarded as hallucinations."""

    clusters: list[Cluster] = Field(default_factory=list)
    discarded: dict[str, list[str]] = Field(
        default_factory=dict, description="Topic -> keywords not found in the ideas"
    )

    @property
    def discarded_keywords(self) -> list[str]:
        return [kw for keywords in self.discarded.values() for kw in keywords]

    def to_csv(self, filepath: str) -> None:
        """Export clusters to CSV file"""
        import csv

        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(
                [
                    "topic", "keywords", "search_volume", "yoy", "mom",
                    "latest_vs_avg", "latest_vs_max", "three_months_vs_avg", "discarded",
                ]
            )
            for cluster in self.clusters:
                writer.writerow(
                    [
                        cluster.topic,
                        ", ".join(cluster.keywords),
                        cluster.search_volume,
                        cluster.growth.yoy,
                        cluster.growth.mom,
                        cluster.growth.latest_vs_avg,
                        cluster.growth.latest_vs_max,
                        cluster.growth.three_months_vs_avg,
                        ", ".join(self.discarded.get(cluster.topic, [])),
                    ]
                )

    def to_json(self, filepath: str) -> None:
        """Export to JSON file"""
        import json

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(), f, indent=2, ensure_ascii=False)


class GenerativeRequestConfig(BaseModel):
    """Per-call configuration of a generative model request."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    model_id: str = Field(..., description="Gemini model ID, e.g. gemini-2.5-pro")
    project_id: str = Field(..., description="GCP project hosting the Vertex AI endpoint")
    location: str = Field(default="us-central1", description="Vertex AI region")
    temperature: float = Field(default=0.7)
    top_p: float = Field(default=0.9)
    max_output_tokens: Optional[int] = Field(default=None)
    response_type: ResponseType = Field(default=ResponseType.TEXT)
    response_schema: Optional[Any] = Field(
        default=None,
        description="Type the JSON response must conform to (pydantic model, list[...] etc.)",
    )
    enable_retrieval_grounding: bool = Field(
        default=False, description="Ground the answer with Google Search"
    )
    thinking_budget: Optional[int] = Field(default=1024)

    @property
    def is_json(self) -> bool:
        return self.response_type == ResponseType.JSON


class SearchTermSet(BaseModel):
    """Deduplicated search terms seen within a date range."""

    model_config = ConfigDict(frozen=True)

    terms: frozenset[str] = Field(default_factory=frozenset)
    ranked: tuple[str, ...] = Field(default=(), description="Terms in query order, best first")
    start: date = Field(..., description="First day of the range (inclusive)")
    end: date = Field(..., description="Day after the range (exclusive)")

    def __sub__(self, other: "SearchTermSet") -> set[str]:
        return set(self.terms - other.terms)

    def new_terms(self, baseline: "SearchTermSet") -> list[str]:
        """`self - baseline`, keeping this set's ranking."""
        return [term for term in self.ranked if term not in baseline.terms]


class AdCopy(BaseModel):
    """Responsive search ad text assets."""

    headlines: list[str] = Field(default_factory=list)
    descriptions: list[str] = Field(default_factory=list)


class TopPerformingAd(AdCopy):
    """An existing ad together with the broad match keywords of its ad group."""

    ad_group_id: str
    keywords: list[str] = Field(default_factory=list)
