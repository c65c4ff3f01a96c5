"""
Topic clustering of keyword ideas.

The model proposes clusters; reconciliation keeps only keywords that exist in
the idea data and attaches aggregated search volumes and growth metrics.
"""

import logging
from typing import Mapping, Sequence

from .gateway import GenerativeModelGateway
from .growth import calculate_growth, column_sum
from .models import (
    Cluster,
    ClusteringResult,
    ClusterProposal,
    GenerativeRequestConfig,
    ResponseType,
)
from .prompts import build_clustering_prompt

logger = logging.getLogger(__name__)


def _canonical_keys(ideas: Mapping[str, Sequence[int]]) -> dict[str, str]:
    """Lowercased keyword -> keyword as spelled in the ideas."""
    return {keyword.lower().strip(): keyword for keyword in ideas}


def partition_keywords(
    keywords: Sequence[str], canonical: Mapping[str, str]
) -> tuple[list[str], list[str]]:
    """
    Split keywords into (found, not found), dropping repeats.

    Found keywords are returned in their canonical spelling.
    """
    kept, discarded, seen = [], [], set()
    for keyword in keywords:
        key = keyword.lower().strip()
        if key in seen:
            continue
        seen.add(key)
        if key in canonical:
            kept.append(canonical[key])
        else:
            discarded.append(keyword)
    return kept, discarded


def build_cluster(topic: str, keywords: Sequence[str], ideas: Mapping[str, Sequence[int]]) -> Cluster:
    """Aggregate the histories of `keywords` (keys of `ideas`) into a Cluster."""
    histories = [list(ideas[keyword]) for keyword in keywords]
    history = column_sum(histories)
    return Cluster(
        topic=topic,
        keywords=list(keywords),
        search_volume_history=history,
        search_volume=sum(h[-1] for h in histories if h),
        growth=calculate_growth(history),
    )


def reconcile_clusters(
    proposals: Sequence[ClusterProposal],
    ideas: Mapping[str, Sequence[int]],
) -> ClusteringResult:
    """
    Reconcile model-proposed clusters with the authoritative idea data.

    Keywords missing from `ideas` (compared case-insensitively) are dropped and
    reported in `ClusteringResult.discarded`; this is expected model noise and
    not an error. Clusters left without keywords are kept.

    Args:
        proposals: Clusters as returned by the model
        ideas: keyword -> monthly search volume history (oldest first)

    Returns:
        ClusteringResult with reconciled clusters and discarded keywords
    """
    canonical = _canonical_keys(ideas)
    clusters, discarded = [], {}

    for proposal in proposals:
        kept, hallucinations = partition_keywords(proposal.keywords, canonical)
        if hallucinations:
            logger.warning(
                f"Clustering produced the following keywords for cluster {proposal.topic} "
                f"which could not be found in ideas: {', '.join(hallucinations)}"
            )
            discarded.setdefault(proposal.topic, []).extend(hallucinations)
        clusters.append(build_cluster(proposal.topic, kept, ideas))

    return ClusteringResult(clusters=clusters, discarded=discarded)


class KeywordClusterer:
    """Asks the model to cluster ideas and reconciles the answer."""

    def __init__(self, gateway: GenerativeModelGateway):
        self.gateway = gateway

    def cluster(
        self,
        ideas: Mapping[str, Sequence[int]],
        prompt_template: str,
        config: GenerativeRequestConfig,
    ) -> ClusteringResult:
        """
        Cluster keyword ideas into topics.

        Args:
            ideas: keyword -> monthly search volume history
            prompt_template: Instructions placed before the keyword list
            config: Model configuration; forced to JSON with a cluster schema

        Returns:
            ClusteringResult
        """
        keywords = list(ideas)
        logger.info(f"Starting to cluster {len(keywords)} ideas")

        prompt = build_clustering_prompt(prompt_template, keywords)
        config = config.model_copy(
            update={"response_type": ResponseType.JSON, "response_schema": list[ClusterProposal]}
        )
        proposals = self.gateway.generate(prompt, config)
        result = reconcile_clusters(proposals, ideas)

        logger.info(
            f"Clustered {len(keywords)} ideas into {len(result.clusters)} topics "
            f"({len(result.discarded_keywords)} keywords discarded)"
        )
        return result
