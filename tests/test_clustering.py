"""
Tests for clustering reconciliation
"""

import json
import logging

import pytest

from keywordtrends.clustering import (
    KeywordClusterer,
    build_cluster,
    partition_keywords,
    reconcile_clusters,
)
from keywordtrends.gateway import GenerativeModelGateway
from keywordtrends.growth import calculate_growth
from keywordtrends.models import ClusterProposal, ResponseType


class TestReconcileClusters:
    """Tests for reconcile_clusters"""

    def test_hallucinated_keyword_dropped(self, caplog):
        ideas = {"a": [1, 2], "b": [3, 4]}
        proposals = [ClusterProposal(topic="Letters", keywords=["a", "b", "ghost"])]

        with caplog.at_level(logging.WARNING, logger="keywordtrends.clustering"):
            result = reconcile_clusters(proposals, ideas)

        assert result.clusters[0].keywords == ["a", "b"]
        assert result.discarded == {"Letters": ["ghost"]}
        assert "ghost" in caplog.text

    def test_case_insensitive_match_uses_idea_spelling(self):
        ideas = {"Dog Pool": [10, 20]}
        result = reconcile_clusters([ClusterProposal(topic="Pools", keywords=["dog pool"])], ideas)
        assert result.clusters[0].keywords == ["Dog Pool"]
        assert result.discarded_keywords == []

    def test_cluster_keywords_subset_of_ideas(self, sample_ideas):
        proposals = [
            ClusterProposal(topic="Play", keywords=["dog pool", "dog games", "cat tree"]),
            ClusterProposal(topic="Home", keywords=["dog bed", "dog house"]),
        ]
        result = reconcile_clusters(proposals, sample_ideas)
        for cluster in result.clusters:
            assert set(cluster.keywords) <= set(sample_ideas)
        assert sorted(result.discarded_keywords) == ["cat tree", "dog house"]

    def test_empty_cluster_kept(self):
        result = reconcile_clusters([ClusterProposal(topic="Ghosts", keywords=["ghost"])], {"a": [1]})
        assert len(result.clusters) == 1
        assert result.clusters[0].count == 0
        assert result.clusters[0].search_volume == 0
        assert result.clusters[0].search_volume_history == []

    def test_repeated_keyword_counted_once(self):
        result = reconcile_clusters(
            [ClusterProposal(topic="A", keywords=["a", "A", "a"])], {"a": [5, 10]}
        )
        assert result.clusters[0].keywords == ["a"]
        assert result.clusters[0].search_volume == 10


class TestBuildCluster:
    """Tests for aggregated cluster metrics"""

    def test_volumes_and_growth(self, sample_ideas):
        cluster = build_cluster("Play", ["dog pool", "dog games"], sample_ideas)
        assert cluster.search_volume == 350
        assert cluster.search_volume_history == [200] * 12 + [350]
        assert cluster.growth.yoy == pytest.approx(0.75)
        assert cluster.growth.mom == pytest.approx(0.75)

    def test_partition_keywords(self):
        kept, discarded = partition_keywords(["X", "y", "z"], {"x": "x", "y": "Y"})
        assert kept == ["x", "Y"]
        assert discarded == ["z"]


class TestKeywordClusterer:
    """Tests for the model-backed clusterer"""

    def test_cluster_end_to_end(self, sample_ideas, model_config, fake_transport):
        answer = json.dumps(
            [
                {"topic": "Play", "keywords": ["dog pool", "dog games"]},
                {"topic": "Basics", "keywords": ["dog toys", "dog bed", "dog food"]},
            ]
        )
        transport = fake_transport(answer)
        clusterer = KeywordClusterer(GenerativeModelGateway(transport))

        result = clusterer.cluster(sample_ideas, "Cluster these keywords by intent", model_config)

        prompt, config = transport.calls[0]
        assert prompt.startswith("Cluster these keywords by intent\n")
        assert "dog pool\ndog games\ndog toys\ndog bed" in prompt
        assert config.response_type == ResponseType.JSON
        assert config.response_schema == list[ClusterProposal]

        assert [c.topic for c in result.clusters] == ["Play", "Basics"]
        assert result.clusters[1].keywords == ["dog toys", "dog bed"]
        assert result.discarded == {"Basics": ["dog food"]}

    def test_export(self, sample_ideas, tmp_path):
        result = reconcile_clusters(
            [ClusterProposal(topic="Play", keywords=["dog pool", "ghost"])], sample_ideas
        )
        csv_path = tmp_path / "clusters.csv"
        json_path = tmp_path / "clusters.json"
        result.to_csv(str(csv_path))
        result.to_json(str(json_path))

        lines = csv_path.read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("topic,keywords,search_volume")
        assert lines[1].startswith("Play,dog pool,200,")
        assert lines[1].endswith(",ghost")

        data = json.loads(json_path.read_text(encoding="utf-8"))
        assert data["clusters"][0]["keywords"] == ["dog pool"]
        assert data["discarded"] == {"Play": ["ghost"]}


def test_cluster_growth_round_trip(sample_ideas):
    """Growth stored on a cluster equals growth recomputed from its aggregated history"""
    proposals = [ClusterProposal(topic="All", keywords=list(sample_ideas))]
    cluster = reconcile_clusters(proposals, sample_ideas).clusters[0]
    assert calculate_growth(cluster.search_volume_history) == cluster.growth
