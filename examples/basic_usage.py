"""
KeywordTrends - Basic Usage Example

Before running, configure Google Ads and Vertex AI access:
    export GOOGLE_ADS_DEVELOPER_TOKEN='your-developer-token'
    export GOOGLE_ADS_ACCOUNT_ID='123-456-7890'
    export GOOGLE_CLOUD_PROJECT='your-gcp-project'
    gcloud auth application-default login

Run from project root:
    python examples/basic_usage.py
"""

from keywordtrends import ConfigurationError, KeywordTrends, Settings


def main():
    try:
        settings = Settings.load()
    except ConfigurationError as e:
        print(f"Error: {e}")
        print("  Run `keywordtrends check` for setup instructions")
        return

    with KeywordTrends(settings) as trends:
        run(trends)


def run(trends):
    seeds = ["dog toys", "dog pool", "dog bed"]

    print(f"\n🔑 Fetching keyword ideas for {', '.join(seeds)}...")
    ideas = trends.get_ideas(seeds, country="Germany", language="German", max_ideas=500)
    print(f"✓ {len(ideas.rows)} ideas with more than 100 monthly searches")

    print("\n📈 Top 10 by YoY growth:")
    for row in sorted(ideas.rows, key=lambda r: r.yoy, reverse=True)[:10]:
        print(f"   {row.keyword}: {row.yoy:+.0%} YoY, {row.avg_monthly_searches:,} avg. searches")

    volumes = ideas.to_search_volumes()

    # Trend insights as HTML
    html = trends.get_insights(volumes, seeds, growth_metric="yoy", language="English")
    with open("insights.html", "w", encoding="utf-8") as f:
        f.write(html)
    print("\n✓ Insights written to insights.html")

    # Topic clusters with aggregated growth
    clustering = trends.get_clusters(
        volumes, "Cluster the following dog related search terms by product category."
    )
    print("\n🏷️ Clusters:")
    for cluster in clustering.clusters:
        print(
            f"   {cluster.topic}: {cluster.count} keywords, "
            f"{cluster.search_volume:,} searches, {cluster.growth.yoy:+.0%} YoY"
        )
    if clustering.discarded_keywords:
        print(f"   ({len(clustering.discarded_keywords)} keywords not in the ideas were dropped)")

    ideas.to_csv("ideas.csv")
    clustering.to_json("clusters.json")
    print("\n✓ Exported ideas.csv and clusters.json")


if __name__ == "__main__":
    main()
