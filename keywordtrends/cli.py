"""
KeywordTrends CLI - Keyword ideas, trend insights and ad campaigns from the command line.
"""

import json
import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import (
    ACCESS_TOKEN,
    DEFAULT_LOCATION,
    DEFAULT_MODEL_ID,
    GCP_LOCATION,
    MODEL_ID,
    REQUIRED_KEYS,
    Settings,
)
from .exceptions import KeywordTrendsError
from .growth import GrowthMetric
from .models import IdeasResult
from .pipeline import KeywordTrends

console = Console()


def setup_logging(verbose: bool):
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def split_keywords(value: Optional[str]) -> list[str]:
    """'a, b,,c' -> ['a', 'b', 'c']"""
    if not value:
        return []
    return [kw.strip() for kw in value.split(",") if kw.strip()]


def read_text(path: str) -> str:
    with open(path, encoding="utf-8") as f:
        return f.read()


def write_text(path: str, text: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    console.print(f"\n[green]✓ Exported to {path}[/green]")


def create_pipeline() -> KeywordTrends:
    """Pipeline closed together with the current click context."""
    try:
        pipeline = KeywordTrends(Settings.load())
    except KeywordTrendsError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("Run [bold]keywordtrends check[/bold] to see which settings are missing.")
        sys.exit(1)
    return click.get_current_context().with_resource(pipeline)


def run_step(description: str, func, *args, **kwargs):
    """Run one pipeline call behind a spinner, exiting on library errors."""
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            progress.add_task(description, total=None)
            return func(*args, **kwargs)
    except KeywordTrendsError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


def load_ideas(
    pipeline: KeywordTrends,
    ideas_file: Optional[str],
    keywords: Optional[str],
    country: Optional[str],
    language_id: Optional[str],
) -> IdeasResult:
    """Ideas from an exported JSON file, or fetched fresh for the seed keywords."""
    if ideas_file:
        return IdeasResult.from_json(ideas_file)
    seeds = split_keywords(keywords)
    if not seeds:
        console.print("[red]Error: --keywords or --ideas-file required[/red]")
        sys.exit(1)
    return run_step("Fetching keyword ideas...", pipeline.get_ideas, seeds, country, language_id)


def export_json(path: str, data) -> None:
    write_text(path, json.dumps(data, indent=2, ensure_ascii=False))


def print_keywords(title: str, keywords: list[str]) -> None:
    console.print(f"\n[bold]{title}[/bold]")
    for keyword in keywords:
        console.print(f"  • {keyword}")


@click.group()
@click.version_option(version=__version__)
def main():
    """
    KeywordTrends - Google Ads keyword trends with Gemini.

    Fetch keyword ideas with 2 years of search volumes, surface the fastest
    growing ones, cluster them into topics and turn insights into ad campaigns.
    """
    pass


@main.command()
@click.option("--keywords", "-k", required=True, help="Seed keywords (comma-separated, max 20)")
@click.option("--country", "-c", default=None, help="Country name or geo criterion ID")
@click.option("--language", "-l", default=None, help="Language name or language criterion ID")
@click.option("--max-ideas", "-n", default=10000, help="Maximum number of ideas")
@click.option("--output", "-o", default=None, help="Output file (csv or json)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def ideas(keywords: str, country: str, language: str, max_ideas: int, output: str, verbose: bool):
    """
    Fetch keyword ideas with monthly search volumes.

    Examples:

        keywordtrends ideas -k "dog toys,dog pool" -c Germany -l German -o ideas.json
    """
    setup_logging(verbose)
    pipeline = create_pipeline()
    result = run_step(
        "Fetching keyword ideas...",
        pipeline.get_ideas,
        split_keywords(keywords),
        country,
        language,
        max_ideas,
    )

    console.print(f"\n[green]✓ {len(result.rows)} keyword ideas[/green]")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Keyword", style="cyan")
    table.add_column("Avg. searches", justify="right")
    table.add_column("MoM", justify="right")
    table.add_column("YoY", justify="right", style="green")
    for row in sorted(result.rows, key=lambda r: r.yoy, reverse=True)[:10]:
        table.add_row(row.keyword, f"{row.avg_monthly_searches:,}", f"{row.mom:.1%}", f"{row.yoy:.1%}")
    console.print(table)

    if output:
        if output.endswith(".csv"):
            result.to_csv(output)
            console.print(f"\n[green]✓ Exported to {output}[/green]")
        elif output.endswith(".json"):
            result.to_json(output)
            console.print(f"\n[green]✓ Exported to {output}[/green]")
        else:
            console.print("[yellow]Unknown format. Use .csv or .json extension.[/yellow]")


@main.command()
@click.option("--ideas-file", "-f", default=None, help="Ideas JSON exported by the ideas command")
@click.option("--keywords", "-k", default=None, help="Seed keywords (when no ideas file is given)")
@click.option("--country", "-c", default=None, help="Country name or geo criterion ID")
@click.option(
    "--metric",
    "-m",
    default=GrowthMetric.YOY.value,
    type=click.Choice([m.value for m in GrowthMetric]),
    help="Growth metric used to rank ideas",
)
@click.option("--language", "-l", default="English", help="Output language")
@click.option("--output", "-o", default=None, help="Output HTML file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def insights(
    ideas_file: str,
    keywords: str,
    country: str,
    metric: str,
    language: str,
    output: str,
    verbose: bool,
):
    """
    Generate HTML trend insights for the fastest growing ideas.

    Examples:

        keywordtrends insights -f ideas.json -m yoy -o insights.html
    """
    setup_logging(verbose)
    pipeline = create_pipeline()
    result = load_ideas(pipeline, ideas_file, keywords, country, None)
    seeds = result.seed_keywords or split_keywords(keywords)

    html = run_step(
        "Generating insights...",
        pipeline.get_insights,
        result.to_search_volumes(),
        seeds,
        metric,
        language,
    )

    if output:
        write_text(output, html)
    else:
        console.print(html)


@main.command()
@click.option("--ideas-file", "-f", default=None, help="Ideas JSON exported by the ideas command")
@click.option("--keywords", "-k", default=None, help="Seed keywords (when no ideas file is given)")
@click.option("--country", "-c", default=None, help="Country name or geo criterion ID")
@click.option("--prompt", "-p", default=None, help="Clustering instructions")
@click.option("--prompt-file", default=None, help="File with clustering instructions")
@click.option("--output", "-o", default=None, help="Output file (csv or json)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def clusters(
    ideas_file: str,
    keywords: str,
    country: str,
    prompt: str,
    prompt_file: str,
    output: str,
    verbose: bool,
):
    """
    Cluster keyword ideas into topics with aggregated growth.

    Examples:

        keywordtrends clusters -f ideas.json -p "Cluster these keywords by product category" -o clusters.csv
    """
    setup_logging(verbose)
    template = read_text(prompt_file) if prompt_file else prompt
    if not template:
        console.print("[red]Error: --prompt or --prompt-file required[/red]")
        sys.exit(1)

    pipeline = create_pipeline()
    result = load_ideas(pipeline, ideas_file, keywords, country, None)
    clustering = run_step(
        "Clustering ideas...", pipeline.get_clusters, result.to_search_volumes(), template
    )

    console.print(f"\n[green]✓ {len(clustering.clusters)} clusters[/green]")
    table = Table(show_header=True, header_style="bold")
    table.add_column("Topic", style="cyan")
    table.add_column("Keywords", justify="right")
    table.add_column("Volume", justify="right")
    table.add_column("YoY", justify="right", style="green")
    table.add_column("3M vs Avg", justify="right")
    for cluster in sorted(clustering.clusters, key=lambda c: c.growth.yoy, reverse=True):
        table.add_row(
            cluster.topic,
            str(cluster.count),
            f"{cluster.search_volume:,}",
            f"{cluster.growth.yoy:.1%}",
            f"{cluster.growth.three_months_vs_avg:.1%}",
        )
    console.print(table)

    if clustering.discarded_keywords:
        console.print(
            f"[yellow]{len(clustering.discarded_keywords)} keywords not found in ideas were discarded[/yellow]"
        )

    if output:
        if output.endswith(".csv"):
            clustering.to_csv(output)
            console.print(f"\n[green]✓ Exported to {output}[/green]")
        elif output.endswith(".json"):
            clustering.to_json(output)
            console.print(f"\n[green]✓ Exported to {output}[/green]")
        else:
            console.print("[yellow]Unknown format. Use .csv or .json extension.[/yellow]")


@main.command()
@click.option("--insights-file", "-i", required=True, help="Insights HTML from the insights command")
@click.option("--brand", "-b", required=True, help="Brand name")
@click.option("--ad-examples-file", "-e", required=True, help="File with example ads")
@click.option("--style-guide-file", default=None, help="Custom ad style guide")
@click.option("--language", "-l", default="English", help="Campaign language")
@click.option("--output", "-o", default=None, help="Output HTML file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def campaigns(
    insights_file: str,
    brand: str,
    ad_examples_file: str,
    style_guide_file: str,
    language: str,
    output: str,
    verbose: bool,
):
    """
    Turn insights into ready-to-use search ad campaigns.
    """
    setup_logging(verbose)
    pipeline = create_pipeline()

    kwargs = {}
    if style_guide_file:
        kwargs["style_guide"] = read_text(style_guide_file)

    html = run_step(
        "Generating campaigns...",
        pipeline.get_campaigns,
        read_text(insights_file),
        language,
        brand,
        read_text(ad_examples_file),
        **kwargs,
    )

    if output:
        write_text(output, html)
    else:
        console.print(html)


@main.command()
@click.option("--keywords", "-k", required=True, help="Topic keywords (comma-separated)")
@click.option(
    "--prompt",
    "-p",
    default="Find the currently trending search topics in Google Search related to the following keywords.",
    help="Trend discovery instructions",
)
@click.option("--output", "-o", default=None, help="Output JSON file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def trends(keywords: str, prompt: str, output: str, verbose: bool):
    """
    Discover trending keywords with Google Search grounding.
    """
    setup_logging(verbose)
    pipeline = create_pipeline()
    result = run_step(
        "Searching for trends...",
        pipeline.generate_trends_keywords,
        split_keywords(keywords),
        prompt,
    )

    print_keywords(f"{len(result)} trending keywords:", result)
    if output:
        export_json(output, result)


@main.command(name="new-search-terms")
@click.option("--customer-id", default=None, help="Google Ads customer ID (defaults to the configured account)")
@click.option("--recent-days", default=7, help="Days in the recent window")
@click.option("--baseline-days", default=30, help="Days in the baseline window before it")
@click.option("--language", "-l", default="English", help="Output language")
@click.option("--output", "-o", default=None, help="Output JSON file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def new_search_terms(
    customer_id: str,
    recent_days: int,
    baseline_days: int,
    language: str,
    output: str,
    verbose: bool,
):
    """
    Summarize search terms that are new in the recent window as broad match keywords.
    """
    setup_logging(verbose)
    pipeline = create_pipeline()
    result = run_step(
        "Comparing search terms...",
        pipeline.get_new_search_terms_clusters,
        customer_id,
        recent_days,
        baseline_days,
        language,
    )

    print_keywords(f"{len(result)} keywords for new search terms:", result)
    if output:
        export_json(output, result)


@main.command()
@click.option("--keywords", "-k", required=True, help="Keywords to write ads for (comma-separated)")
@click.option("--customer-id", default=None, help="Google Ads customer ID (defaults to the configured account)")
@click.option("--top-n", default=5, help="Number of top performing ads used as examples")
@click.option("--lookback-days", default=30, help="Days of ad performance to consider")
@click.option("--output", "-o", default=None, help="Output JSON file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def ads(keywords: str, customer_id: str, top_n: int, lookback_days: int, output: str, verbose: bool):
    """
    Write responsive search ads in the style of the account's best ads.
    """
    setup_logging(verbose)
    pipeline = create_pipeline()
    suggestions = run_step(
        "Writing ads...",
        pipeline.create_ad_suggestion,
        split_keywords(keywords),
        customer_id,
        top_n,
        lookback_days,
    )

    for index, ad in enumerate(suggestions, start=1):
        console.print(f"\n[bold]Ad {index}[/bold]")
        for headline in ad.headlines:
            console.print(f"  [cyan]{headline}[/cyan]")
        for description in ad.descriptions:
            console.print(f"  {description}")

    if output:
        export_json(output, [ad.model_dump() for ad in suggestions])


@main.command()
def check():
    """
    Check configuration.
    """
    console.print("\n[bold blue]🔑 KeywordTrends - Configuration Check[/bold blue]\n")

    status = Settings.check()

    console.print("[bold]Required:[/bold]")
    for key in REQUIRED_KEYS:
        if status[key]:
            console.print(f"  [green]✓[/green] {key}: Set")
        else:
            console.print(f"  [red]✗[/red] {key}: Not set")

    console.print("\n[bold]Optional:[/bold]")
    for key, fallback in (
        (MODEL_ID, DEFAULT_MODEL_ID),
        (GCP_LOCATION, DEFAULT_LOCATION),
        (ACCESS_TOKEN, "Application Default Credentials"),
    ):
        if status[key]:
            console.print(f"  [green]✓[/green] {key}: Set")
        else:
            console.print(f"  [yellow]○[/yellow] {key}: Not set → {fallback}")

    console.print("\n[bold]Setup Instructions:[/bold]")
    console.print("  export GOOGLE_ADS_DEVELOPER_TOKEN='your-developer-token'")
    console.print("  export GOOGLE_ADS_ACCOUNT_ID='123-456-7890'")
    console.print("  export GOOGLE_CLOUD_PROJECT='your-gcp-project'")
    console.print("  gcloud auth application-default login --scopes=https://www.googleapis.com/auth/adwords,https://www.googleapis.com/auth/cloud-platform")

    if not all(status[key] for key in REQUIRED_KEYS):
        sys.exit(1)


if __name__ == "__main__":
    main()
