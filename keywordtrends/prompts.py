"""
Prompt templates for insights, clustering, trends and ad campaign generation.

All builders are pure string functions.
"""

import json
from typing import Sequence

from .models import AdCopy, TopPerformingAd

INSIGHTS_EXAMPLE_INPUT = """[
  "dog pool, 12242.3%",
  "dog games, 3602.5%",
  "pet health, 1014.9%"
]"""

INSIGHTS_EXAMPLE_OUTPUT = """<h1>Decoding Pet-Related Search Trends: Insights for Marketing & Strategy</h1>

<p>This analysis examines the provided Google Ads keywords related to "pets," sorted by descending YoY growth rate, to uncover consumer trends and potential marketing opportunities.</p>

<h2>Overall Trends:</h2>

<ul>
    <li><b>Explosive Growth in Pet-Specific Products and Activities:</b> The massive growth observed across all provided keywords points to a significant increase in pet owners' focus on enhancing their pets' lives. "Dog pool" (+12242.3%), "dog games" (+3602.5%), and "pet health" (+1014.9%) all show exceptional YoY increases, suggesting a surge in demand for products and services catering to these areas.</li>
</ul>

<h2>Cluster Insights & Marketing Takeaways:</h2>

<p>While the limited number of keywords prevents granular clustering, we can identify key themes and suggest marketing strategies based on them:</p>

<h3>1. Pet Enrichment & Entertainment:</h3>

<ul>
    <li><b>Focus:</b> Products and activities that provide mental and physical stimulation for pets, particularly dogs.</li>
    <li><b>Keywords:</b> "dog pool," "dog games"</li>
    <li><b>Strategy:</b>
        <ul>
            <li>Expand product lines to include a variety of dog pools, from basic wading pools to more elaborate setups.</li>
            <li>Develop and market a range of interactive dog games, including puzzle toys, fetch toys, and agility equipment.</li>
            <li>Create engaging content showcasing the benefits of pet enrichment and how your products meet those needs.</li>
        </ul>
    </li>
</ul>

<h3>2. Pet Health & Wellness:</h3>

<ul>
    <li><b>Focus:</b> Products and services that support pet health, including preventative care, nutrition, and veterinary services.</li>
    <li><b>Keywords:</b> "pet health"</li>
    <li><b>Strategy:</b>
        <ul>
            <li>Offer a range of pet health products, such as supplements, grooming tools, and first-aid kits.</li>
            <li>Partner with veterinarians or pet health professionals to offer educational content and resources.</li>
            <li>Develop targeted marketing campaigns highlighting the importance of preventative pet care.</li>
        </ul>
    </li>
</ul>

<h2>Recommendations for Future Analysis:</h2>

<ul>
    <li><b>Expand Keyword List:</b> Include a broader range of pet-related keywords to gain a more comprehensive understanding of search trends within this market.</li>
    <li><b>Analyze Competitor Performance:</b> Monitor search volume and growth for competitor brands to assess market positioning and identify potential threats and opportunities.</li>
    <li><b>Investigate Seasonality:</b> Analyze search trends over time to identify any seasonal patterns in pet-related searches.</li>
</ul>

<h2>Conclusion:</h2>

<p>The provided data, while limited, clearly indicates a growing interest in pet-related products and services, particularly in the areas of enrichment, entertainment, and health.</p>"""

CLUSTERING_OUTPUT_FORMAT = """
Output as a list of topics where each topic has a name and up to 10 keywords as JSON with this format:
  [
    {
      "topic": "A descriptive name of topic 1",
      "keywords": ["a1", "b1", "c1"]
    },
    {
      "topic": "A descriptive name of topic 2",
      "keywords": ["a2", "b2", "c2"]
    }
  ]
"""

TRENDS_INSTRUCTIONS = """
IMPORTANT:
- Do NOT add the topic keyword itself to the trends if not necessary.
- Only output the keywords itself and not add "trending" or "high demand for" other search terms
- Only output the keywords without any introduction or other annotations
- Do NOT add punctuation or unnecessary hyphens to keep the keyword as simple and generic as possible"""

DEFAULT_STYLE_GUIDE = """### Styleguide and Technical Specifications Google Search Ads

**Headlines**
*   **Quantity:** Provide up to 15 headlines.
*   **Character Limit:** Each headline has a maximum length of 30 characters.

**Descriptions**
*   **Quantity:** Provide up to 4 descriptions.
*   **Character Limit:** Each description has a maximum length of 90 characters.

### Headline Best Practices

*   **Create Unique Headlines:** Each headline should offer something different and be able to stand on its own. Avoid overly similar phrases as this limits the number of combinations Google can test.
*   **Incorporate Keywords:** Include your primary keywords in some of the headlines to improve relevance to user searches.
*   **Use Action-Oriented Language:** Start headlines with verbs like "Get," "Shop," or "Discover" to encourage clicks.
*   **Showcase Unique Value:** Highlight what makes your offer stand out, such as special promotions, guarantees, or exclusive features.

### Description Best Practices

*   **Write for Modularity:** Descriptions are paired with various headlines, so ensure each description is written to make sense independently and in combination with any headline.
*   **Focus on Benefits:** Clearly state the advantages and solutions your product or service provides to the customer.
*   **Include a Clear Call to Action (CTA):** Tell users what you want them to do next, for example, "Shop Now," "Request a Quote," or "Sign Up Today." Short and straightforward CTAs are effective.
*   **Highlight Promotions:** If you have special offers, discounts, or limited-time deals, feature them in your descriptions to create a sense of urgency and value.
"""


def format_growth_rows(ranked: Sequence[tuple[str, float]]) -> list[str]:
    """[("dog pool", 1.2)] -> ["dog pool, 120.0%"]"""
    return [f"{keyword}, {growth * 100:.1f}%" for keyword, growth in ranked]


def build_insights_prompt(
    ranked: Sequence[tuple[str, float]],
    seed_keywords: Sequence[str],
    metric_label: str = "YoY",
    language: str = "English",
) -> str:
    """
    Prompt asking for an HTML trend analysis of growing keywords.

    Args:
        ranked: (keyword, growth ratio) pairs sorted by growth descending
        seed_keywords: Topics the ideas were generated for
        metric_label: Human readable growth metric, e.g. "YoY"
        language: Output language
    """
    data = json.dumps(format_growth_rows(ranked), indent=2, ensure_ascii=False)
    return f"""You are a marketing and strategy analyst and you want to find interesting insights based on the topic(s) [{", ".join(seed_keywords)}] related list provided in the <DATA> section. Cluster this comma-separated list of search terms and {metric_label} search growth and identify overall trends. Also, consider the list is sorted descending by growth rate.

Output in {language}.

Output as HTML with standard HTML elements like <h1> and <ul> for captions or lists.
DO NOT add any introduction like "Of course! Here is the HTML" and instead only output the HTML code.

<EXAMPLE>
INPUT:
{INSIGHTS_EXAMPLE_INPUT}

OUTPUT:
{INSIGHTS_EXAMPLE_OUTPUT}
</EXAMPLE>

<DATA>
{data}
</DATA>"""


def build_clustering_prompt(template: str, keywords: Sequence[str]) -> str:
    """User template, one keyword per line, then the JSON output contract."""
    return f"{template}\n" + "\n".join(keywords) + f"\n{CLUSTERING_OUTPUT_FORMAT}"


def build_campaign_prompt(
    insights: str,
    language: str,
    brand_name: str,
    ad_examples: str,
    style_guide: str = DEFAULT_STYLE_GUIDE,
) -> str:
    """Prompt turning insights HTML into ready-to-use text ad campaigns."""
    return f"""I am a SEA manager working for {brand_name} and I want to create new Google Ads search campaigns based on the following input.
For each cluster in the **Cluster Insights & Marketing Takeaways:** section, generate a ready-to-use text ad campaign.

Ensure the new created ads are following the style, wording, tonality of the following ad examples:
{ad_examples}

Follow this style guide:
{style_guide}

Output as HTML with standard HTML elements like <h1> and <ul> for captions or lists.
DO NOT add any introduction and instead only output the HTML code.

Create the Campaigns in {language}.
Please style the Ad examples so that they look like text ads shown on google.com

Insights:

{insights}
"""


def build_trends_prompt(template: str, keywords: Sequence[str]) -> str:
    return f"{template}\n\nKeywords:\n" + "\n".join(keywords) + f"\n{TRENDS_INSTRUCTIONS}"


def build_new_search_terms_prompt(
    search_terms: Sequence[str], language: str = "English", max_keywords: int = 20
) -> str:
    return f"""Given a list of google ads search terms defined below in SEARCH_TERMS.
Return a list of maximum {max_keywords} different broad match keywords that represent those search terms as best as possible.

Please use {language} for the output.
Output format should be an array of strings.

SEARCH_TERMS:
{", ".join(search_terms)}"""


def build_ad_request_prompt(keywords: Sequence[str], ad_count: int = 3) -> str:
    """One user turn of the few-shot ad generation dialogue."""
    return f"""
*User:*

Please write {ad_count} distinct ads, each with 15 headlines and 4 descriptions for the following keywords:
[{", ".join(keywords)}]

Make sure the ads are different from each other to cover different angles.
Do not produce placeholders (e.g. {{KeyWord: Vintage Jeans}}) and instead produce readable text.
Output strictly as a JSON array of objects, where each object has 'headlines' (array of strings) and 'descriptions' (array of strings) properties.

*Model:*
"""


def build_ad_examples_prompt(ads: Sequence[TopPerformingAd]) -> str:
    """Few-shot examples built from existing top performing ads and their keywords."""
    examples = []
    for ad in ads:
        copy = AdCopy(headlines=ad.headlines, descriptions=ad.descriptions)
        examples.append(
            build_ad_request_prompt(ad.keywords)
            + json.dumps(copy.model_dump(), indent=2, ensure_ascii=False)
            + "\n"
        )
    return "\n".join(examples)
