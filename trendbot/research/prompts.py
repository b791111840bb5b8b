"""Prompt templates for trend research."""
from typing import Optional

RESEARCH_PROMPT = """\
You are a social media trend analyst specializing in {niche}.
Brand Context: {brand_context}
Content Type: {content_type}

Generate {count} current trending topics that would resonate with this brand and audience.
Each trend should include:
- A compelling title that grabs attention
- A detailed description explaining the trend
- Category classification (e.g. Educational, Entertaining, Promotional, Behind-the-Scenes)
- Relevance score (0-100) based on current popularity
- 3-5 content ideas for leveraging this trend
- Relevant hashtags (5-8)
- Key SEO keywords (3-5)

Return ONLY valid JSON in this exact format:
{{
  "trends": [
    {{
      "title": "Trend Title",
      "description": "Detailed trend description",
      "category": "Category Name",
      "relevance_score": 85,
      "content_ideas": ["Idea 1", "Idea 2", "Idea 3"],
      "hashtags": ["#hashtag1", "#hashtag2", "#hashtag3"],
      "keywords": ["keyword1", "keyword2", "keyword3"]
    }}
  ]
}}

Focus on actionable, brand-relevant trends that can drive engagement."""


def build_research_prompt(
    brand_context: str,
    niche: Optional[str] = None,
    content_type: Optional[str] = None,
    count: int = 5,
) -> str:
    """Fill the research template; blank inputs get generic wording."""
    return RESEARCH_PROMPT.format(
        brand_context=brand_context or "General content creation",
        niche=niche or "content creation",
        content_type=content_type or "various social media formats",
        count=count,
    )
