"""
Prompt templates for the four generation calls.

Every prompt starts with the same product context line
("Product: <title> by <brand> (<category>)") and ends with an explicit
instruction on the expected output shape.
"""

from typing import Dict

from listings.services.optimization_types import ListingContent

KEYWORD_FEATURES_CHARS = 300

TITLE_PROMPT = (
    "{context}\n\n"
    "Optimize this Amazon title for SEO and readability. Keep under 200 chars, "
    "include key benefits, maintain brand name:\n"
    '"{title}"\n\n'
    "Optimized title:"
)

BULLETS_PROMPT = (
    "{context}\n\n"
    "Rewrite these bullet points - make them concise, benefit-focused, and scannable:\n"
    "{bullet_points}\n\n"
    "Optimized bullets (max 5):"
)

DESCRIPTION_PROMPT = (
    "{context}\n\n"
    "Enhance this description - make it persuasive yet compliant, highlight key "
    "features and benefits:\n"
    '"{description}"\n\n'
    "Optimized description:"
)

KEYWORDS_PROMPT = (
    "{context}\n\n"
    "Suggest 5 high-impact keywords for Amazon SEO based on this product. Focus on "
    "search terms buyers actually use:\n"
    "Title: {title}\n"
    "Features: {features}\n\n"
    "Keywords (comma-separated):"
)


def build_context(content: ListingContent) -> str:
    context = f"Product: {content.title}"
    if content.brand:
        context += f" by {content.brand}"
    if content.category:
        context += f" ({content.category})"
    return context


def build_prompts(content: ListingContent) -> Dict[str, str]:
    """
    Build the title, bullets, description and keywords prompts.

    Returns:
        Dict keyed by field name in call order
    """
    context = build_context(content)
    bullets = content.bullet_points or ""
    features = bullets[:KEYWORD_FEATURES_CHARS] or "N/A"

    return {
        "title": TITLE_PROMPT.format(context=context, title=content.title),
        "bullets": BULLETS_PROMPT.format(context=context, bullet_points=bullets),
        "description": DESCRIPTION_PROMPT.format(
            context=context, description=content.description or ""
        ),
        "keywords": KEYWORDS_PROMPT.format(
            context=context, title=content.title, features=features
        ),
    }
