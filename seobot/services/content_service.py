import json
import logging
import re
from typing import Dict, List

from seobot.services import llm_service

logger = logging.getLogger(__name__)

FENCE_START_RE = re.compile(r"^```(?:json)?\n?")
FENCE_END_RE = re.compile(r"\n?```$")
MARKDOWN_PUNCT_RE = re.compile(r"[#*_\[\]()>`~-]")
HEADING_RE = re.compile(r"^#{2,3}\s.+$", re.M)

STATUS_POINTS = {"pass": 100, "warn": 50, "fail": 0}


def build_outline_prompt(keyword: str, language: str = "en") -> str:
    lang_instruction = "用中文回复。" if language == "zh" else "Reply in English."
    return f"""You are an SEO content strategist. Given the target keyword "{keyword}", generate an SEO-optimized article outline.

{lang_instruction}

Return a JSON object with this exact structure:
{{
  "keyword": "{keyword}",
  "suggestedTitles": ["title1", "title2", "title3"],
  "outline": [
    {{
      "tag": "h2",
      "text": "Section heading",
      "points": ["key point 1", "key point 2"],
      "suggestedWordCount": 200
    }},
    {{
      "tag": "h3",
      "text": "Subsection heading",
      "points": ["key point"],
      "suggestedWordCount": 150
    }}
  ],
  "totalSuggestedWordCount": 1500
}}

Requirements:
- 3 compelling title suggestions that include the keyword naturally
- 5-8 sections (mix of h2 and h3)
- Each section has 2-3 key points to cover
- Suggested word count per section
- Structure should be logical and SEO-friendly
- Only return valid JSON, no markdown fences."""


def parse_outline(content: str) -> Dict:
    """Parse the model's JSON reply, tolerating a surrounding code fence."""
    json_str = FENCE_END_RE.sub("", FENCE_START_RE.sub("", content))
    return json.loads(json_str)


async def generate_outline(keyword: str, language: str = "en") -> Dict:
    keyword = keyword.strip()
    content = await llm_service.chat_completion(
        build_outline_prompt(keyword, language), max_tokens=2000
    )
    return parse_outline(content)


def format_outline(outline: List[Dict]) -> str:
    sections = []
    for section in outline:
        marker = "##" if section.get("tag") == "h2" else "###"
        sections.append(
            f"{marker} {section.get('text', '')}\n"
            f"Key points: {'; '.join(section.get('points', []))}\n"
            f"Target: ~{section.get('suggestedWordCount', 0)} words"
        )
    return "\n\n".join(sections)


def build_article_prompt(
    keyword: str, title: str, outline: List[Dict], language: str = "en"
) -> str:
    lang_instruction = "用中文写作。" if language == "zh" else "Write in English."
    return f"""You are an expert SEO content writer. Write a complete article based on the following:

Title: {title}
Target keyword: {keyword}
{lang_instruction}

Outline:
{format_outline(outline)}

Requirements:
- Write the full article in Markdown format
- Start with the title as # heading
- Use the keyword naturally throughout (aim for 1-2% density)
- Do NOT stuff keywords unnaturally
- Write engaging, informative content
- Include a brief introduction and conclusion
- Each section should roughly match the suggested word count
- Use short paragraphs (3-5 sentences max) for readability
- Return ONLY the markdown article, no extra commentary"""


async def generate_article(
    keyword: str, title: str, outline: List[Dict], language: str = "en"
) -> Dict:
    article = await llm_service.chat_completion(
        build_article_prompt(keyword, title, outline, language), max_tokens=4000
    )
    score = compute_seo_score(article, keyword, title)
    logger.info(f"Generated article for '{keyword}' (score {score['overall']})")
    return {"article": article, "score": score}


def compute_seo_score(article: str, keyword: str, title: str) -> Dict:
    """Score a Markdown article against its target keyword.

    Six pass/warn/fail checks; the overall score is the rounded mean of
    100/50/0 points per check.
    """
    checks = []
    lower_article = article.lower()
    lower_keyword = keyword.lower().strip()

    title_has_keyword = lower_keyword in title.lower()
    checks.append({
        "name": "Keyword in Title",
        "status": "pass" if title_has_keyword else "fail",
        "detail": "Title contains target keyword" if title_has_keyword else "Title missing target keyword",
    })

    plain_text = MARKDOWN_PUNCT_RE.sub(" ", article)
    word_count = len(plain_text.split())
    keyword_count = len(re.findall(re.escape(lower_keyword), plain_text, re.I)) if lower_keyword else 0
    density = keyword_count / word_count * 100 if word_count > 0 else 0

    if density == 0:
        density_status = "fail"
    elif density < 0.5 or density > 3:
        density_status = "warn"
    else:
        density_status = "pass"
    checks.append({
        "name": "Keyword Density",
        "status": density_status,
        "detail": f"{density:.2f}% ({keyword_count} times in {word_count} words). Ideal: 0.5-2.5%",
    })

    if word_count < 600:
        length_status, length_note = "fail", "Too short"
    elif word_count < 1000:
        length_status, length_note = "warn", "Consider adding more"
    else:
        length_status, length_note = "pass", "Good length"
    checks.append({
        "name": "Article Length",
        "status": length_status,
        "detail": f"{word_count} words. {length_note}",
    })

    headings = HEADING_RE.findall(article)
    headings_with_keyword = [h for h in headings if lower_keyword in h.lower()]
    checks.append({
        "name": "Keyword in Headings",
        "status": "pass" if headings_with_keyword else "warn",
        "detail": f"{len(headings_with_keyword)}/{len(headings)} headings contain keyword",
    })

    paragraphs = [
        p for p in re.split(r"\n\n+", article)
        if p.strip() and not p.strip().startswith("#")
    ]
    long_paragraphs = [p for p in paragraphs if len(p.split()) > 100]
    if not long_paragraphs:
        paragraph_status = "pass"
    elif len(long_paragraphs) <= 2:
        paragraph_status = "warn"
    else:
        paragraph_status = "fail"
    checks.append({
        "name": "Paragraph Length",
        "status": paragraph_status,
        "detail": f"{len(long_paragraphs)} paragraphs over 100 words. Short paragraphs improve readability.",
    })

    has_intro = lower_article.find("\n## ") > 50
    checks.append({
        "name": "Introduction",
        "status": "pass" if has_intro else "warn",
        "detail": "Article has an introduction" if has_intro else "Consider adding a longer introduction",
    })

    overall = round(sum(STATUS_POINTS[c["status"]] for c in checks) / len(checks))
    return {"overall": overall, "checks": checks}
