import aiohttp
import asyncio
import logging
import math
import re
import time
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from seobot.config import ANALYZE_TIMEOUT, AUDIT_TIMEOUT
from seobot.services.errors import ServiceError

logger = logging.getLogger(__name__)

USER_AGENT = "SEOBot/1.0"
HEADING_RE = re.compile(r"^h[1-6]$")
MIXED_CONTENT_RE = re.compile(r"http://[^\"'\s]+\.(?:js|css|jpg|png|gif|svg)", re.I)


def _attr(name: str) -> Dict:
    return {name: re.compile(r".+")}


def _meta(soup: BeautifulSoup, **attrs) -> Optional[str]:
    """Content of the first <meta> matching ``attrs`` (case-insensitive values)."""
    query = {k: re.compile(f"^{re.escape(v)}$", re.I) for k, v in attrs.items()}
    tag = soup.find("meta", attrs=query)
    if tag is None:
        return None
    return tag.get("content") or ""


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


async def fetch_page(url: str, timeout: int, headers: Dict) -> Tuple[str, int]:
    """Fetch ``url`` and return its body and the response time in ms."""
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            start = time.monotonic()
            async with session.get(url, headers=headers) as response:
                load_time_ms = int((time.monotonic() - start) * 1000)
                html = await response.text(errors="replace")
    except asyncio.TimeoutError:
        raise ServiceError(f"Timed out fetching {url}")
    except aiohttp.ClientError as e:
        raise ServiceError(f"Failed to fetch {url}: {str(e)}")
    logger.info(f"Fetched {url} ({len(html)} chars, {load_time_ms}ms)")
    return html, load_time_ms


def extract_title(soup: BeautifulSoup) -> Optional[str]:
    tag = soup.find("title")
    if tag is None:
        return None
    return tag.get_text().strip() or None


def extract_meta_description(soup: BeautifulSoup) -> Optional[str]:
    return _meta(soup, name="description") or None


def extract_headings(soup: BeautifulSoup) -> List[Dict]:
    headings = []
    for tag in soup.find_all(HEADING_RE):
        text = tag.get_text().strip()
        if text:
            headings.append({"tag": tag.name.lower(), "text": text})
    return headings


def has_lang(soup: BeautifulSoup) -> bool:
    html_tag = soup.find("html")
    return bool(html_tag is not None and (html_tag.get("lang") or "").strip())


def title_check(title: Optional[str]) -> Tuple[str, str]:
    if not title:
        return "fail", "No title tag found"
    if len(title) < 30:
        return "warn", f"Title is short ({len(title)} chars). Aim for 50-60."
    if len(title) > 60:
        return "warn", f"Title is long ({len(title)} chars). May be truncated in SERPs."
    return "pass", f"Good length ({len(title)} chars)"


def meta_description_check(description: Optional[str]) -> Tuple[str, str]:
    if not description:
        return "fail", "No meta description found"
    if len(description) < 120:
        return "warn", f"Description is short ({len(description)} chars). Aim for 150-160."
    if len(description) > 160:
        return "warn", f"Description is long ({len(description)} chars). May be truncated."
    return "pass", f"Good length ({len(description)} chars)"


def h1_check(h1_tags: List[str]) -> Tuple[str, str]:
    if not h1_tags:
        return "fail", "No H1 tag found"
    if len(h1_tags) > 1:
        return "warn", f"Multiple H1 tags found ({len(h1_tags)}). Consider using only one."
    return "pass", "Single H1 tag found"


def analyze_html(url: str, html: str) -> Dict:
    """Quick on-page checks for title, description, H1, HTTPS, viewport and lang."""
    soup = BeautifulSoup(html, "html.parser")
    title = extract_title(soup)
    meta_description = extract_meta_description(soup)
    h1_tags = [h["text"] for h in extract_headings(soup) if h["tag"] == "h1"]

    checks = []

    def add(name, result):
        status, message = result
        checks.append({"name": name, "status": status, "message": message})

    add("Title Tag", title_check(title))
    add("Meta Description", meta_description_check(meta_description))
    add("H1 Tag", h1_check(h1_tags))
    add(
        "HTTPS",
        ("pass", "Site uses HTTPS")
        if url.startswith("https://")
        else ("fail", "Site does not use HTTPS"),
    )
    add(
        "Viewport Meta",
        ("pass", "Viewport meta tag found")
        if _meta(soup, name="viewport") is not None
        else ("warn", "No viewport meta tag, may not be mobile-friendly"),
    )
    add(
        "Language",
        ("pass", "HTML lang attribute set")
        if has_lang(soup)
        else ("warn", "No lang attribute on <html> tag"),
    )

    return {
        "url": url,
        "title": title,
        "meta_description": meta_description,
        "h1_tags": h1_tags,
        "checks": checks,
    }


def count_links(soup: BeautifulSoup, url: str) -> Tuple[int, int]:
    host = urlparse(url).hostname
    internal = external = 0
    for a in soup.find_all("a", attrs=_attr("href")):
        try:
            target = urlparse(urljoin(url, a["href"])).hostname
        except ValueError:
            external += 1
            continue
        if target and target == host:
            internal += 1
        else:
            external += 1
    return internal, external


def audit_html(url: str, html: str, load_time_ms: int) -> Dict:
    """Full technical audit: meta tags, content, security, mobile and performance."""
    soup = BeautifulSoup(html, "html.parser")
    content_length = len(html)

    title = extract_title(soup)
    meta_description = extract_meta_description(soup)
    heading_structure = extract_headings(soup)
    h1_tags = [h["text"] for h in heading_structure if h["tag"] == "h1"]

    images = soup.find_all("img")
    image_count = len(images)
    images_without_alt = [img for img in images if not img.get("alt")]
    internal_links, external_links = count_links(soup, url)

    has_og_title = _meta(soup, property="og:title") is not None
    has_og_desc = _meta(soup, property="og:description") is not None
    has_og_image = _meta(soup, property="og:image") is not None
    has_twitter_card = _meta(soup, name="twitter:card") is not None
    has_canonical = soup.find("link", rel="canonical") is not None
    has_viewport = _meta(soup, name="viewport") is not None
    robots = _meta(soup, name="robots")
    has_json_ld = (
        soup.find("script", attrs={"type": re.compile(r"^application/ld\+json$", re.I)})
        is not None
    )
    mixed_content = MIXED_CONTENT_RE.findall(html)

    for tag in soup(["script", "style"]):
        tag.decompose()
    word_count = len(soup.get_text(" ").split())

    checks = []

    def add(category, name, status, message):
        checks.append(
            {"name": name, "status": status, "message": message, "category": category}
        )

    add("Meta Tags", "Title Tag", *title_check(title))
    add("Meta Tags", "Meta Description", *meta_description_check(meta_description))

    if has_og_title and has_og_desc and has_og_image:
        add("Meta Tags", "Open Graph Tags", "pass",
            "og:title, og:description, og:image all present")
    else:
        missing = [
            name
            for name, present in (
                ("og:title", has_og_title),
                ("og:description", has_og_desc),
                ("og:image", has_og_image),
            )
            if not present
        ]
        status = "warn" if has_og_title or has_og_desc else "fail"
        add("Meta Tags", "Open Graph Tags", status, f"Missing: {', '.join(missing)}")

    add("Meta Tags", "Twitter Card", *(
        ("pass", "Twitter card meta tag found")
        if has_twitter_card
        else ("warn", "No twitter:card meta tag")
    ))
    add("Meta Tags", "Canonical URL", *(
        ("pass", "Canonical link tag found")
        if has_canonical
        else ("warn", "No canonical URL set, may cause duplicate content issues")
    ))

    add("Content", "H1 Tag", *h1_check(h1_tags))

    if word_count >= 300:
        add("Content", "Word Count", "pass", f"{word_count} words, good content length")
    else:
        status = "warn" if word_count >= 100 else "fail"
        add("Content", "Word Count", status, f"{word_count} words, thin content, aim for 300+")

    heading_tags = list(dict.fromkeys(h["tag"] for h in heading_structure))
    heading_count = len(heading_structure)
    add(
        "Content",
        "Heading Hierarchy",
        "pass" if heading_count >= 3 else "warn" if heading_count >= 1 else "fail",
        f"{heading_count} headings found ({', '.join(heading_tags)})",
    )

    if image_count == 0:
        add("Content", "Image Alt Text", "warn",
            "No images found, consider adding visual content")
    elif not images_without_alt:
        add("Content", "Image Alt Text", "pass", f"All {image_count} images have alt text")
    else:
        add("Content", "Image Alt Text", "warn",
            f"{len(images_without_alt)}/{image_count} images missing alt text")

    add(
        "Content",
        "Internal Links",
        "pass" if internal_links >= 3 else "warn" if internal_links >= 1 else "fail",
        f"{internal_links} internal links, {external_links} external links",
    )

    add("Security", "HTTPS", *(
        ("pass", "Site uses HTTPS")
        if url.startswith("https://")
        else ("fail", "Not using HTTPS, critical for SEO and trust")
    ))
    add("Security", "Mixed Content", *(
        ("warn", f"Found {len(mixed_content)} potential mixed content resources")
        if mixed_content
        else ("pass", "No obvious mixed content detected")
    ))

    add("Mobile", "Viewport Meta", *(
        ("pass", "Viewport meta tag found")
        if has_viewport
        else ("fail", "No viewport meta, not mobile-friendly")
    ))
    add("Mobile", "Language Attribute", *(
        ("pass", "HTML lang attribute set")
        if has_lang(soup)
        else ("warn", "No lang attribute on <html>")
    ))

    add(
        "Performance",
        "Page Load Time",
        "pass" if load_time_ms < 2000 else "warn" if load_time_ms < 5000 else "fail",
        f"{load_time_ms}ms (server response time)",
    )
    add(
        "Performance",
        "Page Size",
        "pass" if content_length < 100000 else "warn" if content_length < 500000 else "fail",
        f"{content_length / 1024:.0f} KB HTML",
    )

    if robots and "noindex" in robots.lower():
        add("Meta Tags", "Robots Meta", "fail", "Page is set to noindex!")
    elif robots:
        add("Meta Tags", "Robots Meta", "pass", f"robots: {robots}")
    else:
        add("Meta Tags", "Robots Meta", "pass",
            "No robots meta tag (defaults to index, follow)")

    add("Meta Tags", "Structured Data", *(
        ("pass", "JSON-LD structured data found")
        if has_json_ld
        else ("warn", "No structured data, consider adding Schema.org markup")
    ))

    passed = sum(1 for c in checks if c["status"] == "pass")
    warned = sum(1 for c in checks if c["status"] == "warn")
    score = _round_half_up((passed + warned * 0.5) / len(checks) * 100)

    return {
        "url": url,
        "title": title,
        "meta_description": meta_description,
        "h1_tags": h1_tags,
        "checks": checks,
        "score": score,
        "load_time_ms": load_time_ms,
        "content_length": content_length,
        "word_count": word_count,
        "image_count": image_count,
        "link_count": {"internal": internal_links, "external": external_links},
        "heading_structure": heading_structure[:30],
    }


async def analyze_url(url: str) -> Dict:
    html, _ = await fetch_page(url, ANALYZE_TIMEOUT, {"User-Agent": USER_AGENT})
    return analyze_html(url, html)


async def audit_url(url: str) -> Dict:
    headers = {
        "User-Agent": f"{USER_AGENT} (https://github.com/George3307/seobot)",
        "Accept": "text/html",
    }
    html, load_time_ms = await fetch_page(url, AUDIT_TIMEOUT, headers)
    return audit_html(url, html, load_time_ms)
