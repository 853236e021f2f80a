import aiohttp
import asyncio
import csv
import logging
from functools import partial
from typing import Awaitable, Callable, Dict, List, Set, Tuple

import pandas as pd

from seobot.services import google_service

logger = logging.getLogger(__name__)

BATCH_SIZE = 5
MAX_DEPTH = 2
DEFAULT_THRESHOLD = 0.3

SuggestionSource = Callable[[str], Awaitable[List[str]]]


async def expand_keywords(
    seed: str, suggest: SuggestionSource, max_depth: int = MAX_DEPTH
) -> List[str]:
    """Breadth-first expansion of ``seed`` through ``suggest``.

    Returns discovered keywords in discovery order, without the seed and
    without case-insensitive duplicates. Lookups run ``BATCH_SIZE`` at a
    time; a lookup that fails contributes no suggestions.
    """
    seen: Set[str] = {seed.strip().lower()}
    frontier: List[Tuple[str, int]] = [(seed, 0)]
    results: List[str] = []

    while frontier:
        batch, frontier = frontier[:BATCH_SIZE], frontier[BATCH_SIZE:]
        responses = await asyncio.gather(
            *(suggest(keyword) for keyword, _ in batch), return_exceptions=True
        )

        for (keyword, depth), suggestions in zip(batch, responses):
            if isinstance(suggestions, BaseException):
                logger.error(f"Suggestion lookup failed for '{keyword}': {suggestions}")
                continue
            for suggestion in suggestions:
                lower = suggestion.lower().strip()
                if lower in seen:
                    continue
                seen.add(lower)
                results.append(suggestion.strip())
                if depth < max_depth - 1:
                    frontier.append((suggestion, depth + 1))

    return results


def shingles(text: str) -> Set[str]:
    """Word bigrams plus single words of the lowercased text."""
    words = text.lower().split()
    result = {f"{a} {b}" for a, b in zip(words, words[1:])}
    result.update(words)
    return result


def similarity(a: str, b: str) -> float:
    """Jaccard index of the shingle sets of ``a`` and ``b``."""
    sa = shingles(a)
    sb = shingles(b)
    union = len(sa | sb)
    if union == 0:
        return 0.0
    return len(sa & sb) / union


def cluster_keywords(
    keywords: List[str], threshold: float = DEFAULT_THRESHOLD
) -> List[Dict]:
    """Greedy single-pass clustering of keywords by shingle similarity.

    Each unassigned keyword opens a cluster and pulls in every later
    unassigned keyword that is similar enough to it. Clusters are ordered
    by size, largest first, and labelled with their shortest member.
    """
    assigned = [False] * len(keywords)
    groups: List[List[str]] = []

    for i, keyword in enumerate(keywords):
        if assigned[i]:
            continue
        group = [keyword]
        assigned[i] = True
        for j in range(i + 1, len(keywords)):
            if assigned[j]:
                continue
            if similarity(keyword, keywords[j]) >= threshold:
                group.append(keywords[j])
                assigned[j] = True
        groups.append(group)

    groups.sort(key=len, reverse=True)

    clusters = []
    for group in groups:
        label = group[0]
        for member in group[1:]:
            if len(member) < len(label):
                label = member
        clusters.append({"label": label, "keywords": group})
    return clusters


def normalize_depth(depth) -> int:
    """Clamp a requested depth into ``1..MAX_DEPTH``; missing or 0 means the max."""
    return max(min(depth or MAX_DEPTH, MAX_DEPTH), 1)


async def search_keywords(seed: str, depth: int = MAX_DEPTH) -> Dict:
    """Expand ``seed`` via Google Suggest and cluster the results."""
    async with aiohttp.ClientSession() as session:
        suggest = partial(google_service.get_suggestions, session)
        all_keywords = await expand_keywords(seed, suggest, max_depth=depth)

    logger.info(f"Expanded '{seed}' to {len(all_keywords)} keywords")
    clusters = cluster_keywords(all_keywords)
    return {"seed": seed, "all_keywords": all_keywords, "clusters": clusters}


def clusters_to_csv(clusters: List[Dict]) -> str:
    """Render clusters as a two-column Keyword/Cluster CSV."""
    rows = [
        {"Keyword": keyword, "Cluster": cluster["label"]}
        for cluster in clusters
        for keyword in cluster["keywords"]
    ]
    df = pd.DataFrame(rows, columns=["Keyword", "Cluster"])
    return df.to_csv(index=False, quoting=csv.QUOTE_ALL)
