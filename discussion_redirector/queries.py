from __future__ import annotations

import urllib.parse

from .config import DEFAULT_SEARCH_BASE_URL
from .models import SearchQuery

# Characters JavaScript's encodeURIComponent leaves untouched besides alphanumerics.
_UNRESERVED = "-_.!~*'()"


def build_phrasings(name: str, season: int, episode: int) -> list[str]:
    return [
        f'"{name}" "Season {season}" "Episode {episode}" "Discussion"',
        f'"{name}" "S{season:02d}E{episode:02d}" "Discussion"',
        f'"{name}" "Episode {episode}" "Discussion"',
    ]


def search_url(query: str, base_url: str = DEFAULT_SEARCH_BASE_URL) -> str:
    encoded = urllib.parse.quote(query, safe=_UNRESERVED)
    return f"{base_url.rstrip('/')}/search.json?q={encoded}&sort=relevance&t=all&limit=100"


def build_search_queries(
    names: list[str], season: int, episode: int, base_url: str = DEFAULT_SEARCH_BASE_URL
) -> list[SearchQuery]:
    if not names:
        raise ValueError("At least one show name is required to build search queries")
    return [
        SearchQuery(query=query, url=search_url(query, base_url))
        for name in names
        for query in build_phrasings(name, season, episode)
    ]
