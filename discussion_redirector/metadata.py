"""Show metadata lookup against IMDb title pages."""

from __future__ import annotations

import html
import http.client
import json
import logging
import re
import time
import urllib.error
import urllib.parse
import urllib.request

from .config import DEFAULT_METADATA_BASE_URL
from .models import ShowInfo

logger = logging.getLogger(__name__)

TITLE_RE = re.compile(r"<title>(.*?) - IMDb</title>", re.DOTALL)
TRAILING_PARENS_RE = re.compile(r"\s*\([^)]*\)\s*$")
SEASON_COUNT_RE = re.compile(r"(\d+)\s+season", re.IGNORECASE)
ALTERNATE_TITLES_RE = re.compile(r'"alternateTitles":\s*\[(.*?)\]', re.DOTALL)
ORIGINAL_TITLE_RE = re.compile(r'"originalTitle":\s*"([^"]*)"')
WHITESPACE_RE = re.compile(r"\s+")


class MetadataFetchError(RuntimeError):
    """Raised when the metadata page cannot be downloaded."""


class MetadataExtractError(RuntimeError):
    """Raised when no show title can be found in the metadata page."""


def fallback_show_info(show_id: str) -> ShowInfo:
    return ShowInfo(canonical_name=show_id, aliases=(), season_count=1)


def extract_show_info(document: str, show_id: str) -> ShowInfo:
    title_match = TITLE_RE.search(document)
    if not title_match:
        raise MetadataExtractError(f"No title found in metadata page for {show_id}")
    canonical_name = TRAILING_PARENS_RE.sub("", html.unescape(title_match.group(1))).strip()
    if not canonical_name:
        raise MetadataExtractError(f"Empty title in metadata page for {show_id}")

    season_match = SEASON_COUNT_RE.search(document)
    season_count = max(int(season_match.group(1)), 1) if season_match else 1

    discovered: list[str] = _parse_alternate_titles(document)
    original_match = ORIGINAL_TITLE_RE.search(document)
    if original_match:
        discovered.append(html.unescape(original_match.group(1)))
    discovered.append(WHITESPACE_RE.sub("", canonical_name))
    discovered.append(canonical_name.lower())

    aliases: dict[str, None] = {}
    for title in discovered:
        cleaned = title.strip()
        if cleaned and cleaned != canonical_name:
            aliases.setdefault(cleaned, None)

    return ShowInfo(
        canonical_name=canonical_name,
        aliases=tuple(aliases),
        season_count=season_count,
    )


def _parse_alternate_titles(document: str) -> list[str]:
    match = ALTERNATE_TITLES_RE.search(document)
    if not match or not match.group(1).strip():
        return []
    try:
        parsed = json.loads(f"[{match.group(1)}]")
    except json.JSONDecodeError:
        logger.debug("Ignoring malformed alternateTitles array")
        return []
    return [item for item in parsed if isinstance(item, str)]


class MetadataResolver:
    def __init__(
        self,
        user_agent: str,
        base_url: str = DEFAULT_METADATA_BASE_URL,
        timeout_seconds: int = 20,
        max_retries: int = 1,
    ) -> None:
        self.user_agent = user_agent
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries

    def title_url(self, show_id: str) -> str:
        return f"{self.base_url}/title/{urllib.parse.quote(show_id)}/"

    def resolve(self, show_id: str) -> ShowInfo:
        """Return show names for ``show_id``, degrading to the id itself on any failure."""

        url = self.title_url(show_id)
        logger.info("Fetching metadata page: %s", url)
        try:
            document = self._get_text(url)
            info = extract_show_info(document, show_id)
        except (MetadataFetchError, MetadataExtractError) as exc:
            logger.warning("Metadata lookup failed for %s, using fallback: %s", show_id, exc)
            return fallback_show_info(show_id)

        logger.info(
            "Found show: %s, alternative titles: %s, seasons: %d",
            info.canonical_name,
            ", ".join(info.aliases),
            info.season_count,
        )
        return info

    def _get_text(self, url: str) -> str:
        last_error: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            request = urllib.request.Request(
                url=url,
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "text/html",
                    "Accept-Language": "en-US,en;q=0.8",
                },
            )
            try:
                with urllib.request.urlopen(request, timeout=self.timeout_seconds) as response:
                    if response.status != 200:
                        raise MetadataFetchError(
                            f"Metadata page returned HTTP {response.status}: {url}"
                        )
                    return response.read().decode("utf-8", errors="replace")
            except (urllib.error.URLError, http.client.HTTPException, TimeoutError, OSError) as exc:
                last_error = exc
                if attempt < self.max_retries:
                    time.sleep(1.5 * attempt)
        if last_error is None:
            raise MetadataFetchError(f"Failed to fetch metadata page: {url}")
        raise MetadataFetchError(f"Failed to fetch metadata page: {url}") from last_error
