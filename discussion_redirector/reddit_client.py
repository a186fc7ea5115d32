from __future__ import annotations

import http.client
import json
import logging
import time
import urllib.error
import urllib.request

from .config import DEFAULT_SEARCH_BASE_URL
from .models import CandidatePost

logger = logging.getLogger(__name__)


class SearchFetchError(RuntimeError):
    """Raised when a single search request fails or returns unreadable JSON."""


class RedditClient:
    def __init__(
        self,
        user_agent: str,
        timeout_seconds: int = 20,
        max_retries: int = 1,
        base_url: str = DEFAULT_SEARCH_BASE_URL,
    ) -> None:
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.base_url = base_url.rstrip("/")

    def search(self, url: str) -> list[CandidatePost]:
        payload = self._get_json(url)
        data = payload.get("data") if isinstance(payload, dict) else None
        children = data.get("children") if isinstance(data, dict) else None
        if not isinstance(children, list):
            return []

        posts: list[CandidatePost] = []
        for child in children:
            try:
                post = self.parse_post(child)
            except (TypeError, ValueError, OverflowError) as exc:
                logger.debug("Skipping undecodable search item: %s", exc)
                continue
            if post is None:
                continue
            posts.append(post)
        return posts

    def parse_post(self, child: object) -> CandidatePost | None:
        if not isinstance(child, dict):
            return None
        data = child.get("data")
        if not isinstance(data, dict):
            return None
        permalink = data.get("permalink")
        if not isinstance(permalink, str) or not permalink:
            return None
        return CandidatePost(
            url=self.base_url + permalink,
            title=_text(data.get("title")),
            subreddit=_text(data.get("subreddit")),
            upvotes=_number(data.get("score")),
        )

    def _get_json(self, url: str) -> dict:
        last_error: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            request = urllib.request.Request(
                url=url, headers={"User-Agent": self.user_agent, "Accept": "application/json"}
            )
            try:
                with urllib.request.urlopen(request, timeout=self.timeout_seconds) as response:
                    raw = response.read().decode("utf-8")
                    return json.loads(raw)
            except (
                urllib.error.URLError,
                http.client.HTTPException,
                TimeoutError,
                OSError,
                UnicodeDecodeError,
                json.JSONDecodeError,
            ) as exc:
                last_error = exc
                if attempt < self.max_retries:
                    time.sleep(1.5 * attempt)
        if last_error is None:
            raise SearchFetchError("Failed to fetch URL: unknown error")
        raise SearchFetchError(f"Failed to fetch URL: {url}") from last_error


def _text(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def _number(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            return 0.0
    return 0.0
