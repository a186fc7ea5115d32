from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from .models import CandidatePost, ScoredCandidate, SearchQuery

logger = logging.getLogger(__name__)

MIN_SCORE = 50
REJECTED_SCORE = -1
MAX_UPVOTE_BONUS = 20

EPISODE_BONUS = 30
SEASON_BONUS = 20
DISCUSSION_BONUS = 30
SPECULATION_PENALTY = 20
SUBREDDIT_BONUSES = {"anime": 20, "television": 15}
SPECULATION_PHRASES = ["pre-episode", "prediction", "theory"]


class SearchClient(Protocol):
    def search(self, url: str) -> list[CandidatePost]: ...


def score_candidate(
    post: CandidatePost, show_names: list[str], season: int, episode: int
) -> float:
    title = post.title.lower()
    subreddit = post.subreddit.lower()

    if not any(name.lower() in title for name in show_names if name):
        return REJECTED_SCORE

    score = 0.0
    episode_pattern = re.compile(rf"(episode {episode}|ep {episode}|e{episode:02d})", re.IGNORECASE)
    if episode_pattern.search(title):
        score += EPISODE_BONUS

    season_pattern = re.compile(rf"(season {season}|s{season:02d})", re.IGNORECASE)
    if season_pattern.search(title):
        score += SEASON_BONUS

    if "episode discussion" in title:
        score += DISCUSSION_BONUS

    score += SUBREDDIT_BONUSES.get(subreddit, 0)

    if any(phrase in title for phrase in SPECULATION_PHRASES):
        score -= SPECULATION_PENALTY

    score += min(post.upvotes / 10, MAX_UPVOTE_BONUS)
    return score


def rank_candidates(
    posts: list[CandidatePost], show_names: list[str], season: int, episode: int
) -> list[ScoredCandidate]:
    scored = [
        ScoredCandidate(post=post, score=score_candidate(post, show_names, season, episode))
        for post in posts
    ]
    accepted = [candidate for candidate in scored if candidate.score > MIN_SCORE]
    # sorted() is stable, so equal scores keep their merge order.
    return sorted(accepted, key=lambda candidate: candidate.score, reverse=True)


def collect_candidates(
    queries: list[SearchQuery], client: SearchClient, max_workers: int = 8
) -> list[CandidatePost]:
    """Run every search concurrently; results are concatenated in query order."""

    if not queries:
        return []

    workers = max(1, min(max_workers, len(queries)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(client.search, query.url) for query in queries]

    posts: list[CandidatePost] = []
    for query, future in zip(queries, futures):
        try:
            posts.extend(future.result())
        except Exception as exc:
            logger.warning("Search failed for %s: %s", query.query, exc)
    return posts


def find_discussion_url(
    queries: list[SearchQuery],
    show_names: list[str],
    season: int,
    episode: int,
    client: SearchClient,
    max_workers: int = 8,
) -> str | None:
    try:
        posts = collect_candidates(queries, client, max_workers=max_workers)
        ranked = rank_candidates(posts, show_names, season, episode)
    except Exception:
        logger.exception("Ranking search results failed")
        return None

    if not ranked:
        logger.info("No post scored above %d among %d candidates", MIN_SCORE, len(posts))
        return None

    best = ranked[0]
    logger.info("Found best match URL: %s", best.url)
    logger.info(
        "Match details: title=%r subreddit=%s score=%.1f",
        best.post.title,
        best.post.subreddit,
        best.score,
    )
    return best.url
