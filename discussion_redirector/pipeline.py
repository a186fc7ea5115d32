from __future__ import annotations

import logging
from typing import Protocol

from .config import AppConfig
from .identifiers import FormatError, parse_episode_id
from .metadata import MetadataResolver
from .models import ShowInfo
from .queries import build_search_queries
from .ranking import SearchClient, find_discussion_url
from .reddit_client import RedditClient

logger = logging.getLogger(__name__)

STREAM_TITLE = "Open Reddit Discussion"
STREAM_BEHAVIOR_HINT = "open-external"
SUPPORTED_TYPES = {"series"}


class ShowResolver(Protocol):
    def resolve(self, show_id: str) -> ShowInfo: ...


def resolve_discussion_url(
    identifier: str,
    config: AppConfig,
    metadata_resolver: ShowResolver | None = None,
    reddit_client: SearchClient | None = None,
) -> str | None:
    logger.info("Parsing episode identifier: %s", identifier)
    try:
        ref = parse_episode_id(identifier)
    except FormatError as exc:
        logger.warning("%s", exc)
        return None

    resolver = metadata_resolver or MetadataResolver(
        user_agent=config.user_agent,
        base_url=config.metadata_base_url,
        timeout_seconds=config.timeout_seconds,
        max_retries=config.max_retries,
    )
    show = resolver.resolve(ref.show_id)
    names = show.names
    logger.info(
        "Parsed: show=%r, alternative titles=%s, season=%d, episode=%d, total seasons=%d",
        show.canonical_name,
        list(show.aliases),
        ref.season,
        ref.episode,
        show.season_count,
    )

    queries = build_search_queries(names, ref.season, ref.episode, base_url=config.search_base_url)
    client = reddit_client or RedditClient(
        user_agent=config.user_agent,
        timeout_seconds=config.timeout_seconds,
        max_retries=config.max_retries,
        base_url=config.search_base_url,
    )
    return find_discussion_url(
        queries,
        names,
        ref.season,
        ref.episode,
        client=client,
        max_workers=config.max_workers,
    )


def resolve_discussion_stream(
    content_type: str,
    identifier: str,
    config: AppConfig,
    metadata_resolver: ShowResolver | None = None,
    reddit_client: SearchClient | None = None,
) -> dict:
    """Answer a Stremio stream request with at most one external discussion link."""
    if content_type not in SUPPORTED_TYPES:
        logger.info("Returning empty streams for unsupported type %r", content_type)
        return {"streams": []}

    try:
        url = resolve_discussion_url(
            identifier,
            config,
            metadata_resolver=metadata_resolver,
            reddit_client=reddit_client,
        )
    except Exception:
        logger.exception("Error processing stream request for %s", identifier)
        return {"streams": []}

    if url is None:
        logger.info("No Reddit posts found for %s", identifier)
        return {"streams": []}

    logger.info("Returning stream with URL: %s", url)
    return {
        "streams": [
            {
                "title": STREAM_TITLE,
                "externalUrl": url,
                "behaviorHint": STREAM_BEHAVIOR_HINT,
            }
        ]
    }
