from __future__ import annotations

import re

from .models import EpisodeRef

EPISODE_ID_RE = re.compile(r"(tt\d+):(\d+):(\d+)")


class FormatError(ValueError):
    """Raised when an episode identifier is not `<showId>:<season>:<episode>`."""


def parse_episode_id(identifier: str) -> EpisodeRef:
    match = EPISODE_ID_RE.fullmatch((identifier or "").strip())
    if not match:
        raise FormatError(f"Invalid episode identifier: {identifier!r}")
    show_id, season, episode = match.groups()
    season_number = int(season)
    episode_number = int(episode)
    if season_number < 1 or episode_number < 1:
        raise FormatError(f"Season and episode must be positive: {identifier!r}")
    return EpisodeRef(show_id=show_id, season=season_number, episode=episode_number)
