from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class EpisodeRef:
    show_id: str
    season: int
    episode: int


@dataclass(slots=True, frozen=True)
class ShowInfo:
    canonical_name: str
    aliases: tuple[str, ...] = ()
    season_count: int = 1

    @property
    def names(self) -> list[str]:
        return [self.canonical_name, *self.aliases]


@dataclass(slots=True, frozen=True)
class SearchQuery:
    query: str
    url: str


@dataclass(slots=True)
class CandidatePost:
    url: str
    title: str
    subreddit: str
    upvotes: float


@dataclass(slots=True)
class ScoredCandidate:
    post: CandidatePost
    score: float

    @property
    def url(self) -> str:
        return self.post.url
