# stardom/models.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Skills:
    """Conventionally 0..100; only charisma is floored (at 0)."""
    songwriting: int
    vocals: int
    production: int
    charisma: int


@dataclass(frozen=True)
class Player:
    name: str
    stage_name: str
    genre: str

    fans: int
    fame: int
    money: float

    # one entry per platform in catalog.PLATFORMS
    followers: Dict[str, int]
    skills: Skills
    label_id: Optional[str] = None


@dataclass(frozen=True)
class Song:
    id: str
    title: str
    genre: str
    quality: int  # 0..100
    release_date: date
    streams: int = 0
    revenue: float = 0.0
    lyrics: Optional[str] = None
    featured_artist: Optional[str] = None
    is_mastered: bool = False
    is_music_video: bool = False


@dataclass(frozen=True)
class Comment:
    user: str
    text: str


@dataclass(frozen=True)
class PostImpact:
    fans: int
    fame: int
    streams_boost: Optional[int] = None


@dataclass(frozen=True)
class SocialPost:
    id: str
    platform: str
    content: str
    type: str
    likes: int
    comments: Tuple[Comment, ...]
    timestamp: date
    impact: PostImpact

    # Video posts only
    video_title: Optional[str] = None
    video_description: Optional[str] = None
    thumbnail_url: Optional[str] = None


@dataclass(frozen=True)
class Award:
    id: str
    year: int
    category: str
    reason: str


@dataclass(frozen=True)
class SponsoredOffer:
    id: str
    brand: str
    payout: float
    requirement: str
    charisma_penalty: int  # 1..10


@dataclass(frozen=True)
class Label:
    id: str
    name: str
    prestige: int
    fame_requirement: int
    signing_bonus: int
    revenue_split: int  # percent of royalties the artist keeps
    description: str = ""


@dataclass(frozen=True)
class FeaturedArtist:
    name: str
    fame: int
    fee: int


@dataclass(frozen=True)
class FanReplyOption:
    label: str
    result: str
    bonus_type: str  # fans | charisma | fame | money
    bonus_value: int


@dataclass(frozen=True)
class FanInteraction:
    username: str
    message: str
    options: Tuple[FanReplyOption, ...]


@dataclass(frozen=True)
class HistoryPoint:
    month: int
    fans: int


@dataclass(frozen=True)
class CareerState:
    """
    The aggregate root. Every transition returns a new CareerState; nothing
    here is mutated in place.

    `songs` are released (newest first), `unreleased_songs` is the vault.
    `unsettled_streams` collects the weekly stream gains since the last
    monthly settlement.
    """
    player: Player
    current_date: date
    current_week: int  # 0 before the first advance, 1..4 afterwards

    songs: Tuple[Song, ...] = ()
    unreleased_songs: Tuple[Song, ...] = ()
    awards: Tuple[Award, ...] = ()
    social_posts: Tuple[SocialPost, ...] = ()
    trending_topics: Tuple[str, ...] = ()
    active_offers: Tuple[SponsoredOffer, ...] = ()
    history: Tuple[HistoryPoint, ...] = ()
    news: Tuple[str, ...] = ()

    unsettled_streams: int = 0
    pending_event: Optional[str] = None
    pending_fan_interaction: Optional[FanInteraction] = None


@dataclass(frozen=True)
class StudioSession:
    """A booked recording session; costs are fixed when it is planned."""
    title: str
    genre: str
    rent: int
    ghostwriter_fee: int = 0
    featured_artist: Optional[str] = None
    feature_fee: int = 0
    feature_fame: int = 0
    lyrics: str = ""

    @property
    def use_ghostwriter(self) -> bool:
        return self.ghostwriter_fee > 0

    @property
    def total_cost(self) -> int:
        return self.rent + self.ghostwriter_fee + self.feature_fee


@dataclass
class ActionResult:
    """What a player action produced. Rejections carry the untouched state."""
    state: CareerState
    accepted: bool = True
    message: str = ""
    narrative: str = ""
    session: Optional[StudioSession] = None


@dataclass
class AdvanceResult:
    """What happened during one time advance."""
    state: CareerState
    settled: bool = False
    royalties: float = 0.0
    new_awards: List[Award] = field(default_factory=list)
    new_offer: Optional[SponsoredOffer] = None
    event_key: Optional[str] = None

    # Useful for balancing and for a future "history" view.
    stream_gains: Dict[str, int] = field(default_factory=dict)


def new_id(prefix: str = "") -> str:
    token = uuid.uuid4().hex[:9]
    return f"{prefix}-{token}" if prefix else token
