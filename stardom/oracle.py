# stardom/oracle.py
"""
Narrative oracle: the external capability that writes flavor content.

`NarrativeOracle` is what a backend implements (see llm_oracle.LLMOracle).
The game never talks to a backend directly; it goes through `Narrator`,
which puts a timeout on every call and swaps in a fixed fallback when the
backend fails, times out or returns something unusable. An oracle outage
therefore only costs flavor text, never a turn.
"""

import asyncio
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Awaitable, List, Optional, Tuple

from stardom.formulas import clamp_int, fallback_fan_gain
from stardom.models import Comment, FanInteraction, Player, SponsoredOffer, new_id

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
MAX_COMMENTS = 3
MAX_FAN_OPTIONS = 3
TRENDING_COUNT = 5
BONUS_TYPES = ("fans", "charisma", "fame", "money")
MIN_CHARISMA_PENALTY = 1
MAX_CHARISMA_PENALTY = 10

FALLBACK_LYRICS = "The rhythm moves me, the lyrics flow free..."
FALLBACK_TRENDING = ["#MusicVibes", "#Stardom", "#NewArtist", "#ViralBeat", "#StudioLife"]
FALLBACK_RECEPTION = "The track is getting steady rotation on indie playlists."
FALLBACK_SUMMARY = "The legacy continues where you last left off."
FALLBACK_COMMENTS = [
    Comment(user="fan_zone", text="We love you! ❤️"),
    Comment(user="music_critic", text="Interesting choice..."),
    Comment(user="stan_account", text="STREAM THE NEW SINGLE!"),
]


def _finite(x) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool) and math.isfinite(x)


class OracleUnavailable(RuntimeError):
    """Raised by a backend that cannot serve a request at all."""


def fallback_offer() -> SponsoredOffer:
    return SponsoredOffer(
        id=new_id("fallback-offer"),
        brand="GlowWater",
        payout=5000,
        requirement="Post a photo drinking GlowWater with the tag #StayGlowing",
        charisma_penalty=3,
    )


def fallback_headline(artist_name: str) -> str:
    return f"{artist_name} is making waves in the industry!"


class NarrativeOracle(ABC):
    """Abstract flavor-content backend. Any method may raise."""

    @abstractmethod
    async def generate_lyrics(self, title: str, genre: str) -> str:
        ...

    @abstractmethod
    async def generate_trending_topics(self) -> List[str]:
        ...

    @abstractmethod
    async def generate_sponsored_offer(self, fame: int) -> SponsoredOffer:
        ...

    @abstractmethod
    async def generate_industry_headline(self, artist_name: str, event: str) -> str:
        ...

    @abstractmethod
    async def generate_social_engagement(
        self, artist_name: str, content: str, platform: str
    ) -> List[Comment]:
        ...

    @abstractmethod
    async def calculate_song_impact(
        self, title: str, quality: int, fans: int, genre: str
    ) -> Tuple[int, str]:
        """(fan gain, one-sentence reception)"""
        ...

    @abstractmethod
    async def generate_thumbnail(self, title: str, artist_name: str, genre: str) -> Optional[str]:
        """A data URL for the image, or None."""
        ...

    @abstractmethod
    async def generate_fan_interaction(
        self, artist_name: str, content: str
    ) -> Optional[FanInteraction]:
        ...

    @abstractmethod
    async def generate_career_summary(
        self, player: Player, song_count: int, award_count: int
    ) -> str:
        ...


class OfflineOracle(NarrativeOracle):
    """No backend configured. Every call fails, so the Narrator falls back."""

    async def _unavailable(self):
        raise OracleUnavailable("no narrative oracle configured")

    async def generate_lyrics(self, title, genre):
        return await self._unavailable()

    async def generate_trending_topics(self):
        return await self._unavailable()

    async def generate_sponsored_offer(self, fame):
        return await self._unavailable()

    async def generate_industry_headline(self, artist_name, event):
        return await self._unavailable()

    async def generate_social_engagement(self, artist_name, content, platform):
        return await self._unavailable()

    async def calculate_song_impact(self, title, quality, fans, genre):
        return await self._unavailable()

    async def generate_thumbnail(self, title, artist_name, genre):
        return await self._unavailable()

    async def generate_fan_interaction(self, artist_name, content):
        return await self._unavailable()

    async def generate_career_summary(self, player, song_count, award_count):
        return await self._unavailable()


class Narrator:
    """
    Fault-tolerant front for a NarrativeOracle.

    Each method awaits the backend under `timeout` seconds, sanity-checks the
    answer and returns the documented fallback on any failure.
    """

    def __init__(self, oracle: Optional[NarrativeOracle] = None, timeout: float = DEFAULT_TIMEOUT):
        self.oracle = oracle or OfflineOracle()
        self.timeout = timeout

    async def _ask(self, call: str, pending: Awaitable, fallback):
        try:
            return await asyncio.wait_for(pending, timeout=self.timeout)
        except OracleUnavailable:
            logger.debug("Oracle offline for %s, using fallback", call)
        except asyncio.TimeoutError:
            logger.warning("Oracle timed out after %.1fs on %s, using fallback", self.timeout, call)
        except Exception as exc:
            logger.warning("Oracle call %s failed, using fallback: %s", call, exc)
        return fallback

    async def lyrics(self, title: str, genre: str) -> str:
        text = await self._ask(
            "generate_lyrics", self.oracle.generate_lyrics(title, genre), FALLBACK_LYRICS
        )
        return text.strip() if isinstance(text, str) and text.strip() else FALLBACK_LYRICS

    async def trending_topics(self) -> List[str]:
        topics = await self._ask(
            "generate_trending_topics",
            self.oracle.generate_trending_topics(),
            list(FALLBACK_TRENDING),
        )
        if not isinstance(topics, list):
            return list(FALLBACK_TRENDING)
        cleaned = [t.strip() for t in topics if isinstance(t, str) and t.strip()]
        return cleaned[:TRENDING_COUNT] if cleaned else list(FALLBACK_TRENDING)

    async def sponsored_offer(self, fame: int) -> SponsoredOffer:
        offer = await self._ask(
            "generate_sponsored_offer", self.oracle.generate_sponsored_offer(fame), None
        )
        if not isinstance(offer, SponsoredOffer) or not _finite(offer.payout) or offer.payout < 0:
            return fallback_offer()
        if not _finite(offer.charisma_penalty):
            return fallback_offer()
        penalty = clamp_int(round(offer.charisma_penalty), MIN_CHARISMA_PENALTY, MAX_CHARISMA_PENALTY)
        if penalty != offer.charisma_penalty:
            logger.debug("Clamped charisma penalty %r to %d", offer.charisma_penalty, penalty)
            offer = replace(offer, charisma_penalty=penalty)
        return offer

    async def industry_headline(self, artist_name: str, event: str) -> str:
        text = await self._ask(
            "generate_industry_headline",
            self.oracle.generate_industry_headline(artist_name, event),
            None,
        )
        if isinstance(text, str) and text.strip():
            return text.strip()
        return fallback_headline(artist_name)

    async def social_engagement(self, artist_name: str, content: str, platform: str) -> List[Comment]:
        comments = await self._ask(
            "generate_social_engagement",
            self.oracle.generate_social_engagement(artist_name, content, platform),
            list(FALLBACK_COMMENTS),
        )
        if not isinstance(comments, list):
            return list(FALLBACK_COMMENTS)
        return [c for c in comments if isinstance(c, Comment)][:MAX_COMMENTS]

    async def song_impact(self, title: str, quality: int, fans: int, genre: str) -> Tuple[int, str]:
        fallback = (fallback_fan_gain(quality, fans), FALLBACK_RECEPTION)
        impact = await self._ask(
            "calculate_song_impact",
            self.oracle.calculate_song_impact(title, quality, fans, genre),
            fallback,
        )
        try:
            fan_gain, reception = impact
            fan_gain = max(0, math.floor(fan_gain))
        except (TypeError, ValueError, OverflowError):
            logger.warning("Unusable song impact %r, using fallback", impact)
            return fallback
        return fan_gain, (reception or FALLBACK_RECEPTION)

    async def thumbnail(self, title: str, artist_name: str, genre: str) -> Optional[str]:
        image = await self._ask(
            "generate_thumbnail", self.oracle.generate_thumbnail(title, artist_name, genre), None
        )
        return image if isinstance(image, str) and image else None

    async def fan_interaction(self, artist_name: str, content: str) -> Optional[FanInteraction]:
        interaction = await self._ask(
            "generate_fan_interaction",
            self.oracle.generate_fan_interaction(artist_name, content),
            None,
        )
        if not isinstance(interaction, FanInteraction):
            return None
        options = tuple(o for o in interaction.options if o.bonus_type in BONUS_TYPES)
        if not options:
            return None
        return FanInteraction(
            username=interaction.username,
            message=interaction.message,
            options=options[:MAX_FAN_OPTIONS],
        )

    async def career_summary(self, player: Player, song_count: int, award_count: int) -> str:
        text = await self._ask(
            "generate_career_summary",
            self.oracle.generate_career_summary(player, song_count, award_count),
            FALLBACK_SUMMARY,
        )
        return text.strip() if isinstance(text, str) and text.strip() else FALLBACK_SUMMARY


