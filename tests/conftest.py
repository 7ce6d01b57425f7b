import asyncio
import random
from dataclasses import replace
from datetime import date

import pytest

from stardom.actions import new_career
from stardom.models import (
    Award,
    Comment,
    FanInteraction,
    FanReplyOption,
    HistoryPoint,
    PostImpact,
    SocialPost,
    Song,
    SponsoredOffer,
)
from stardom.oracle import NarrativeOracle, Narrator


class ScriptedRandom(random.Random):
    """random() walks through a fixed list of values, cycling at the end."""

    def __init__(self, values):
        super().__init__(0)
        self.values = list(values)
        self.calls = 0

    def random(self):
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


class StubOracle(NarrativeOracle):
    """Canned answers; records every call by name."""

    def __init__(self, fan_gain=1000, interaction=None, thumbnail="data:image/png;base64,AAAA"):
        self.calls = []
        self.fan_gain = fan_gain
        self.interaction = interaction
        self.thumbnail = thumbnail
        self.offer_count = 0

    async def generate_lyrics(self, title, genre):
        self.calls.append("lyrics")
        return f"la la {title}"

    async def generate_trending_topics(self):
        self.calls.append("trending")
        return ["#One", "#Two", "#Three", "#Four", "#Five"]

    async def generate_sponsored_offer(self, fame):
        self.calls.append("offer")
        self.offer_count += 1
        return SponsoredOffer(
            id=f"stub-offer-{self.offer_count}",
            brand="BeatBox Energy",
            payout=2500,
            requirement="Unbox a can on camera",
            charisma_penalty=2,
        )

    async def generate_industry_headline(self, artist_name, event):
        self.calls.append("headline")
        return f"BREAKING: {artist_name} {event}"

    async def generate_social_engagement(self, artist_name, content, platform):
        self.calls.append("engagement")
        return [Comment(user="superfan", text="obsessed")]

    async def calculate_song_impact(self, title, quality, fans, genre):
        self.calls.append("impact")
        return self.fan_gain, "Critics are split but the kids love it."

    async def generate_thumbnail(self, title, artist_name, genre):
        self.calls.append("thumbnail")
        return self.thumbnail

    async def generate_fan_interaction(self, artist_name, content):
        self.calls.append("fan_interaction")
        return self.interaction

    async def generate_career_summary(self, player, song_count, award_count):
        self.calls.append("summary")
        return f"{player.stage_name} has {song_count} songs."


class FailingOracle(NarrativeOracle):
    """Every call blows up like a dead network."""

    async def _boom(self, *args):
        raise ConnectionError("oracle is down")

    generate_lyrics = _boom
    generate_trending_topics = _boom
    generate_sponsored_offer = _boom
    generate_industry_headline = _boom
    generate_social_engagement = _boom
    calculate_song_impact = _boom
    generate_thumbnail = _boom
    generate_fan_interaction = _boom
    generate_career_summary = _boom


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def stub_oracle():
    return StubOracle()


@pytest.fixture
def narrator(stub_oracle):
    return Narrator(stub_oracle)


@pytest.fixture
def failing_narrator():
    return Narrator(FailingOracle())


@pytest.fixture
def career():
    """A brand new career."""
    return new_career("Jordan Reyes", "J-Rey", "Hip-Hop")


def make_song(title, quality, *, streams=0, mastered=True, released_on=date(2025, 1, 1), **kw):
    return Song(
        id=kw.pop("id", f"song-{title.lower().replace(' ', '-')}"),
        title=title,
        genre=kw.pop("genre", "Pop"),
        quality=quality,
        release_date=released_on,
        streams=streams,
        is_mastered=mastered,
        **kw,
    )


@pytest.fixture
def populated_career(career):
    """Mid-career state with something in every collection."""
    player = replace(career.player, fans=250_000, fame=80_000, money=42_500.5)
    return replace(
        career,
        player=player,
        current_date=date(2025, 6, 1),
        current_week=3,
        songs=(
            make_song("Neon Nights", 88, streams=12_000, revenue=6000.0, lyrics="city lights"),
            make_song("Low Tide", 61, streams=3_400, featured_artist="Mara Vex", is_music_video=True),
        ),
        unreleased_songs=(make_song("Rough Idea", 0, mastered=False, released_on=date(2025, 5, 1)),),
        awards=(Award(id="aoy-2024-x", year=2024, category="Album of the Year", reason="Great."),),
        social_posts=(
            SocialPost(
                id="p1",
                platform="YouTube",
                content="video out",
                type="Music Video",
                likes=40,
                comments=(Comment(user="a", text="b"),),
                timestamp=date(2025, 5, 1),
                impact=PostImpact(fans=20, fame=80, streams_boost=500),
                video_title="Low Tide",
                video_description="moody",
                thumbnail_url="data:image/png;base64,AAAA",
            ),
        ),
        trending_topics=("#One", "#Two"),
        active_offers=(
            SponsoredOffer(id="o1", brand="GlowWater", payout=5000, requirement="drink", charisma_penalty=3),
        ),
        history=(HistoryPoint(0, 100), HistoryPoint(1, 90_000)),
        news=("Headline one", "Headline two"),
        unsettled_streams=777,
        pending_event="viral_sound",
        pending_fan_interaction=FanInteraction(
            username="stan99",
            message="love u",
            options=(FanReplyOption(label="Reply", result="They cried.", bonus_type="fans", bonus_value=50),),
        ),
    )
