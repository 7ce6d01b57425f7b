# stardom/simulation.py
from __future__ import annotations

import calendar
import logging
import random
from dataclasses import replace
from datetime import date
from typing import Dict, List, Sequence, Tuple

from stardom.config import (
    WEEKS_PER_MONTH,
    AWARD_MONTH,
    FOLLOWER_GROWTH,
    OFFER_CHANCE,
    EVENT_CHANCE,
    MAX_ACTIVE_OFFERS,
    ALBUM_AWARD_FANS,
    ALBUM_AWARD_MIN_SONGS,
    ALBUM_AWARD_MIN_QUALITY,
    ARTIST_AWARD_FAME,
    AWARD_FAME_BONUS,
    AWARD_MONEY_BONUS,
    MAX_HEADLINES,
)
from stardom.catalog import PLATFORMS, revenue_share
from stardom.events import pick_event
from stardom.formulas import (
    clamp_int,
    follower_growth,
    monthly_fan_growth,
    royalties,
    song_revenue,
    stream_rate,
    weekly_fan_growth,
    weekly_stream_gain,
)
from stardom.models import (
    AdvanceResult,
    Award,
    CareerState,
    HistoryPoint,
    Song,
    SponsoredOffer,
    new_id,
)
from stardom.oracle import Narrator

logger = logging.getLogger(__name__)


def add_month(d: date) -> date:
    year = d.year + d.month // 12
    month = d.month % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def push_headline(news: Sequence[str], headline: str) -> Tuple[str, ...]:
    """Newest first, capped."""
    return (headline, *news)[:MAX_HEADLINES]


def push_offer(offers: Sequence[SponsoredOffer], offer: SponsoredOffer) -> Tuple[SponsoredOffer, ...]:
    # newest first; the oldest falls off the end of a full window
    return (offer, *offers)[:MAX_ACTIVE_OFFERS]


def accrue_streams(
    rng: random.Random,
    songs: Sequence[Song],
    *,
    fans: int,
    fame: int,
    rate: float,
) -> Tuple[Tuple[Song, ...], Dict[str, int]]:
    """One week of streams for every released song, revenue revalued at `rate`."""
    updated: List[Song] = []
    gains: Dict[str, int] = {}
    for song in songs:
        gain = weekly_stream_gain(rng, quality=song.quality, fans=fans, fame=fame)
        total = song.streams + gain
        updated.append(replace(song, streams=total, revenue=song_revenue(total, rate)))
        gains[song.id] = gain
    return tuple(updated), gains


def evaluate_awards(state: CareerState, *, year: int) -> List[Award]:
    """Award season. Looks at the career as it stood going into the new year."""
    won: List[Award] = []
    player = state.player

    if player.fans > ALBUM_AWARD_FANS and len(state.songs) >= ALBUM_AWARD_MIN_SONGS:
        best = max(state.songs, key=lambda s: s.quality)
        if best.quality > ALBUM_AWARD_MIN_QUALITY:
            won.append(Award(
                id=new_id(f"aoy-{year}"),
                year=year,
                category="Album of the Year",
                reason="Masterpiece of production and songwriting.",
            ))

    if player.fame > ARTIST_AWARD_FAME:
        won.append(Award(
            id=new_id(f"artist-{year}"),
            year=year,
            category="Artist of the Year",
            reason="Nobody owned the conversation like you did.",
        ))
    return won


def grow_followers(followers: Dict[str, int]) -> Dict[str, int]:
    return {
        platform: count + follower_growth(count, FOLLOWER_GROWTH.get(platform, 0.0))
        for platform, count in followers.items()
    }


def check_invariants(state: CareerState) -> None:
    """Programming errors, not player errors. Fails loudly under test."""
    p = state.player
    assert 0 <= state.current_week <= WEEKS_PER_MONTH, f"week {state.current_week} out of range"
    assert p.fans >= 0 and p.fame >= 0, "negative audience"
    assert p.skills.charisma >= 0, "negative charisma"
    assert set(PLATFORMS) <= set(p.followers), "follower map is missing platforms"
    assert all(v >= 0 for v in p.followers.values()), "negative followers"
    assert all(s.streams >= 0 for s in state.songs), "negative stream count"
    assert len(state.active_offers) <= MAX_ACTIVE_OFFERS, "too many active offers"


def clamp_state(state: CareerState) -> CareerState:
    """Production-side counterpart of check_invariants: pull values back in range."""
    p = state.player
    followers = {platform: max(0, int(p.followers.get(platform, 0))) for platform in PLATFORMS}
    skills = replace(p.skills, charisma=max(0, p.skills.charisma))
    player = replace(p, fans=max(0, p.fans), fame=max(0, p.fame), followers=followers, skills=skills)
    return replace(
        state,
        player=player,
        current_week=clamp_int(state.current_week, 0, WEEKS_PER_MONTH),
        songs=tuple(replace(s, streams=max(0, s.streams), quality=clamp_int(s.quality, 0, 100)) for s in state.songs),
        unreleased_songs=tuple(replace(s, quality=clamp_int(s.quality, 0, 100)) for s in state.unreleased_songs),
        active_offers=state.active_offers[:MAX_ACTIVE_OFFERS],
        news=state.news[:MAX_HEADLINES],
        unsettled_streams=max(0, state.unsettled_streams),
    )


def settle_invariants(state: CareerState) -> CareerState:
    """Assert under test; under `python -O` the asserts are gone and clamping still runs."""
    check_invariants(state)
    return clamp_state(state)


async def advance_time(
    state: CareerState,
    *,
    rng: random.Random,
    narrator: Narrator,
) -> AdvanceResult:
    """
    Advance the career by one week.

    Every call accrues a week of streams. Weeks 1..4 just trickle fans in;
    the call that would make week 5 rolls the calendar instead:
      - new trending topics, maybe a sponsorship offer
      - award season when the new month is January
      - monthly settlement (royalties, fan and follower compounding)
      - maybe a career event, unless something else needs the player first

    rng draw order: one per released song, then on rollover the offer roll,
    the event roll and, if it hits, the event pick.
    """
    prev = state
    player = prev.player
    rate = stream_rate(player.fans)

    songs, gains = accrue_streams(rng, prev.songs, fans=player.fans, fame=player.fame, rate=rate)
    unsettled = prev.unsettled_streams + sum(gains.values())
    next_week = prev.current_week + 1

    if next_week <= WEEKS_PER_MONTH:
        player = replace(player, fans=player.fans + weekly_fan_growth(player.fans))
        nxt = replace(
            prev,
            player=player,
            current_week=next_week,
            songs=songs,
            unsettled_streams=unsettled,
        )
        nxt = settle_invariants(nxt)
        return AdvanceResult(state=nxt, stream_gains=gains)

    # --- Month rollover ---
    next_date = add_month(prev.current_date)
    news = prev.news

    trending = await narrator.trending_topics()

    offers = prev.active_offers
    new_offer = None
    if rng.random() < OFFER_CHANCE:
        new_offer = await narrator.sponsored_offer(player.fame)
        offers = push_offer(offers, new_offer)

    awards: List[Award] = []
    if next_date.month == AWARD_MONTH:
        awards = evaluate_awards(prev, year=prev.current_date.year)
        if awards:
            player = replace(
                player,
                fame=player.fame + len(awards) * AWARD_FAME_BONUS,
                money=player.money + len(awards) * AWARD_MONEY_BONUS,
            )
            for award in awards:
                logger.info("%s won %s (%d)", player.stage_name, award.category, award.year)
                headline = await narrator.industry_headline(
                    player.stage_name, f"won {award.category} at the {award.year} awards"
                )
                news = push_headline(news, headline)

    # Settlement: everything streamed since the last one, at today's rate.
    share = revenue_share(prev.player.label_id)
    paid = royalties(unsettled, rate, share)
    player = replace(
        player,
        money=player.money + paid,
        fans=player.fans + monthly_fan_growth(prev.player.fans),
        followers=grow_followers(player.followers),
    )
    history = prev.history + (HistoryPoint(month=len(prev.history), fans=player.fans),)
    if unsettled > 0:
        news = push_headline(news, f"Royalties in: ${paid:,.0f} from {unsettled:,} streams last month.")
    logger.info(
        "Settled %s: %d streams, $%.2f royalties (share %.0f%%)",
        next_date.isoformat(), unsettled, paid, share * 100,
    )

    event_key = prev.pending_event
    new_event = None
    blocked = bool(awards) or prev.pending_event is not None or prev.pending_fan_interaction is not None
    if not blocked and rng.random() < EVENT_CHANCE:
        event = pick_event(rng)
        new_event = event.key
        event_key = event.key
        logger.debug("Career event triggered: %s", event.key)

    nxt = replace(
        prev,
        player=player,
        current_date=next_date,
        current_week=1,
        songs=songs,
        awards=prev.awards + tuple(awards),
        trending_topics=tuple(trending),
        active_offers=offers,
        history=history,
        news=news,
        unsettled_streams=0,
        pending_event=event_key,
    )
    nxt = settle_invariants(nxt)
    return AdvanceResult(
        state=nxt,
        settled=True,
        royalties=paid,
        new_awards=awards,
        new_offer=new_offer,
        event_key=new_event,
        stream_gains=gains,
    )
