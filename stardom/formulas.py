# stardom/formulas.py
from __future__ import annotations

import math
import random
from typing import Iterable, Sequence, Tuple

from stardom.config import (
    BASE_STREAM_RATE,
    STREAM_BONUS_THRESHOLD,
    STREAM_BONUS_PER_FAN,
    STREAM_FAN_WEIGHT,
    STREAM_FAME_WEIGHT,
    STREAM_JITTER_MIN,
    STREAM_JITTER_SPAN,
    MIN_WEEKLY_STREAMS,
    WEEKLY_FAN_GROWTH,
    MONTHLY_FAN_GROWTH,
    GHOSTWRITER_BONUS,
    FEATURE_BONUS_CAP,
    FEATURE_FAME_PER_POINT,
    SKILL_WEIGHT,
    PERFORMANCE_WEIGHT,
    QUALITY_NOISE,
    SLIDER_CENTER,
    DISTRIBUTION_FAME_PER_QUALITY,
    RELEASE_FAN_MULTIPLIER,
    RELEASE_FAME_MULTIPLIER,
    POST_FAN_RATE,
    POST_FAN_FLAT,
    POST_FAN_MULTIPLIER,
    POST_FAME_MULTIPLIER,
    TRENDING_BOOST_BASE,
    TRENDING_BOOST_PER_MATCH,
)
from stardom.models import Skills


def clamp_int(x: int, lo: int, hi: int) -> int:
    return lo if x < lo else hi if x > hi else x


def stream_rate(fans: int) -> float:
    """Payout per stream. Flat below a million fans, then a slow linear climb."""
    if fans < STREAM_BONUS_THRESHOLD:
        return BASE_STREAM_RATE
    return BASE_STREAM_RATE + (fans - STREAM_BONUS_THRESHOLD) * STREAM_BONUS_PER_FAN


def weekly_stream_gain(rng: random.Random, *, quality: int, fans: int, fame: int) -> int:
    """
    New streams for one released song in one week. Draws exactly one number
    from `rng`. Never less than one stream.
    """
    quality_factor = (quality / 100) ** 2
    audience_factor = fans * STREAM_FAN_WEIGHT + fame * STREAM_FAME_WEIGHT
    jitter = STREAM_JITTER_MIN + rng.random() * STREAM_JITTER_SPAN
    gain = math.floor(audience_factor * quality_factor * jitter)
    return max(MIN_WEEKLY_STREAMS, gain)


def song_revenue(streams: int, rate: float) -> float:
    # All historical streams are revalued at today's rate.
    return streams * rate


def royalties(monthly_activity: int, rate: float, share: float) -> float:
    return monthly_activity * rate * share


def weekly_fan_growth(fans: int) -> int:
    return math.floor(fans * WEEKLY_FAN_GROWTH)


def monthly_fan_growth(fans: int) -> int:
    return math.floor(fans * MONTHLY_FAN_GROWTH)


def follower_growth(followers: int, rate: float) -> int:
    return math.floor(followers * rate)


def feature_bonus(artist_fame: int) -> float:
    return min(FEATURE_BONUS_CAP, artist_fame / FEATURE_FAME_PER_POINT)


def performance_bonus(tap_scores: Sequence[float]) -> float:
    if not tap_scores:
        return 0.0
    return sum(tap_scores) / len(tap_scores)


def song_quality(
    rng: random.Random,
    *,
    skills: Skills,
    tap_scores: Sequence[float],
    use_ghostwriter: bool = False,
    featured_artist_fame: int = 0,
) -> int:
    """
    Quality of a freshly mastered track, clamped to 0..100.
      - base: average of songwriting, production and vocals, plus the
        ghostwriter and featured-artist bumps
      - performance: average mini-game tap score
    """
    base = (skills.songwriting + skills.production + skills.vocals) / 3
    if use_ghostwriter:
        base += GHOSTWRITER_BONUS
    if featured_artist_fame > 0:
        base += feature_bonus(featured_artist_fame)

    perf = performance_bonus(tap_scores)
    raw = base * SKILL_WEIGHT + perf * PERFORMANCE_WEIGHT + rng.uniform(0, QUALITY_NOISE)
    return clamp_int(math.floor(raw), 0, 100)


def tap_score(position: float) -> float:
    """Perfect in the middle of the bar, zero at either edge."""
    return max(0.0, 100 - abs(SLIDER_CENTER - position) * 2)


def fallback_fan_gain(quality: int, fans: int) -> int:
    return math.floor(quality / 100 * (fans * 0.2) + 500)


def distribution_impact(*, platform: str, quality: int, base_fan_gain: int) -> Tuple[int, int]:
    """(fans, fame) from releasing a track on `platform`."""
    fans = math.floor(base_fan_gain * RELEASE_FAN_MULTIPLIER.get(platform, 1.0))
    fame = math.floor(
        quality * DISTRIBUTION_FAME_PER_QUALITY * RELEASE_FAME_MULTIPLIER.get(platform, 1.0)
    )
    return max(0, fans), max(0, fame)


def _normalize_tag(tag: str) -> str:
    return tag.strip().lstrip("#").lower()


def trending_matches(content: str, topics: Iterable[str]) -> int:
    """How many trending topics the post mentions, with or without the '#'."""
    text = content.lower()
    hits = 0
    for topic in topics:
        tag = _normalize_tag(topic)
        if tag and tag in text:
            hits += 1
    return hits


def trending_boost(matches: int) -> float:
    if matches <= 0:
        return 1.0
    return TRENDING_BOOST_BASE + TRENDING_BOOST_PER_MATCH * (matches - 1)


def social_post_impact(*, platform: str, fans: int, matches: int) -> Tuple[int, int]:
    """(fans, fame) gained from one social post."""
    base = fans * POST_FAN_RATE + POST_FAN_FLAT
    fan_gain = math.floor(base * POST_FAN_MULTIPLIER.get(platform, 1.0) * trending_boost(matches))
    fame_gain = math.floor(fan_gain * 2 * POST_FAME_MULTIPLIER.get(platform, 1.0))
    return fan_gain, fame_gain
